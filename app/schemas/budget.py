"""
Schémas Pydantic pour les rubriques budgétaires et leurs réalisations.
"""

import datetime as dt
from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class RubriqueBudgetCreate(BaseModel):
    """Création d'une rubrique budgétaire pour un mandat."""
    libelle: str = Field(..., min_length=1, max_length=200)
    prix_unitaire: Decimal = Field(..., ge=0, description="Prix unitaire")
    quantite: int = Field(default=1, ge=1)
    sous_category_budget_id: int


class RubriqueBudgetUpdate(BaseModel):
    libelle: Optional[str] = Field(None, min_length=1, max_length=200)
    prix_unitaire: Optional[Decimal] = Field(None, ge=0)
    quantite: Optional[int] = Field(None, ge=1)
    sous_category_budget_id: Optional[int] = None


class RealisationResume(BaseModel):
    id: int
    date: date
    montant: Decimal
    commentaires: Optional[str] = None

    class Config:
        from_attributes = True


class RubriqueBudgetResponse(BaseModel):
    id: int
    libelle: str
    prix_unitaire: Decimal
    quantite: int
    montant_total: Decimal
    sous_category_budget_id: int
    sous_category_libelle: str
    category_budget_libelle: str
    type_budget_libelle: str
    mandat_id: int
    mandat_annee: int
    club_id: int
    club_nom: str
    nombre_realisations: int
    montant_realise: Decimal
    ecart_budget_realise: Decimal
    pourcentage_realisation: float


class RubriqueBudgetDetailResponse(RubriqueBudgetResponse):
    realisations: List[RealisationResume] = []


class RealisationCreate(BaseModel):
    date: date
    montant: Decimal = Field(..., gt=0, description="Montant réalisé")
    commentaires: Optional[str] = Field(None, max_length=500)


class RealisationUpdate(BaseModel):
    date: Optional[dt.date] = None
    montant: Optional[Decimal] = Field(None, gt=0)
    commentaires: Optional[str] = Field(None, max_length=500)


class RealisationResponse(BaseModel):
    id: int
    date: date
    montant: Decimal
    commentaires: Optional[str] = None
    rubrique_budget_id: int
    rubrique_libelle: str
    sous_category_libelle: str
    category_budget_libelle: str
    type_budget_libelle: str
    mandat_annee: int
    club_nom: str
