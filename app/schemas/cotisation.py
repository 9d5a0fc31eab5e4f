"""
Schémas Pydantic pour les cotisations, les paiements et la situation
financière des membres.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.config import settings


class CotisationCreate(BaseModel):
    """Création d'une cotisation pour un membre et un mandat."""
    membre_id: int = Field(..., description="ID du membre")
    mandat_id: int = Field(..., description="ID du mandat")
    montant: int = Field(..., ge=0, description="Montant dû (FCFA)")


class CotisationUpdate(BaseModel):
    membre_id: Optional[int] = None
    mandat_id: Optional[int] = None
    montant: Optional[int] = Field(None, ge=0)


class CotisationResponse(BaseModel):
    """Cotisation avec les informations du membre et du mandat."""
    id: int
    membre_id: int
    mandat_id: int
    montant: int
    membre_nom: str
    membre_email: Optional[str] = None
    mandat_annee: int
    mandat_description: Optional[str] = None
    club_id: int
    created_at: datetime


class BulkCotisationRequest(BaseModel):
    """Création des cotisations de tous les membres actifs d'un club pour un mandat."""
    mandat_id: int
    montant: int = Field(default=settings.COTISATION_MONTANT_DEFAUT, ge=0)


class MembreIgnore(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    reason: str


class BulkCotisationResult(BaseModel):
    success: bool = True
    cotisations_creees: int
    membres_ignores: int
    membres_ignores_details: List[MembreIgnore] = []
    mandat_info: dict
    message: str


class PaiementCotisationCreate(BaseModel):
    membre_id: int
    club_id: int
    montant: int = Field(..., gt=0, description="Montant payé (FCFA)")
    date: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class PaiementCotisationResponse(BaseModel):
    id: int
    membre_id: int
    club_id: int
    montant: int
    date: datetime
    commentaires: Optional[str] = None
    membre_nom: str

    class Config:
        from_attributes = True


class SituationMembre(BaseModel):
    """Situation de cotisation d'un membre dans un club."""
    membre_id: int
    nom_complet: str
    email: Optional[str] = None
    numero_membre: Optional[str] = None
    club_id: int
    club_nom: str
    is_active: bool = True
    nombre_cotisations: int
    montant_total_cotisations: int
    nombre_paiements: int
    montant_total_paiements: int
    solde: int
    taux_recouvrement: float
    statut: str
    dernier_paiement: Optional[datetime] = None


class PaiementCotisationUpdate(BaseModel):
    montant: Optional[int] = Field(None, gt=0)
    date: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)
