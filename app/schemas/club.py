"""
Schémas Pydantic pour les clubs, les mandats et les référentiels d'un club
(types de réunion, commissions, postes du comité, hiérarchie budgétaire).
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class ClubBase(BaseModel):
    """Schéma de base pour un club."""
    name: str = Field(..., min_length=2, max_length=200, description="Nom du club")
    date_creation: Optional[date] = None
    numero_club: Optional[str] = Field(None, max_length=50)
    numero_telephone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    lieu_reunion: Optional[str] = Field(None, max_length=200)
    parraine_par: Optional[str] = Field(None, max_length=200)
    jour_reunion: Optional[str] = Field(None, max_length=20)
    heure_reunion: Optional[str] = Field(None, max_length=10, description="Heure habituelle, ex. 19:30")
    frequence: Optional[str] = Field(None, max_length=50)
    adresse: Optional[str] = None


class ClubCreate(ClubBase):
    pass


class ClubUpdate(BaseModel):
    """Mise à jour partielle d'un club."""
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    date_creation: Optional[date] = None
    numero_club: Optional[str] = Field(None, max_length=50)
    numero_telephone: Optional[str] = Field(None, max_length=20)
    email: Optional[EmailStr] = None
    lieu_reunion: Optional[str] = Field(None, max_length=200)
    parraine_par: Optional[str] = Field(None, max_length=200)
    jour_reunion: Optional[str] = Field(None, max_length=20)
    heure_reunion: Optional[str] = Field(None, max_length=10)
    frequence: Optional[str] = Field(None, max_length=50)
    adresse: Optional[str] = None


class ClubResponse(ClubBase):
    id: int
    email: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class MandatCreate(BaseModel):
    """Création d'un nouveau mandat (transition d'année)."""
    club_id: int
    annee: int = Field(..., ge=1900, le=2200, description="Année du mandat")
    date_debut: date
    date_fin: date
    description: Optional[str] = Field(None, max_length=200)
    montant_cotisation: int = Field(default=0, ge=0)
    est_actuel: bool = Field(default=True, description="Devient le mandat actuel du club")

    @field_validator("date_fin")
    @classmethod
    def validate_date_fin(cls, v: date, info) -> date:
        if "date_debut" in info.data and v <= info.data["date_debut"]:
            raise ValueError("La date de fin doit être après la date de début")
        return v


class MandatResponse(BaseModel):
    id: int
    club_id: int
    annee: int
    date_debut: date
    date_fin: date
    description: Optional[str] = None
    montant_cotisation: int
    est_actuel: bool
    periode_complete: str

    class Config:
        from_attributes = True


class TypeReunionCreate(BaseModel):
    libelle: str = Field(..., min_length=1, max_length=100)


class TypeReunionResponse(BaseModel):
    id: int
    club_id: int
    libelle: str

    class Config:
        from_attributes = True


class CommissionCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    role_et_responsabilite: Optional[str] = None


class CommissionUpdate(BaseModel):
    nom: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    role_et_responsabilite: Optional[str] = None


class CommissionResponse(BaseModel):
    id: int
    club_id: int
    nom: str
    description: Optional[str] = None
    role_et_responsabilite: Optional[str] = None

    class Config:
        from_attributes = True


class PosteComiteCreate(BaseModel):
    nom: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class PosteComiteResponse(BaseModel):
    id: int
    club_id: int
    nom: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class TypeBudgetCreate(BaseModel):
    libelle: str = Field(..., min_length=1, max_length=100)


class TypeBudgetResponse(BaseModel):
    id: int
    libelle: str

    class Config:
        from_attributes = True


class CategoryBudgetCreate(BaseModel):
    type_budget_id: int
    libelle: str = Field(..., min_length=1, max_length=100)


class CategoryBudgetResponse(BaseModel):
    id: int
    type_budget_id: int
    libelle: str

    class Config:
        from_attributes = True


class SousCategoryBudgetCreate(BaseModel):
    category_budget_id: int
    libelle: str = Field(..., min_length=1, max_length=100)


class SousCategoryBudgetResponse(BaseModel):
    id: int
    club_id: int
    category_budget_id: int
    libelle: str

    class Config:
        from_attributes = True
