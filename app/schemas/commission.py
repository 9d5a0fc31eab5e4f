"""
Schémas Pydantic pour les membres des commissions, le comité et les
vues des membres d'un club.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class AffecterMembreCommissionRequest(BaseModel):
    membre_id: int
    mandat_id: int
    est_responsable: bool = False
    date_nomination: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class ModifierAffectationRequest(BaseModel):
    est_responsable: Optional[bool] = None
    est_actif: Optional[bool] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class MembreCommissionResponse(BaseModel):
    id: int
    commission_id: int
    membre_id: int
    nom_complet_membre: str
    email_membre: Optional[str] = None
    est_responsable: bool
    est_actif: bool
    date_nomination: datetime
    date_demission: Optional[datetime] = None
    commentaires: Optional[str] = None
    mandat_id: int
    mandat_annee: int
    mandat_description: Optional[str] = None


class MembreDisponible(BaseModel):
    id: int
    nom_complet: str
    email: Optional[str] = None


class CommissionMembreInfo(BaseModel):
    commission_id: int
    nom_commission: str
    est_responsable: bool
    date_nomination: datetime


class MembreClubResponse(BaseModel):
    id: int
    nom_complet: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    numero_membre: Optional[str] = None
    is_active: bool
    role: str


class MembreClubCompletResponse(MembreClubResponse):
    commissions_actuelles: List[CommissionMembreInfo] = []


class MandatInfo(BaseModel):
    mandat_id: int
    annee: int
    description: Optional[str] = None


class FonctionMembreInfo(BaseModel):
    poste_id: int
    nom_poste: str


class MembreFonctionCommission(BaseModel):
    membre_id: int
    nom_complet_membre: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    mandat_actuel: MandatInfo
    fonction: Optional[FonctionMembreInfo] = None
    commissions: List[CommissionMembreInfo] = []


class NommerMembreComiteRequest(BaseModel):
    membre_id: int
    poste_comite_id: int
    mandat_id: int
    date_nomination: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class NommerMembreCommissionRequest(BaseModel):
    membre_id: int
    commission_id: int
    mandat_id: int
    est_responsable: bool = False
    date_nomination: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class DemissionRequest(BaseModel):
    date_demission: Optional[datetime] = None
    commentaires: Optional[str] = Field(None, max_length=500)


class MembreComiteResponse(BaseModel):
    id: int
    poste_comite_id: int
    poste_nom: str
    membre_id: int
    nom_complet_membre: str
    mandat_id: int
    mandat_annee: int
    club_id: int
    est_actif: bool
    date_nomination: datetime
    date_demission: Optional[datetime] = None
    commentaires: Optional[str] = None
