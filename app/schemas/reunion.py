"""
Schémas Pydantic pour les réunions, l'ordre du jour, les présences,
les invités et le compte-rendu.
"""

from datetime import date, datetime, time
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field


class ReunionCreate(BaseModel):
    """Création ou modification simple d'une réunion."""
    date: date
    heure: time
    type_reunion_id: int


class ReunionUpdate(ReunionCreate):
    pass


class ReunionCompleteCreate(ReunionCreate):
    """Réunion créée avec son ordre du jour."""
    ordres_du_jour: List[str] = []


class ReunionCompleteUpdate(ReunionCompleteCreate):
    remplacer_ordres_du_jour: bool = False


class OrdreDuJourResponse(BaseModel):
    id: int
    description: str
    rapport: Optional[str] = None

    class Config:
        from_attributes = True


class PresenceResume(BaseModel):
    id: int
    membre_id: int
    nom_complet_membre: str
    email_membre: Optional[str] = None


class InviteResume(BaseModel):
    id: int
    nom: str
    prenom: str
    email: Optional[str] = None
    telephone: Optional[str] = None
    organisation: Optional[str] = None

    class Config:
        from_attributes = True


class ReunionResponse(BaseModel):
    id: int
    date: date
    heure: time
    club_id: int
    club_nom: str
    type_reunion_id: int
    type_reunion_libelle: str
    nombre_ordres_du_jour: int = 0
    nombre_presences: int = 0
    nombre_invites: int = 0


class ReunionDetailResponse(ReunionResponse):
    ordres_du_jour: List[OrdreDuJourResponse] = []
    presences: List[PresenceResume] = []
    invites: List[InviteResume] = []


class EvenementCalendrier(BaseModel):
    """Entrée du calendrier mensuel (réunion ou anniversaire)."""
    type: str
    id: Optional[int] = None
    libelle: str
    date: datetime
    membre_id: Optional[int] = None


class CompteRenduPresence(BaseModel):
    nom_complet: str


class CompteRenduInvite(BaseModel):
    nom: str
    prenom: str
    organisation: Optional[str] = None


class CompteRenduOrdreDuJour(BaseModel):
    numero: int
    description: str
    contenu: Optional[str] = None


class CompteRenduRequest(BaseModel):
    """Contenu saisi pour générer le compte-rendu Word d'une réunion."""
    presences: List[CompteRenduPresence] = []
    invites: List[CompteRenduInvite] = []
    ordres_du_jour: List[CompteRenduOrdreDuJour] = []
    divers: Optional[str] = None


class MarquerPresenceRequest(BaseModel):
    membre_id: int


class MarquerPresencesBatchRequest(BaseModel):
    membres_ids: List[int] = []


class PresenceDetailResponse(BaseModel):
    id: int
    membre_id: int
    nom_complet_membre: str
    email_membre: Optional[str] = None
    est_actif_membre: bool
    reunion_id: int


class MembreAbsent(BaseModel):
    id: int
    nom_complet: str
    email: Optional[str] = None


class InviteReunionCreate(BaseModel):
    nom: str = Field(..., min_length=2, max_length=100)
    prenom: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    telephone: Optional[str] = Field(None, max_length=20)
    organisation: Optional[str] = Field(None, max_length=200)


class InviteReunionUpdate(InviteReunionCreate):
    pass


class InviteReunionResponse(BaseModel):
    id: int
    nom: str
    prenom: str
    nom_complet: str
    email: Optional[str] = None
    telephone: Optional[str] = None
    organisation: Optional[str] = None
    reunion_id: int

    class Config:
        from_attributes = True


class InvitesBatchRequest(BaseModel):
    invites: List[InviteReunionCreate] = Field(..., min_length=1)
