"""
Schémas Pydantic pour les galas, leurs invités, tables, tickets et tombolas.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class GalaCreate(BaseModel):
    """Création d'un gala ; la date est une chaîne au format YYYY-MM-DD."""
    libelle: str = Field(..., min_length=1, max_length=200)
    date: str = Field(..., description="Date du gala (YYYY-MM-DD)")
    lieu: str = Field(..., min_length=1, max_length=300)
    nombre_tables: int = Field(..., ge=1, le=100)
    nombre_souches_tickets: int = Field(..., ge=1)
    quantite_par_souche_tickets: int = Field(..., ge=1)
    nombre_souches_tombola: int = Field(..., ge=1)
    quantite_par_souche_tombola: int = Field(..., ge=1)


class GalaUpdate(BaseModel):
    """Mise à jour partielle d'un gala."""
    libelle: Optional[str] = Field(None, max_length=200)
    date: Optional[str] = None
    lieu: Optional[str] = Field(None, max_length=300)
    nombre_tables: Optional[int] = Field(None, ge=1, le=100)
    nombre_souches_tickets: Optional[int] = Field(None, ge=1)
    quantite_par_souche_tickets: Optional[int] = Field(None, ge=1)
    nombre_souches_tombola: Optional[int] = Field(None, ge=1)
    quantite_par_souche_tombola: Optional[int] = Field(None, ge=1)


class GalaResponse(BaseModel):
    id: int
    libelle: str
    date: datetime
    lieu: str
    nombre_tables: int
    nombre_invites: int = 0
    nombre_tickets_vendus: int = 0
    nombre_tombolas_vendues: int = 0


class GalaTableResponse(BaseModel):
    id: int
    table_libelle: str
    nombre_invites: int = 0


class GalaVenteResume(BaseModel):
    id: int
    membre_id: Optional[int] = None
    participant_nom: str
    quantite: int


class GalaInviteResponse(BaseModel):
    id: int
    gala_id: int
    nom_prenom: str
    present: Optional[bool] = None
    table_id: Optional[int] = None
    table_libelle: Optional[str] = None
    date_affectation: Optional[datetime] = None


class GalaDetailResponse(GalaResponse):
    nombre_souches_tickets: int
    quantite_par_souche_tickets: int
    nombre_souches_tombola: int
    quantite_par_souche_tombola: int
    total_tickets_disponibles: int
    total_tombola_disponibles: int
    invites: List[GalaInviteResponse] = []
    tables: List[GalaTableResponse] = []
    tickets: List[GalaVenteResume] = []
    tombolas: List[GalaVenteResume] = []


class GalaInviteCreate(BaseModel):
    gala_id: int
    nom_prenom: str = Field(..., min_length=1, max_length=200)
    present: Optional[bool] = None

    @field_validator("nom_prenom")
    @classmethod
    def strip_nom(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Le nom et prénom sont obligatoires")
        return v


class GalaInviteUpdate(BaseModel):
    nom_prenom: Optional[str] = Field(None, min_length=1, max_length=200)
    present: Optional[bool] = None


class AffecterTableRequest(BaseModel):
    table_id: int


class ImportInvitesResult(BaseModel):
    """Résultat de l'import d'un fichier Excel d'invités."""
    est_succes: bool
    nombre_lignes_traitees: int = 0
    nombre_invites_crees: int = 0
    nombre_erreurs: int = 0
    nombre_doublons: int = 0
    erreurs: List[str] = []
    resume: str = ""


class GalaVenteCreate(BaseModel):
    """Vente de tickets ou de tombola : un membre ou un participant externe."""
    gala_id: int
    membre_id: Optional[int] = None
    externe: Optional[str] = Field(None, max_length=250)
    quantite: int = Field(..., ge=1)


class GalaVenteUpdate(BaseModel):
    membre_id: Optional[int] = None
    externe: Optional[str] = Field(None, max_length=250)
    quantite: Optional[int] = Field(None, ge=1)


class GalaVenteResponse(BaseModel):
    id: int
    gala_id: int
    gala_libelle: str
    membre_id: Optional[int] = None
    membre_email: Optional[str] = None
    externe: Optional[str] = None
    participant_nom: str
    quantite: int


class GalaVenteBulkRequest(BaseModel):
    ventes: List[GalaVenteCreate] = Field(..., min_length=1)


class GalaVenteBulkResult(BaseModel):
    nombre_total: int
    creees: List[GalaVenteResponse] = []
    erreurs: List[str] = []


class GagnantTombola(BaseModel):
    """Gagnant du tirage de la tombola."""
    position: int
    membre_id: Optional[int] = None
    externe: Optional[str] = None
    participant_nom: str
    participant_email: Optional[str] = None
    numero_ticket_gagnant: int
    quantite_totale_participant: int


class TirageResult(BaseModel):
    gala_id: int
    gala_libelle: str
    nombre_gagnants_demandes: int
    nombre_tickets_total: int
    date_tirage: datetime
    gagnants: List[GagnantTombola] = []
