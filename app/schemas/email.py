"""
Schémas Pydantic pour l'envoi des emails de situation de cotisation.
"""

from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field


class EmailRequest(BaseModel):
    """Email simple transmis au service d'envoi."""
    to: List[EmailStr] = Field(..., min_length=1)
    subject: str
    html_body: str
    text_body: Optional[str] = None


class EmailResult(BaseModel):
    """Résultat d'un envoi."""
    success: bool
    email_id: Optional[str] = None
    recipients_sent: int = 0
    error_message: Optional[str] = None


class SendToMemberRequest(BaseModel):
    membre_id: int
    club_id: int


class SendToMultipleMembersRequest(BaseModel):
    club_id: int
    membres_ids: List[int] = Field(..., min_length=1, description="Au moins un membre")


class SendToAllClubMembersRequest(BaseModel):
    club_id: int
    include_inactive: bool = False


class TestEmailRequest(BaseModel):
    test_email: EmailStr


class EmailMembreResult(BaseModel):
    """Résultat de l'envoi pour un membre."""
    membre_id: int
    email: Optional[str] = None
    nom_complet: Optional[str] = None
    success: bool
    message: str
    email_id: Optional[str] = None


class EmailEnvoiStatistiques(BaseModel):
    total_membres: int
    emails_envoyes: int
    emails_echoues: int
    taux_reussite: float


class EmailEnvoiGroupeResult(BaseModel):
    success: bool
    message: str
    statistiques: EmailEnvoiStatistiques
    resultats: List[EmailMembreResult] = []
