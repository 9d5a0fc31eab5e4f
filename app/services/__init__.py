"""
Module des services métier de RotaryClubManager.
"""

from .email_service import EmailService, email_service
from .cotisation_service import CotisationService, determiner_statut_membre
from .tombola_service import tirer_gagnants
from .excel_import import analyser_invites
from .compte_rendu import generer_compte_rendu

__all__ = [
    "EmailService",
    "email_service",
    "CotisationService",
    "determiner_statut_membre",
    "tirer_gagnants",
    "analyser_invites",
    "generer_compte_rendu",
]
