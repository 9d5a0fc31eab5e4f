"""
Module des modèles SQLAlchemy pour RotaryClubManager.
Définit toutes les entités de la base de données.
"""

from .user import User, UserRole, UserClub
from .club import Club, Mandat
from .cotisation import Cotisation, PaiementCotisation
from .commission import Commission, MembreCommission, PosteComite, MembreComite
from .reunion import TypeReunion, Reunion, OrdreDuJour, ListePresence, InviteReunion
from .gala import Gala, GalaInvites, GalaTable, GalaTableAffectation, GalaTicket, GalaTombola
from .budget import (
    TypeBudget,
    CategoryBudget,
    SousCategoryBudget,
    RubriqueBudget,
    RubriqueBudgetRealise,
)

__all__ = [
    # User
    "User",
    "UserRole",
    "UserClub",
    # Club
    "Club",
    "Mandat",
    # Cotisation
    "Cotisation",
    "PaiementCotisation",
    # Comité et commissions
    "Commission",
    "MembreCommission",
    "PosteComite",
    "MembreComite",
    # Réunions
    "TypeReunion",
    "Reunion",
    "OrdreDuJour",
    "ListePresence",
    "InviteReunion",
    # Galas
    "Gala",
    "GalaInvites",
    "GalaTable",
    "GalaTableAffectation",
    "GalaTicket",
    "GalaTombola",
    # Budget
    "TypeBudget",
    "CategoryBudget",
    "SousCategoryBudget",
    "RubriqueBudget",
    "RubriqueBudgetRealise",
]
