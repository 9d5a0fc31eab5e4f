"""
Endpoints de l'API v1.
"""

from . import (
    auth,
    clubs,
    budget_referentiels,
    paiements,
    cotisations,
    email_cotisations,
    galas,
    gala_invites,
    gala_tickets,
    gala_tombolas,
    reunions,
    presences,
    invites_reunion,
    transitions,
    membres_commission,
    rubriques_budget,
    realisations_budget,
)

__all__ = [
    "auth",
    "clubs",
    "budget_referentiels",
    "paiements",
    "cotisations",
    "email_cotisations",
    "galas",
    "gala_invites",
    "gala_tickets",
    "gala_tombolas",
    "reunions",
    "presences",
    "invites_reunion",
    "transitions",
    "membres_commission",
    "rubriques_budget",
    "realisations_budget",
]
