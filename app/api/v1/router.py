"""
Routeur principal de l'API v1.
Regroupe toutes les routes des différents modules.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
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
    membres_commission,
    rubriques_budget,
    realisations_budget,
    transitions,
)

api_router = APIRouter()

# Routes d'authentification et des membres
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentification"],
)

# Routes clubs et référentiels du club
api_router.include_router(
    clubs.router,
    prefix="/clubs",
    tags=["Clubs"],
)

# Membres du club (fiches, fonctions et commissions)
api_router.include_router(
    membres_commission.membres_router,
    prefix="/clubs/{club_id}/membres",
    tags=["Membres du club"],
)

# Référentiels budgétaires globaux
api_router.include_router(
    budget_referentiels.router,
    prefix="/budget",
    tags=["Référentiels budgétaires"],
)

# Cotisations
api_router.include_router(
    cotisations.router,
    prefix="/cotisations",
    tags=["Cotisations"],
)

# Paiements de cotisation
api_router.include_router(
    paiements.router,
    prefix="/paiements-cotisation",
    tags=["Paiements de cotisation"],
)

# Emails de situation de cotisation
api_router.include_router(
    email_cotisations.router,
    prefix="/email-cotisations",
    tags=["Emails de cotisation"],
)

# Galas
api_router.include_router(
    galas.router,
    prefix="/galas",
    tags=["Galas"],
)

api_router.include_router(
    gala_invites.router,
    prefix="/gala-invites",
    tags=["Invités de gala"],
)

api_router.include_router(
    gala_tickets.router,
    prefix="/gala-tickets",
    tags=["Tickets de gala"],
)

api_router.include_router(
    gala_tombolas.router,
    prefix="/gala-tombolas",
    tags=["Tombolas de gala"],
)

# Réunions
api_router.include_router(
    reunions.router,
    prefix="/clubs/{club_id}/reunions",
    tags=["Réunions"],
)

api_router.include_router(
    presences.router,
    prefix="/clubs/{club_id}/reunions/{reunion_id}/presences",
    tags=["Présences"],
)

api_router.include_router(
    invites_reunion.router,
    prefix="/clubs/{club_id}/reunions/{reunion_id}/invites",
    tags=["Invités de réunion"],
)

# Commissions
api_router.include_router(
    membres_commission.router,
    prefix="/clubs/{club_id}/commissions/{commission_id}/membres",
    tags=["Membres des commissions"],
)

# Budget
api_router.include_router(
    rubriques_budget.router,
    prefix="/clubs/{club_id}/mandats/{mandat_id}/rubriques",
    tags=["Rubriques budgétaires"],
)

api_router.include_router(
    realisations_budget.router,
    prefix="/clubs/{club_id}/rubriques/{rubrique_id}/realisations",
    tags=["Réalisations budgétaires"],
)

# Passations
api_router.include_router(
    transitions.router,
    prefix="/transitions",
    tags=["Transitions"],
)
