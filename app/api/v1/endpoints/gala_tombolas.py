"""
Routes des billets de tombola de gala et du tirage au sort des gagnants.
"""

from datetime import datetime
from typing import Any

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.gala import GalaTombola
from app.models.user import User
from app.schemas.gala import GagnantTombola, TirageResult
from app.services.tombola_service import numeroter_billets, tirer_gagnants
from app.api.deps import require_manager
from app.api.v1.endpoints.galas import get_gala_or_404
from app.api.v1.endpoints.gala_ventes import creer_router_ventes


router = creer_router_ventes(GalaTombola, "tombola", "total_tombola_disponibles")


@router.get(
    "/gala/{gala_id}/tirage-gagnants",
    response_model=TirageResult,
    summary="Tirage au sort des gagnants de la tombola",
)
async def tirage_gagnants(
    gala_id: int,
    nombre_gagnants: int = Query(1, description="Nombre de gagnants à tirer"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    """
    Tire au sort des billets distincts parmi tous les billets vendus.

    Chaque billet acheté est une chance ; le nombre de gagnants est borné
    par le nombre de billets.
    """
    if nombre_gagnants <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le nombre de gagnants doit être supérieur à 0",
        )

    gala = get_gala_or_404(db, gala_id)

    participations = (
        db.query(GalaTombola)
        .filter(GalaTombola.gala_id == gala_id)
        .order_by(GalaTombola.id)
        .all()
    )
    if not participations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Aucune tombola trouvée pour ce gala",
        )

    gagnants = tirer_gagnants(participations, nombre_gagnants, gala_id=gala_id)

    return TirageResult(
        gala_id=gala.id,
        gala_libelle=gala.libelle,
        nombre_gagnants_demandes=nombre_gagnants,
        nombre_tickets_total=len(numeroter_billets(participations)),
        date_tirage=datetime.utcnow(),
        gagnants=[
            GagnantTombola(
                position=g.position,
                membre_id=g.participation.membre_id,
                externe=g.participation.externe,
                participant_nom=g.participation.participant_nom,
                participant_email=g.participation.membre.email if g.participation.membre else None,
                numero_ticket_gagnant=g.numero_ticket,
                quantite_totale_participant=g.participation.quantite,
            )
            for g in gagnants
        ],
    )
