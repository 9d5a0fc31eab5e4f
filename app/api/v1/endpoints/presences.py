"""
Routes de la liste de présence d'une réunion.
"""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.reunion import ListePresence, Reunion
from app.models.user import User, UserClub
from app.schemas.common import MessageResponse
from app.schemas.reunion import (
    MarquerPresenceRequest,
    MarquerPresencesBatchRequest,
    MembreAbsent,
    PresenceDetailResponse,
)
from app.api.deps import club_member, club_manager
from app.api.v1.endpoints.reunions import get_reunion_or_404


router = APIRouter()


def _membres_actifs(db: Session, club_id: int) -> List[User]:
    return (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name)
        .all()
    )


def _to_response(presence: ListePresence) -> PresenceDetailResponse:
    return PresenceDetailResponse(
        id=presence.id,
        membre_id=presence.membre_id,
        nom_complet_membre=presence.membre.full_name,
        email_membre=presence.membre.email,
        est_actif_membre=presence.membre.is_active,
        reunion_id=presence.reunion_id,
    )


def taux_presence(nombre_presents: int, nombre_membres: int) -> float:
    """Pourcentage de présence arrondi à une décimale."""
    if nombre_membres > 0:
        return round(nombre_presents / nombre_membres * 100, 1)
    return 0.0


def _statistiques(reunion: Reunion, membres_actifs: List[User]) -> dict:
    presents_actifs = {p.membre_id for p in reunion.presences} & {m.id for m in membres_actifs}
    return {
        "nombre_membres_actifs": len(membres_actifs),
        "nombre_presents": len(reunion.presences),
        "nombre_absents": len(membres_actifs) - len(presents_actifs),
        "nombre_invites": len(reunion.invites),
        "taux_presence": taux_presence(len(presents_actifs), len(membres_actifs)),
    }


@router.get(
    "/",
    summary="Présences et absences d'une réunion",
)
async def list_presences(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    membres_actifs = _membres_actifs(db, club_id)
    presents = {p.membre_id for p in reunion.presences}

    presences = sorted(reunion.presences, key=lambda p: (p.membre.last_name, p.membre.first_name))

    return {
        "reunion": {
            "id": reunion.id,
            "date": reunion.date,
            "heure": reunion.heure,
            "type_reunion": reunion.type_reunion.libelle,
        },
        "presences": [_to_response(p) for p in presences],
        "membres_absents": [
            MembreAbsent(id=m.id, nom_complet=m.full_name, email=m.email)
            for m in membres_actifs
            if m.id not in presents
        ],
        "statistiques": _statistiques(reunion, membres_actifs),
    }


@router.get(
    "/statistiques",
    summary="Statistiques de présence d'une réunion",
)
async def statistiques_presence(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    """Inclut la présence moyenne des réunions du même type dans le club."""
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    statistiques = _statistiques(reunion, _membres_actifs(db, club_id))

    comptes = (
        db.query(Reunion.id, func.count(ListePresence.id))
        .outerjoin(ListePresence, ListePresence.reunion_id == Reunion.id)
        .filter(Reunion.club_id == club_id, Reunion.type_reunion_id == reunion.type_reunion_id)
        .group_by(Reunion.id)
        .all()
    )
    moyenne = round(sum(n for _, n in comptes) / len(comptes), 1) if comptes else 0.0

    return {
        "reunion_id": reunion.id,
        "type_reunion": reunion.type_reunion.libelle,
        **statistiques,
        "nombre_reunions_meme_type": len(comptes),
        "moyenne_presences_meme_type": moyenne,
    }


@router.get(
    "/{presence_id}",
    response_model=PresenceDetailResponse,
    summary="Détail d'une présence",
)
async def get_presence(
    club_id: int,
    reunion_id: int,
    presence_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    presence = db.query(ListePresence).filter(
        ListePresence.id == presence_id,
        ListePresence.reunion_id == reunion_id,
    ).first()
    if not presence:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Présence non trouvée")
    return _to_response(presence)


@router.post(
    "/",
    response_model=PresenceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Marquer un membre présent",
)
async def marquer_presence(
    club_id: int,
    reunion_id: int,
    data: MarquerPresenceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)

    membre = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(User.id == data.membre_id, UserClub.club_id == club_id, User.is_active.is_(True))
        .first()
    )
    if not membre:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membre non trouvé ou inactif dans ce club",
        )

    if db.query(ListePresence).filter(
        ListePresence.reunion_id == reunion_id,
        ListePresence.membre_id == data.membre_id,
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre est déjà marqué présent à cette réunion",
        )

    presence = ListePresence(reunion_id=reunion_id, membre_id=data.membre_id)
    db.add(presence)
    db.commit()
    db.refresh(presence)

    logger.info(f"Présence enregistrée: {membre.email} à la réunion {reunion_id}")
    return _to_response(presence)


@router.post(
    "/batch",
    summary="Marquer plusieurs membres présents",
)
async def marquer_presences_batch(
    club_id: int,
    reunion_id: int,
    data: MarquerPresencesBatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    """
    Ajoute les membres non encore présents ; les déjà présents et les
    identifiants invalides sont signalés sans interrompre le lot.
    """
    get_reunion_or_404(db, club_id, reunion_id)

    ids = list(dict.fromkeys(data.membres_ids))
    if not ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Aucun membre spécifié")

    actifs = {m.id for m in _membres_actifs(db, club_id)}
    deja = {
        membre_id
        for (membre_id,) in db.query(ListePresence.membre_id).filter(ListePresence.reunion_id == reunion_id).all()
    }

    ajoutes, deja_presents, invalides = [], [], []
    for membre_id in ids:
        if membre_id not in actifs:
            invalides.append(membre_id)
        elif membre_id in deja:
            deja_presents.append(membre_id)
        else:
            db.add(ListePresence(reunion_id=reunion_id, membre_id=membre_id))
            ajoutes.append(membre_id)

    db.commit()
    logger.info(
        f"Présences en lot réunion {reunion_id}: {len(ajoutes)} ajoutée(s), "
        f"{len(deja_presents)} déjà présent(s), {len(invalides)} invalide(s)"
    )

    return {
        "success": True,
        "message": f"{len(ajoutes)} présence(s) enregistrée(s)",
        "nombre_ajoutes": len(ajoutes),
        "membres_ajoutes": ajoutes,
        "membres_deja_presents": deja_presents,
        "membres_invalides": invalides,
    }


@router.delete(
    "/by-membre/{membre_id}",
    response_model=MessageResponse,
    summary="Retirer la présence d'un membre",
)
async def retirer_presence_membre(
    club_id: int,
    reunion_id: int,
    membre_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    presence = db.query(ListePresence).filter(
        ListePresence.reunion_id == reunion_id,
        ListePresence.membre_id == membre_id,
    ).first()
    if not presence:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ce membre n'est pas marqué présent à cette réunion",
        )

    db.delete(presence)
    db.commit()
    return MessageResponse(message="Présence supprimée avec succès")


@router.delete(
    "/{presence_id}",
    response_model=MessageResponse,
    summary="Supprimer une présence",
)
async def delete_presence(
    club_id: int,
    reunion_id: int,
    presence_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    presence = db.query(ListePresence).filter(
        ListePresence.id == presence_id,
        ListePresence.reunion_id == reunion_id,
    ).first()
    if not presence:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Présence non trouvée")

    db.delete(presence)
    db.commit()
    return MessageResponse(message="Présence supprimée avec succès")
