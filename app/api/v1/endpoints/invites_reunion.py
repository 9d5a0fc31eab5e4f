"""
Routes des invités extérieurs d'une réunion.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.reunion import InviteReunion, Reunion
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.reunion import (
    InviteReunionCreate,
    InviteReunionResponse,
    InviteReunionUpdate,
    InvitesBatchRequest,
)
from app.api.deps import club_member, club_manager
from app.api.v1.endpoints.reunions import get_reunion_or_404


router = APIRouter()


def _get_invite_or_404(db: Session, reunion_id: int, invite_id: int) -> InviteReunion:
    invite = db.query(InviteReunion).filter(
        InviteReunion.id == invite_id,
        InviteReunion.reunion_id == reunion_id,
    ).first()
    if not invite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invité non trouvé")
    return invite


def _doublon(db: Session, reunion_id: int, data: InviteReunionCreate, exclure_id: Optional[int] = None) -> Optional[str]:
    """Retourne le motif de doublon (nom ou email) ou None."""
    query = db.query(InviteReunion).filter(InviteReunion.reunion_id == reunion_id)
    if exclure_id is not None:
        query = query.filter(InviteReunion.id != exclure_id)

    if query.filter(
        func.lower(InviteReunion.nom) == data.nom.strip().lower(),
        func.lower(InviteReunion.prenom) == data.prenom.strip().lower(),
    ).first():
        return f"L'invité {data.prenom} {data.nom} est déjà enregistré pour cette réunion"

    if data.email and query.filter(func.lower(InviteReunion.email) == str(data.email).lower()).first():
        return f"Un invité avec l'email {data.email} est déjà enregistré pour cette réunion"

    return None


def _nouvel_invite(reunion_id: int, data: InviteReunionCreate) -> InviteReunion:
    return InviteReunion(
        reunion_id=reunion_id,
        nom=data.nom.strip(),
        prenom=data.prenom.strip(),
        email=str(data.email) if data.email else None,
        telephone=data.telephone,
        organisation=data.organisation.strip() if data.organisation else None,
    )


@router.get(
    "/",
    summary="Invités d'une réunion",
)
async def list_invites(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    invites = sorted(reunion.invites, key=lambda i: (i.nom.lower(), i.prenom.lower()))
    organisations = {i.organisation.strip().lower() for i in invites if i.organisation and i.organisation.strip()}

    return {
        "invites": [InviteReunionResponse.model_validate(i) for i in invites],
        "statistiques": {
            "nombre_invites": len(invites),
            "avec_email": sum(1 for i in invites if i.email),
            "avec_telephone": sum(1 for i in invites if i.telephone),
            "avec_organisation": sum(1 for i in invites if i.organisation),
            "nombre_organisations": len(organisations),
        },
    }


@router.get(
    "/organisations",
    response_model=List[str],
    summary="Organisations déjà saisies pour les invités du club",
)
async def list_organisations(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    lignes = (
        db.query(InviteReunion.organisation)
        .join(Reunion, InviteReunion.reunion_id == Reunion.id)
        .filter(Reunion.club_id == club_id, InviteReunion.organisation.isnot(None))
        .distinct()
        .all()
    )
    return sorted({org.strip() for (org,) in lignes if org and org.strip()}, key=str.lower)


@router.get(
    "/{invite_id}",
    response_model=InviteReunionResponse,
    summary="Détail d'un invité",
)
async def get_invite(
    club_id: int,
    reunion_id: int,
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    return _get_invite_or_404(db, reunion_id, invite_id)


@router.post(
    "/",
    response_model=InviteReunionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ajouter un invité",
)
async def create_invite(
    club_id: int,
    reunion_id: int,
    data: InviteReunionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)

    motif = _doublon(db, reunion_id, data)
    if motif:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=motif)

    invite = _nouvel_invite(reunion_id, data)
    db.add(invite)
    db.commit()
    db.refresh(invite)

    logger.info(f"Invité ajouté à la réunion {reunion_id}: {invite.nom_complet}")
    return invite


@router.post(
    "/batch",
    summary="Ajouter plusieurs invités",
)
async def create_invites_batch(
    club_id: int,
    reunion_id: int,
    data: InvitesBatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    """Les doublons (base ou lot) sont ignorés et signalés."""
    get_reunion_or_404(db, club_id, reunion_id)

    crees: List[InviteReunion] = []
    ignores: List[str] = []
    for item in data.invites:
        motif = _doublon(db, reunion_id, item)
        if motif:
            ignores.append(motif)
            continue
        invite = _nouvel_invite(reunion_id, item)
        db.add(invite)
        db.flush()
        crees.append(invite)

    db.commit()
    for invite in crees:
        db.refresh(invite)

    logger.info(f"Invités en lot réunion {reunion_id}: {len(crees)} créé(s), {len(ignores)} ignoré(s)")
    return {
        "success": True,
        "message": f"{len(crees)} invité(s) ajouté(s)",
        "nombre_crees": len(crees),
        "nombre_ignores": len(ignores),
        "invites": [InviteReunionResponse.model_validate(i) for i in crees],
        "ignores": ignores,
    }


@router.put(
    "/{invite_id}",
    response_model=InviteReunionResponse,
    summary="Modifier un invité",
)
async def update_invite(
    club_id: int,
    reunion_id: int,
    invite_id: int,
    data: InviteReunionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    invite = _get_invite_or_404(db, reunion_id, invite_id)

    motif = _doublon(db, reunion_id, data, exclure_id=invite.id)
    if motif:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=motif)

    modifie = _nouvel_invite(reunion_id, data)
    invite.nom = modifie.nom
    invite.prenom = modifie.prenom
    invite.email = modifie.email
    invite.telephone = modifie.telephone
    invite.organisation = modifie.organisation

    db.commit()
    db.refresh(invite)
    return invite


@router.delete(
    "/{invite_id}",
    response_model=MessageResponse,
    summary="Supprimer un invité",
)
async def delete_invite(
    club_id: int,
    reunion_id: int,
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_reunion_or_404(db, club_id, reunion_id)
    invite = _get_invite_or_404(db, reunion_id, invite_id)
    db.delete(invite)
    db.commit()
    return MessageResponse(message="Invité supprimé avec succès")
