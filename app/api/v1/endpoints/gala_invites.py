"""
Routes des invités de gala : saisie, import Excel et placement aux tables.
"""

from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.gala import Gala, GalaInvites, GalaTable, GalaTableAffectation
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.gala import (
    AffecterTableRequest,
    GalaInviteCreate,
    GalaInviteResponse,
    GalaInviteUpdate,
    ImportInvitesResult,
)
from app.services.excel_import import analyser_invites, extension_acceptee
from app.api.deps import get_current_active_user, require_manager
from app.api.v1.endpoints.galas import get_gala_or_404


router = APIRouter()


def _to_response(invite: GalaInvites) -> GalaInviteResponse:
    table = invite.table
    return GalaInviteResponse(
        id=invite.id,
        gala_id=invite.gala_id,
        nom_prenom=invite.nom_prenom,
        present=invite.present,
        table_id=table.id if table else None,
        table_libelle=table.table_libelle if table else None,
        date_affectation=invite.affectation.date_ajout if invite.affectation else None,
    )


def _get_invite_or_404(db: Session, invite_id: int) -> GalaInvites:
    invite = db.query(GalaInvites).filter(GalaInvites.id == invite_id).first()
    if not invite:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Invité avec l'ID {invite_id} introuvable",
        )
    return invite


def _verifier_nom_unique(db: Session, gala_id: int, nom_prenom: str, exclure_id: Optional[int] = None) -> None:
    query = db.query(GalaInvites).filter(
        GalaInvites.gala_id == gala_id,
        func.lower(GalaInvites.nom_prenom) == nom_prenom.lower(),
    )
    if exclure_id is not None:
        query = query.filter(GalaInvites.id != exclure_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un invité nommé '{nom_prenom}' existe déjà pour ce gala",
        )


@router.get(
    "/gala/{gala_id}",
    response_model=List[GalaInviteResponse],
    summary="Invités d'un gala",
)
async def list_invites_gala(
    gala_id: int,
    recherche: Optional[str] = Query(None),
    table_affectee: Optional[bool] = Query(None, description="Filtrer selon l'affectation à une table"),
    table_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    get_gala_or_404(db, gala_id)

    query = db.query(GalaInvites).filter(GalaInvites.gala_id == gala_id)
    if recherche and recherche.strip():
        query = query.filter(func.lower(GalaInvites.nom_prenom).like(f"%{recherche.strip().lower()}%"))

    invites = query.order_by(GalaInvites.nom_prenom).all()

    if table_affectee is not None:
        invites = [i for i in invites if (i.affectation is not None) == table_affectee]
    if table_id is not None:
        invites = [i for i in invites if i.table is not None and i.table.id == table_id]

    return [_to_response(i) for i in invites]


@router.get(
    "/gala/{gala_id}/sans-table",
    response_model=List[GalaInviteResponse],
    summary="Invités sans table",
)
async def list_invites_sans_table(
    gala_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    get_gala_or_404(db, gala_id)
    invites = (
        db.query(GalaInvites)
        .outerjoin(GalaTableAffectation, GalaTableAffectation.gala_invites_id == GalaInvites.id)
        .filter(GalaInvites.gala_id == gala_id, GalaTableAffectation.id.is_(None))
        .order_by(GalaInvites.nom_prenom)
        .all()
    )
    return [_to_response(i) for i in invites]


@router.get(
    "/{invite_id}",
    response_model=GalaInviteResponse,
    summary="Détail d'un invité",
)
async def get_invite(
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return _to_response(_get_invite_or_404(db, invite_id))


@router.post(
    "/",
    response_model=GalaInviteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ajouter un invité",
)
async def create_invite(
    data: GalaInviteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    get_gala_or_404(db, data.gala_id)
    _verifier_nom_unique(db, data.gala_id, data.nom_prenom)

    invite = GalaInvites(**data.model_dump())
    db.add(invite)
    db.commit()
    db.refresh(invite)

    logger.info(f"Invité ajouté au gala {data.gala_id}: {invite.nom_prenom}")
    return _to_response(invite)


@router.post(
    "/import-excel-file",
    response_model=ImportInvitesResult,
    summary="Importer des invités depuis un fichier Excel",
)
async def import_excel_file(
    gala_id: int = Form(...),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    """
    Importe les invités listés dans la colonne A de la première feuille.

    Les lignes vides sont ignorées ; les noms trop longs sont signalés comme
    erreurs et les noms déjà présents (base ou fichier) comme doublons.
    """
    gala = db.query(Gala).filter(Gala.id == gala_id).first()
    if not gala:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Gala avec l'ID {gala_id} introuvable",
        )

    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Aucun fichier Excel fourni")

    if not extension_acceptee(file.filename):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Seuls les fichiers Excel (.xlsx) sont acceptés",
        )

    contenu = await file.read()
    noms_existants = [nom for (nom,) in db.query(GalaInvites.nom_prenom).filter(GalaInvites.gala_id == gala_id).all()]

    try:
        analyse = analyser_invites(contenu, noms_existants)
    except ValueError as e:
        logger.warning(f"Import Excel refusé pour le gala {gala_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    for nom in analyse.noms_a_creer:
        db.add(GalaInvites(gala_id=gala_id, nom_prenom=nom, present=False))
    db.commit()

    crees = len(analyse.noms_a_creer)
    logger.info(
        f"Import Excel gala {gala_id} ({file.filename}): {crees} invité(s) créé(s), "
        f"{analyse.nombre_doublons} doublon(s), {analyse.nombre_erreurs} erreur(s)"
    )

    return ImportInvitesResult(
        est_succes=crees > 0,
        nombre_lignes_traitees=analyse.nombre_lignes_traitees,
        nombre_invites_crees=crees,
        nombre_erreurs=analyse.nombre_erreurs,
        nombre_doublons=analyse.nombre_doublons,
        erreurs=analyse.erreurs,
        resume=(
            f"{crees} invité(s) importé(s), {analyse.nombre_doublons} doublon(s) ignoré(s), "
            f"{analyse.nombre_erreurs} erreur(s)"
        ),
    )


@router.put(
    "/{invite_id}",
    response_model=GalaInviteResponse,
    summary="Modifier un invité",
)
async def update_invite(
    invite_id: int,
    data: GalaInviteUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    invite = _get_invite_or_404(db, invite_id)

    if data.nom_prenom is not None:
        nom = data.nom_prenom.strip()
        if not nom:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Le nom et prénom sont obligatoires")
        _verifier_nom_unique(db, invite.gala_id, nom, exclure_id=invite.id)
        invite.nom_prenom = nom
    if data.present is not None:
        invite.present = data.present

    db.commit()
    db.refresh(invite)
    return _to_response(invite)


@router.delete(
    "/{invite_id}",
    response_model=MessageResponse,
    summary="Supprimer un invité",
)
async def delete_invite(
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    invite = _get_invite_or_404(db, invite_id)
    db.delete(invite)
    db.commit()
    logger.info(f"Invité {invite_id} supprimé du gala {invite.gala_id}")
    return MessageResponse(message="Invité supprimé avec succès")


@router.post(
    "/{invite_id}/affecter-table",
    response_model=GalaInviteResponse,
    summary="Placer un invité à une table",
)
async def affecter_table(
    invite_id: int,
    data: AffecterTableRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    """L'affectation précédente de l'invité est remplacée."""
    invite = _get_invite_or_404(db, invite_id)

    table = db.query(GalaTable).filter(GalaTable.id == data.table_id).first()
    if not table or table.gala_id != invite.gala_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La table n'appartient pas au gala de cet invité",
        )

    if invite.affectation is not None:
        invite.affectation.gala_table_id = table.id
        invite.affectation.date_ajout = datetime.utcnow()
    else:
        db.add(GalaTableAffectation(gala_table_id=table.id, gala_invites_id=invite.id))

    db.commit()
    db.expire(invite)
    logger.info(f"Invité {invite.id} placé à la {table.table_libelle} (gala {invite.gala_id})")
    return _to_response(invite)


@router.delete(
    "/{invite_id}/retirer-table",
    response_model=GalaInviteResponse,
    summary="Retirer un invité de sa table",
)
async def retirer_table(
    invite_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    invite = _get_invite_or_404(db, invite_id)

    if invite.affectation is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cet invité n'est affecté à aucune table",
        )

    db.delete(invite.affectation)
    db.commit()
    db.expire(invite)
    return _to_response(invite)
