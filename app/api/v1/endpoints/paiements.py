"""
Routes des paiements de cotisation.
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.club import Club
from app.models.cotisation import PaiementCotisation
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.cotisation import (
    PaiementCotisationCreate,
    PaiementCotisationUpdate,
    PaiementCotisationResponse,
)
from app.api.deps import (
    FINANCE_ROLES,
    club_member,
    ensure_club_access,
    get_current_active_user,
    is_club_member,
    require_admin,
)


router = APIRouter()


def _to_response(paiement: PaiementCotisation) -> PaiementCotisationResponse:
    return PaiementCotisationResponse(
        id=paiement.id,
        membre_id=paiement.membre_id,
        club_id=paiement.club_id,
        montant=paiement.montant,
        date=paiement.date,
        commentaires=paiement.commentaires,
        membre_nom=paiement.membre.full_name,
    )


def _get_paiement_or_404(db: Session, paiement_id: int) -> PaiementCotisation:
    paiement = db.query(PaiementCotisation).filter(PaiementCotisation.id == paiement_id).first()
    if not paiement:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Paiement avec l'ID {paiement_id} non trouvé",
        )
    return paiement


def _resume(paiements: List[PaiementCotisation]) -> Dict:
    montant_total = sum(p.montant for p in paiements)
    return {
        "nombre_paiements": len(paiements),
        "montant_total": montant_total,
        "montant_moyen": round(montant_total / len(paiements), 2) if paiements else 0,
        "premier_paiement": min((p.date for p in paiements), default=None),
        "dernier_paiement": max((p.date for p in paiements), default=None),
    }


@router.get(
    "/",
    response_model=List[PaiementCotisationResponse],
    summary="Tous les paiements",
)
async def list_paiements(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    paiements = db.query(PaiementCotisation).order_by(PaiementCotisation.date.desc()).all()
    return [_to_response(p) for p in paiements]


@router.get(
    "/periode",
    response_model=List[PaiementCotisationResponse],
    summary="Paiements d'une période",
)
async def list_paiements_periode(
    date_debut: date = Query(...),
    date_fin: date = Query(...),
    club_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    if date_fin < date_debut:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La date de fin doit être postérieure à la date de début",
        )

    query = db.query(PaiementCotisation).filter(
        PaiementCotisation.date >= datetime.combine(date_debut, time.min),
        PaiementCotisation.date <= datetime.combine(date_fin, time.max),
    )
    if club_id is not None:
        ensure_club_access(db, current_user, club_id)
        query = query.filter(PaiementCotisation.club_id == club_id)
    elif not current_user.is_admin:
        query = query.filter(PaiementCotisation.club_id.in_(current_user.club_ids))

    return [_to_response(p) for p in query.order_by(PaiementCotisation.date.desc()).all()]


@router.get(
    "/statistiques/globales",
    summary="Statistiques globales des paiements",
)
async def statistiques_globales(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    lignes = (
        db.query(
            Club.id,
            Club.name,
            func.count(PaiementCotisation.id),
            func.coalesce(func.sum(PaiementCotisation.montant), 0),
        )
        .join(PaiementCotisation, PaiementCotisation.club_id == Club.id)
        .group_by(Club.id, Club.name)
        .order_by(Club.name)
        .all()
    )
    par_club = [
        {"club_id": cid, "club_nom": nom, "nombre_paiements": nombre, "montant_total": int(total)}
        for cid, nom, nombre, total in lignes
    ]
    montant_total = sum(c["montant_total"] for c in par_club)
    nombre_total = sum(c["nombre_paiements"] for c in par_club)

    return {
        "nombre_paiements": nombre_total,
        "montant_total": montant_total,
        "montant_moyen": round(montant_total / nombre_total, 2) if nombre_total else 0,
        "par_club": par_club,
    }


@router.get(
    "/statistiques/membre/{membre_id}",
    summary="Statistiques de paiement d'un membre",
)
async def statistiques_membre(
    membre_id: int,
    club_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    membre = db.query(User).filter(User.id == membre_id).first()
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    query = db.query(PaiementCotisation).filter(PaiementCotisation.membre_id == membre_id)
    if club_id is not None:
        ensure_club_access(db, current_user, club_id)
        query = query.filter(PaiementCotisation.club_id == club_id)
    elif current_user.id != membre_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès non autorisé aux paiements de ce membre",
        )

    return {
        "membre_id": membre.id,
        "nom_complet": membre.full_name,
        **_resume(query.all()),
    }


@router.get(
    "/statistiques/club/{club_id}",
    summary="Statistiques de paiement d'un club",
)
async def statistiques_club(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    paiements = (
        db.query(PaiementCotisation)
        .filter(PaiementCotisation.club_id == club_id)
        .order_by(PaiementCotisation.date)
        .all()
    )

    par_mois: Dict[str, Dict] = {}
    for p in paiements:
        mois = p.date.strftime("%Y-%m")
        ligne = par_mois.setdefault(mois, {"mois": mois, "nombre": 0, "montant": 0})
        ligne["nombre"] += 1
        ligne["montant"] += p.montant

    return {
        "club_id": club.id,
        "club_nom": club.name,
        "nombre_membres_payeurs": len({p.membre_id for p in paiements}),
        **_resume(paiements),
        "paiements_par_mois": list(par_mois.values()),
    }


@router.get(
    "/membre/{membre_id}",
    response_model=List[PaiementCotisationResponse],
    summary="Paiements d'un membre",
)
async def list_paiements_membre(
    membre_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = db.query(PaiementCotisation).filter(PaiementCotisation.membre_id == membre_id)
    if current_user.id != membre_id and not current_user.is_admin:
        query = query.filter(PaiementCotisation.club_id.in_(current_user.club_ids))
    return [_to_response(p) for p in query.order_by(PaiementCotisation.date.desc()).all()]


@router.get(
    "/club/{club_id}",
    response_model=List[PaiementCotisationResponse],
    summary="Paiements d'un club",
)
async def list_paiements_club(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    paiements = (
        db.query(PaiementCotisation)
        .filter(PaiementCotisation.club_id == club_id)
        .order_by(PaiementCotisation.date.desc())
        .all()
    )
    return [_to_response(p) for p in paiements]


@router.get(
    "/{paiement_id}",
    response_model=PaiementCotisationResponse,
    summary="Détail d'un paiement",
)
async def get_paiement(
    paiement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    paiement = _get_paiement_or_404(db, paiement_id)
    if paiement.membre_id != current_user.id:
        ensure_club_access(db, current_user, paiement.club_id)
    return _to_response(paiement)


@router.post(
    "/",
    response_model=PaiementCotisationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enregistrer un paiement",
)
async def create_paiement(
    data: PaiementCotisationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    ensure_club_access(db, current_user, data.club_id, FINANCE_ROLES)

    if not db.query(Club).filter(Club.id == data.club_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    membre = db.query(User).filter(User.id == data.membre_id).first()
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    if not is_club_member(db, membre.id, data.club_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le membre n'appartient pas à ce club",
        )

    paiement = PaiementCotisation(
        membre_id=data.membre_id,
        club_id=data.club_id,
        montant=data.montant,
        date=data.date or datetime.utcnow(),
        commentaires=data.commentaires,
    )
    db.add(paiement)
    db.commit()
    db.refresh(paiement)

    logger.info(
        f"Paiement enregistré: {paiement.montant} FCFA pour {membre.email} "
        f"(club {data.club_id}) par {current_user.email}"
    )
    return _to_response(paiement)


@router.put(
    "/{paiement_id}",
    response_model=PaiementCotisationResponse,
    summary="Modifier un paiement",
)
async def update_paiement(
    paiement_id: int,
    data: PaiementCotisationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    paiement = _get_paiement_or_404(db, paiement_id)
    ensure_club_access(db, current_user, paiement.club_id, FINANCE_ROLES)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(paiement, field, value)

    db.commit()
    db.refresh(paiement)
    logger.info(f"Paiement {paiement_id} modifié par {current_user.email}")
    return _to_response(paiement)


@router.delete(
    "/{paiement_id}",
    response_model=MessageResponse,
    summary="Supprimer un paiement",
)
async def delete_paiement(
    paiement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    paiement = _get_paiement_or_404(db, paiement_id)
    ensure_club_access(db, current_user, paiement.club_id, FINANCE_ROLES)

    db.delete(paiement)
    db.commit()
    logger.info(f"Paiement {paiement_id} supprimé par {current_user.email}")
    return MessageResponse(message="Paiement supprimé avec succès")
