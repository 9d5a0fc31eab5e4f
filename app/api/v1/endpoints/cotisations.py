"""
Routes des cotisations : gestion des montants dus par mandat, création en
masse et situation financière des membres et des clubs.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.club import Club, Mandat
from app.models.cotisation import Cotisation, PaiementCotisation
from app.models.user import User, UserClub
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.cotisation import (
    BulkCotisationRequest,
    BulkCotisationResult,
    CotisationCreate,
    CotisationResponse,
    CotisationUpdate,
    MembreIgnore,
    SituationMembre,
)
from app.services.cotisation_service import CotisationService, taux_recouvrement
from app.api.deps import (
    FINANCE_ROLES,
    club_member,
    ensure_club_access,
    get_current_active_user,
    require_admin,
)


router = APIRouter()


DOUBLON_MESSAGE = "Une cotisation existe déjà pour ce membre et ce mandat."


def _to_response(cotisation: Cotisation) -> CotisationResponse:
    return CotisationResponse(
        id=cotisation.id,
        membre_id=cotisation.membre_id,
        mandat_id=cotisation.mandat_id,
        montant=cotisation.montant,
        membre_nom=cotisation.membre.full_name,
        membre_email=cotisation.membre.email,
        mandat_annee=cotisation.mandat.annee,
        mandat_description=cotisation.mandat.description,
        club_id=cotisation.mandat.club_id,
        created_at=cotisation.created_at,
    )


def _get_cotisation_or_404(db: Session, cotisation_id: int) -> Cotisation:
    cotisation = db.query(Cotisation).filter(Cotisation.id == cotisation_id).first()
    if not cotisation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cotisation avec l'ID {cotisation_id} non trouvée",
        )
    return cotisation


def _get_mandat_or_404(db: Session, mandat_id: int) -> Mandat:
    mandat = db.query(Mandat).filter(Mandat.id == mandat_id).first()
    if not mandat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mandat non trouvé")
    return mandat


def _existe_doublon(db: Session, membre_id: int, mandat_id: int, exclure_id: Optional[int] = None) -> bool:
    query = db.query(Cotisation).filter(
        Cotisation.membre_id == membre_id,
        Cotisation.mandat_id == mandat_id,
    )
    if exclure_id is not None:
        query = query.filter(Cotisation.id != exclure_id)
    return query.first() is not None


def _scope_clubs(query, user: User):
    """Restreint une requête jointe sur Mandat aux clubs de l'utilisateur."""
    if user.is_admin:
        return query
    return query.filter(Mandat.club_id.in_(user.club_ids))


# ==================== LECTURE ====================

@router.get(
    "/",
    response_model=List[CotisationResponse],
    summary="Liste des cotisations",
)
async def list_cotisations(
    club_id: Optional[int] = Query(None, description="Filtrer par club"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = db.query(Cotisation).join(Mandat, Cotisation.mandat_id == Mandat.id)
    if club_id is not None:
        ensure_club_access(db, current_user, club_id)
        query = query.filter(Mandat.club_id == club_id)
    else:
        query = _scope_clubs(query, current_user)

    cotisations = query.order_by(Mandat.annee.desc(), Cotisation.id).all()
    return [_to_response(c) for c in cotisations]


@router.get(
    "/statistics",
    summary="Statistiques des cotisations par mandat",
)
async def statistiques_cotisations(
    mandat_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = (
        db.query(
            Mandat.id,
            Mandat.annee,
            Mandat.description,
            func.count(Cotisation.id),
            func.coalesce(func.sum(Cotisation.montant), 0),
            func.min(Cotisation.montant),
            func.max(Cotisation.montant),
        )
        .join(Cotisation, Cotisation.mandat_id == Mandat.id)
    )
    if mandat_id is not None:
        query = query.filter(Mandat.id == mandat_id)
    query = _scope_clubs(query, current_user)

    lignes = (
        query.group_by(Mandat.id, Mandat.annee, Mandat.description)
        .order_by(Mandat.annee.desc())
        .all()
    )

    par_mandat = [
        {
            "mandat_id": mid,
            "annee": annee,
            "description": description,
            "nombre_cotisations": nombre,
            "montant_total": int(total),
            "montant_moyen": round(total / nombre, 2) if nombre else 0,
            "montant_min": minimum or 0,
            "montant_max": maximum or 0,
        }
        for mid, annee, description, nombre, total, minimum, maximum in lignes
    ]
    total_general = sum(m["montant_total"] for m in par_mandat)
    nombre_total = sum(m["nombre_cotisations"] for m in par_mandat)

    return {
        "success": True,
        "total_general": total_general,
        "nombre_total_cotisations": nombre_total,
        "moyenne_generale": round(total_general / nombre_total, 2) if nombre_total else 0,
        "statistiques_par_mandat": par_mandat,
    }


@router.get(
    "/situation",
    summary="Situation globale des cotisations",
)
async def situation_globale(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    return CotisationService(db).situation_globale()


@router.get(
    "/situation/membre/{membre_id}",
    summary="Situation de cotisation d'un membre",
)
async def situation_membre(
    membre_id: int,
    club_id: Optional[int] = Query(None, description="Limiter à un club"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    membre = db.query(User).filter(User.id == membre_id).first()
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    if club_id is not None:
        ensure_club_access(db, current_user, club_id)
    elif current_user.id != membre_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès non autorisé à la situation de ce membre",
        )

    cotisations_query = (
        db.query(Cotisation)
        .join(Mandat, Cotisation.mandat_id == Mandat.id)
        .filter(Cotisation.membre_id == membre_id)
    )
    paiements_query = db.query(PaiementCotisation).filter(PaiementCotisation.membre_id == membre_id)
    if club_id is not None:
        cotisations_query = cotisations_query.filter(Mandat.club_id == club_id)
        paiements_query = paiements_query.filter(PaiementCotisation.club_id == club_id)

    cotisations = cotisations_query.order_by(Mandat.annee.desc()).all()
    paiements = paiements_query.order_by(PaiementCotisation.date.desc()).all()

    total_du = sum(c.montant for c in cotisations)
    total_paye = sum(p.montant for p in paiements)

    return {
        "success": True,
        "membre": {
            "id": membre.id,
            "nom_complet": membre.full_name,
            "email": membre.email,
            "numero_membre": membre.numero_membre,
        },
        "resume": {
            "montant_total_cotisations": total_du,
            "montant_total_paiements": total_paye,
            "solde": total_du - total_paye,
            "taux_recouvrement": taux_recouvrement(total_paye, total_du),
            "nombre_cotisations": len(cotisations),
            "nombre_paiements": len(paiements),
        },
        "cotisations": [
            {
                "cotisation_id": c.id,
                "mandat_id": c.mandat_id,
                "annee": c.mandat.annee,
                "description": c.mandat.description,
                "club_id": c.mandat.club_id,
                "montant": c.montant,
            }
            for c in cotisations
        ],
        "historique_paiements": [
            {
                "paiement_id": p.id,
                "club_id": p.club_id,
                "montant": p.montant,
                "date": p.date,
                "commentaires": p.commentaires,
            }
            for p in paiements
        ],
    }


@router.get(
    "/situation/club/{club_id}",
    summary="Situation des cotisations d'un club",
)
async def situation_club(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    cotisations = (
        db.query(Cotisation)
        .join(Mandat, Cotisation.mandat_id == Mandat.id)
        .filter(Mandat.club_id == club_id)
        .all()
    )
    paiements = db.query(PaiementCotisation).filter(PaiementCotisation.club_id == club_id).all()
    nombre_membres = db.query(UserClub).filter(UserClub.club_id == club_id).count()

    total_du = sum(c.montant for c in cotisations)
    total_paye = sum(p.montant for p in paiements)

    par_mandat = []
    for mandat in club.mandats:
        du_mandat = [c for c in cotisations if c.mandat_id == mandat.id]
        par_mandat.append({
            "mandat_id": mandat.id,
            "annee": mandat.annee,
            "description": mandat.description,
            "est_actuel": mandat.est_actuel,
            "nombre_membres": len({c.membre_id for c in du_mandat}),
            "nombre_cotisations": len(du_mandat),
            "montant_cotisations": sum(c.montant for c in du_mandat),
        })

    return {
        "success": True,
        "club": {"id": club.id, "nom": club.name},
        "resume": {
            "nombre_membres": nombre_membres,
            "montant_total_cotisations": total_du,
            "montant_total_paiements": total_paye,
            "solde": total_du - total_paye,
            "taux_recouvrement": taux_recouvrement(total_paye, total_du),
            "nombre_cotisations": len(cotisations),
            "nombre_paiements": len(paiements),
        },
        "statistiques_par_mandat": par_mandat,
    }


@router.get(
    "/situation/club/{club_id}/membres",
    summary="Situation de chaque membre d'un club",
)
async def situation_membres_club(
    club_id: int,
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    service = CotisationService(db)
    situations: List[SituationMembre] = service.situation_membres_club(club, include_inactive)

    return {
        "success": True,
        "club": {"id": club.id, "nom": club.name},
        "statistiques": service.statistiques_membres(situations),
        "membres": [s.model_dump() for s in situations],
    }


@router.get(
    "/mandat/{mandat_id}",
    response_model=List[CotisationResponse],
    summary="Cotisations d'un mandat",
)
async def list_cotisations_mandat(
    mandat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    mandat = _get_mandat_or_404(db, mandat_id)
    ensure_club_access(db, current_user, mandat.club_id)

    cotisations = (
        db.query(Cotisation)
        .join(User, Cotisation.membre_id == User.id)
        .filter(Cotisation.mandat_id == mandat_id)
        .order_by(User.last_name, User.first_name)
        .all()
    )
    return [_to_response(c) for c in cotisations]


@router.get(
    "/membre/{membre_id}",
    response_model=List[CotisationResponse],
    summary="Cotisations d'un membre",
)
async def list_cotisations_membre(
    membre_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = (
        db.query(Cotisation)
        .join(Mandat, Cotisation.mandat_id == Mandat.id)
        .filter(Cotisation.membre_id == membre_id)
    )
    if current_user.id != membre_id:
        query = _scope_clubs(query, current_user)
    return [_to_response(c) for c in query.order_by(Mandat.annee.desc()).all()]


@router.get(
    "/{cotisation_id}",
    response_model=CotisationResponse,
    summary="Détail d'une cotisation",
)
async def get_cotisation(
    cotisation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    cotisation = _get_cotisation_or_404(db, cotisation_id)
    if cotisation.membre_id != current_user.id:
        ensure_club_access(db, current_user, cotisation.mandat.club_id)
    return _to_response(cotisation)


# ==================== ÉCRITURE ====================

@router.post(
    "/",
    response_model=ApiResponse[CotisationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Créer une cotisation",
)
async def create_cotisation(
    data: CotisationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Crée une cotisation pour un membre et un mandat.

    Une seule cotisation est autorisée par couple (membre, mandat).
    """
    mandat = _get_mandat_or_404(db, data.mandat_id)
    ensure_club_access(db, current_user, mandat.club_id, FINANCE_ROLES)

    if not db.query(User).filter(User.id == data.membre_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    if _existe_doublon(db, data.membre_id, data.mandat_id):
        logger.warning(f"Cotisation en doublon refusée: membre {data.membre_id}, mandat {data.mandat_id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DOUBLON_MESSAGE)

    cotisation = Cotisation(**data.model_dump())
    db.add(cotisation)
    db.commit()
    db.refresh(cotisation)

    logger.info(
        f"Cotisation créée: membre {cotisation.membre_id}, mandat {mandat.annee}, "
        f"{cotisation.montant} FCFA par {current_user.email}"
    )
    return ApiResponse(
        message="Cotisation créée avec succès",
        data=_to_response(cotisation),
    )


@router.put(
    "/{cotisation_id}",
    response_model=ApiResponse[CotisationResponse],
    summary="Modifier une cotisation",
)
async def update_cotisation(
    cotisation_id: int,
    data: CotisationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    cotisation = _get_cotisation_or_404(db, cotisation_id)
    ensure_club_access(db, current_user, cotisation.mandat.club_id, FINANCE_ROLES)

    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "mandat_id" in update_data:
        nouveau_mandat = _get_mandat_or_404(db, update_data["mandat_id"])
        ensure_club_access(db, current_user, nouveau_mandat.club_id, FINANCE_ROLES)
    if "membre_id" in update_data and not db.query(User).filter(User.id == update_data["membre_id"]).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    membre_id = update_data.get("membre_id", cotisation.membre_id)
    mandat_id = update_data.get("mandat_id", cotisation.mandat_id)
    if _existe_doublon(db, membre_id, mandat_id, exclure_id=cotisation.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DOUBLON_MESSAGE)

    for field, value in update_data.items():
        setattr(cotisation, field, value)

    db.commit()
    db.refresh(cotisation)
    logger.info(f"Cotisation {cotisation_id} modifiée par {current_user.email}")
    return ApiResponse(message="Cotisation mise à jour avec succès", data=_to_response(cotisation))


@router.delete(
    "/{cotisation_id}",
    response_model=MessageResponse,
    summary="Supprimer une cotisation",
)
async def delete_cotisation(
    cotisation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    cotisation = _get_cotisation_or_404(db, cotisation_id)
    db.delete(cotisation)
    db.commit()
    logger.info(f"Cotisation {cotisation_id} supprimée par {current_user.email}")
    return MessageResponse(message="Cotisation supprimée avec succès")


@router.post(
    "/bulk-create",
    response_model=BulkCotisationResult,
    summary="Créer les cotisations de tous les membres actifs",
)
async def bulk_create_cotisations(
    data: BulkCotisationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """
    Crée une cotisation pour chaque membre actif du club du mandat.

    Les membres ayant déjà une cotisation pour ce mandat sont ignorés et
    listés dans le résultat.
    """
    mandat = db.query(Mandat).filter(Mandat.id == data.mandat_id).first()
    if not mandat:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le mandat spécifié n'existe pas.",
        )

    membres = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == mandat.club_id, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name)
        .all()
    )
    if not membres:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Aucun membre actif trouvé dans ce club.",
        )

    deja_cotises = {
        membre_id
        for (membre_id,) in db.query(Cotisation.membre_id).filter(Cotisation.mandat_id == mandat.id).all()
    }

    ignores: List[MembreIgnore] = []
    creees = 0
    for membre in membres:
        if membre.id in deja_cotises:
            ignores.append(MembreIgnore(
                id=membre.id,
                name=membre.full_name,
                email=membre.email,
                reason="Cotisation déjà existante",
            ))
            continue
        db.add(Cotisation(membre_id=membre.id, mandat_id=mandat.id, montant=data.montant))
        creees += 1

    db.commit()

    logger.info(
        f"Création en masse mandat {mandat.annee} (club {mandat.club_id}): "
        f"{creees} créée(s), {len(ignores)} ignorée(s)"
    )

    return BulkCotisationResult(
        cotisations_creees=creees,
        membres_ignores=len(ignores),
        membres_ignores_details=ignores,
        mandat_info={
            "id": mandat.id,
            "annee": mandat.annee,
            "description": mandat.description,
            "club_id": mandat.club_id,
            "club_nom": mandat.club.name,
            "montant": data.montant,
        },
        message=f"{creees} cotisation(s) créée(s), {len(ignores)} membre(s) ignoré(s)",
    )
