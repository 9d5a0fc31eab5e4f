"""
Routes des membres des commissions et vues des membres d'un club.
"""

from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.club import Mandat
from app.models.commission import Commission, MembreComite, MembreCommission
from app.models.user import User, UserClub
from app.schemas.commission import (
    AffecterMembreCommissionRequest,
    CommissionMembreInfo,
    FonctionMembreInfo,
    MandatInfo,
    MembreClubCompletResponse,
    MembreClubResponse,
    MembreCommissionResponse,
    MembreDisponible,
    MembreFonctionCommission,
    ModifierAffectationRequest,
)
from app.schemas.common import MessageResponse
from app.api.deps import club_member, club_manager
from app.api.v1.endpoints.transitions import get_mandat_actuel, to_affectation_response


router = APIRouter()
membres_router = APIRouter()


def _get_commission_or_404(db: Session, club_id: int, commission_id: int) -> Commission:
    commission = db.query(Commission).filter(
        Commission.id == commission_id,
        Commission.club_id == club_id,
    ).first()
    if not commission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Commission non trouvée dans ce club")
    return commission


def _get_affectation_or_404(db: Session, commission_id: int, affectation_id: int) -> MembreCommission:
    affectation = db.query(MembreCommission).filter(
        MembreCommission.id == affectation_id,
        MembreCommission.commission_id == commission_id,
    ).first()
    if not affectation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Affectation non trouvée")
    return affectation


def _membre_actif_du_club(db: Session, club_id: int, membre_id: int) -> Optional[User]:
    return (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(User.id == membre_id, UserClub.club_id == club_id, User.is_active.is_(True))
        .first()
    )


def _responsable_actif(db: Session, commission_id: int, mandat_id: int, exclure_id: Optional[int] = None) -> bool:
    query = db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission_id,
        MembreCommission.mandat_id == mandat_id,
        MembreCommission.est_responsable.is_(True),
        MembreCommission.est_actif.is_(True),
    )
    if exclure_id is not None:
        query = query.filter(MembreCommission.id != exclure_id)
    return query.first() is not None


def _membre_club_response(membre: User) -> dict:
    return dict(
        id=membre.id,
        nom_complet=membre.full_name,
        first_name=membre.first_name,
        last_name=membre.last_name,
        email=membre.email,
        phone_number=membre.phone_number,
        numero_membre=membre.numero_membre,
        is_active=membre.is_active,
        role=membre.role,
    )


def _commission_info(affectation: MembreCommission) -> CommissionMembreInfo:
    return CommissionMembreInfo(
        commission_id=affectation.commission_id,
        nom_commission=affectation.commission.nom,
        est_responsable=affectation.est_responsable,
        date_nomination=affectation.date_nomination,
    )


# ==================== MEMBRES D'UNE COMMISSION ====================

@router.get(
    "/",
    summary="Membres d'une commission",
)
async def list_membres_commission(
    club_id: int,
    commission_id: int,
    mandat_id: Optional[int] = Query(None),
    actifs_seulement: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    commission = _get_commission_or_404(db, club_id, commission_id)

    query = db.query(MembreCommission).filter(MembreCommission.commission_id == commission_id)
    if mandat_id is not None:
        query = query.filter(MembreCommission.mandat_id == mandat_id)
    if actifs_seulement:
        query = query.filter(MembreCommission.est_actif.is_(True))

    affectations = sorted(
        query.all(),
        key=lambda a: (not a.est_responsable, a.membre.last_name, a.membre.first_name),
    )

    return {
        "commission": {"id": commission.id, "nom": commission.nom, "club_id": commission.club_id},
        "membres": [to_affectation_response(a) for a in affectations],
        "statistiques": {
            "nombre_total": len(affectations),
            "nombre_actifs": sum(1 for a in affectations if a.est_actif),
            "nombre_inactifs": sum(1 for a in affectations if not a.est_actif),
            "nombre_responsables": sum(1 for a in affectations if a.est_responsable and a.est_actif),
        },
    }


@router.get(
    "/disponibles",
    response_model=List[MembreDisponible],
    summary="Membres pouvant rejoindre la commission",
)
async def list_membres_disponibles(
    club_id: int,
    commission_id: int,
    mandat_id: Optional[int] = Query(None, description="Mandat actuel par défaut"),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    _get_commission_or_404(db, club_id, commission_id)

    if mandat_id is None:
        mandat = get_mandat_actuel(db, club_id)
        if not mandat:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aucun mandat actuel trouvé pour ce club")
        mandat_id = mandat.id

    deja = {
        membre_id
        for (membre_id,) in db.query(MembreCommission.membre_id).filter(
            MembreCommission.commission_id == commission_id,
            MembreCommission.mandat_id == mandat_id,
            MembreCommission.est_actif.is_(True),
        ).all()
    }

    membres = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name)
        .all()
    )
    return [
        MembreDisponible(id=m.id, nom_complet=m.full_name, email=m.email)
        for m in membres
        if m.id not in deja
    ]


@router.get(
    "/{affectation_id}",
    response_model=MembreCommissionResponse,
    summary="Détail d'une affectation",
)
async def get_affectation(
    club_id: int,
    commission_id: int,
    affectation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    _get_commission_or_404(db, club_id, commission_id)
    return to_affectation_response(_get_affectation_or_404(db, commission_id, affectation_id))


@router.post(
    "/",
    response_model=MembreCommissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Affecter un membre à la commission",
)
async def affecter_membre(
    club_id: int,
    commission_id: int,
    data: AffecterMembreCommissionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    """
    Le membre doit être actif dans le club et le mandat appartenir au club.
    Une commission a au plus un responsable actif par mandat.
    """
    commission = _get_commission_or_404(db, club_id, commission_id)

    membre = _membre_actif_du_club(db, club_id, data.membre_id)
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé ou inactif dans ce club")

    mandat = db.query(Mandat).filter(Mandat.id == data.mandat_id, Mandat.club_id == club_id).first()
    if not mandat:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Le mandat spécifié n'appartient pas à ce club")

    if db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission_id,
        MembreCommission.membre_id == data.membre_id,
        MembreCommission.mandat_id == data.mandat_id,
        MembreCommission.est_actif.is_(True),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre fait déjà partie de cette commission pour ce mandat",
        )

    if data.est_responsable and _responsable_actif(db, commission_id, data.mandat_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cette commission a déjà un responsable actif pour ce mandat",
        )

    affectation = MembreCommission(
        commission_id=commission_id,
        membre_id=data.membre_id,
        mandat_id=data.mandat_id,
        est_responsable=data.est_responsable,
        est_actif=True,
        date_nomination=data.date_nomination or datetime.utcnow(),
        commentaires=data.commentaires,
    )
    db.add(affectation)
    db.commit()
    db.refresh(affectation)

    logger.info(f"Membre {membre.email} affecté à la commission {commission.nom} (mandat {mandat.annee})")
    return to_affectation_response(affectation)


@router.put(
    "/{affectation_id}",
    response_model=MembreCommissionResponse,
    summary="Modifier une affectation",
)
async def modifier_affectation(
    club_id: int,
    commission_id: int,
    affectation_id: int,
    data: ModifierAffectationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    _get_commission_or_404(db, club_id, commission_id)
    affectation = _get_affectation_or_404(db, commission_id, affectation_id)

    if data.est_actif is not None and data.est_actif != affectation.est_actif:
        affectation.est_actif = data.est_actif
        affectation.date_demission = None if data.est_actif else datetime.utcnow()
        if not data.est_actif:
            affectation.est_responsable = False

    if data.est_responsable is not None:
        if data.est_responsable and not affectation.est_actif:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Un membre inactif ne peut pas être responsable",
            )
        if data.est_responsable and _responsable_actif(db, commission_id, affectation.mandat_id, exclure_id=affectation.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cette commission a déjà un responsable actif pour ce mandat",
            )
        affectation.est_responsable = data.est_responsable

    if data.commentaires is not None:
        affectation.commentaires = data.commentaires

    db.commit()
    db.refresh(affectation)
    return to_affectation_response(affectation)


@router.delete(
    "/by-membre/{membre_id}",
    response_model=MessageResponse,
    summary="Retirer un membre de la commission",
)
async def retirer_membre(
    club_id: int,
    commission_id: int,
    membre_id: int,
    mandat_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    _get_commission_or_404(db, club_id, commission_id)

    query = db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission_id,
        MembreCommission.membre_id == membre_id,
    )
    if mandat_id is not None:
        query = query.filter(MembreCommission.mandat_id == mandat_id)
    affectations = query.all()

    if not affectations:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ce membre ne fait pas partie de cette commission",
        )

    for affectation in affectations:
        db.delete(affectation)
    db.commit()

    logger.info(f"Membre {membre_id} retiré de la commission {commission_id} ({len(affectations)} affectation(s))")
    return MessageResponse(message="Membre retiré de la commission avec succès")


@router.delete(
    "/{affectation_id}",
    response_model=MessageResponse,
    summary="Supprimer une affectation",
)
async def delete_affectation(
    club_id: int,
    commission_id: int,
    affectation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    _get_commission_or_404(db, club_id, commission_id)
    affectation = _get_affectation_or_404(db, commission_id, affectation_id)
    db.delete(affectation)
    db.commit()
    return MessageResponse(message="Affectation supprimée avec succès")


# ==================== MEMBRES DU CLUB ====================

@membres_router.get(
    "/",
    response_model=List[MembreClubResponse],
    summary="Membres du club",
)
async def list_membres_club(
    club_id: int,
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    query = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id)
    )
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    membres = query.order_by(User.last_name, User.first_name).all()
    return [MembreClubResponse(**_membre_club_response(m)) for m in membres]


@membres_router.get(
    "/fonctions-commissions",
    summary="Fonctions et commissions des membres pour le mandat actuel",
)
async def fonctions_commissions(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    mandat = get_mandat_actuel(db, club_id)
    if not mandat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aucun mandat actuel trouvé pour ce club")

    mandat_info = MandatInfo(mandat_id=mandat.id, annee=mandat.annee, description=mandat.description)

    fonctions = {
        nomination.membre_id: FonctionMembreInfo(poste_id=nomination.poste_comite_id, nom_poste=nomination.poste.nom)
        for nomination in db.query(MembreComite).filter(
            MembreComite.club_id == club_id,
            MembreComite.mandat_id == mandat.id,
            MembreComite.est_actif.is_(True),
        ).all()
    }

    affectations = (
        db.query(MembreCommission)
        .join(Commission, MembreCommission.commission_id == Commission.id)
        .filter(
            Commission.club_id == club_id,
            MembreCommission.mandat_id == mandat.id,
            MembreCommission.est_actif.is_(True),
        )
        .all()
    )

    membres = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id, User.is_active.is_(True))
        .order_by(User.last_name, User.first_name)
        .all()
    )

    resultat = [
        MembreFonctionCommission(
            membre_id=m.id,
            nom_complet_membre=m.full_name,
            first_name=m.first_name,
            last_name=m.last_name,
            email=m.email,
            mandat_actuel=mandat_info,
            fonction=fonctions.get(m.id),
            commissions=[_commission_info(a) for a in affectations if a.membre_id == m.id],
        )
        for m in membres
    ]

    return {
        "mandat_actuel": mandat_info,
        "membres": resultat,
        "statistiques": {
            "nombre_membres": len(resultat),
            "avec_fonction": sum(1 for r in resultat if r.fonction),
            "avec_commission": sum(1 for r in resultat if r.commissions),
            "sans_affectation": sum(1 for r in resultat if not r.fonction and not r.commissions),
        },
    }


@membres_router.get(
    "/{membre_id}",
    response_model=MembreClubCompletResponse,
    summary="Détail d'un membre du club",
)
async def get_membre_club(
    club_id: int,
    membre_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    membre = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(User.id == membre_id, UserClub.club_id == club_id)
        .first()
    )
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé dans ce club")

    affectations = (
        db.query(MembreCommission)
        .join(Commission, MembreCommission.commission_id == Commission.id)
        .filter(
            Commission.club_id == club_id,
            MembreCommission.membre_id == membre_id,
            MembreCommission.est_actif.is_(True),
        )
        .all()
    )

    return MembreClubCompletResponse(
        **_membre_club_response(membre),
        commissions_actuelles=[_commission_info(a) for a in affectations],
    )
