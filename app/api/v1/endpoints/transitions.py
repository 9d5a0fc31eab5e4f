"""
Routes de passation : mandats, nominations au comité et aux commissions.

Les opérations qui modifient plusieurs lignes (changement de mandat actuel,
remplacement d'un titulaire, changement de responsable) sont exécutées dans
une transaction unique.
"""

from datetime import datetime
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.core.logging import logger, log_transition
from app.models.club import Club, Mandat
from app.models.commission import Commission, MembreComite, MembreCommission, PosteComite
from app.models.user import User
from app.schemas.club import MandatCreate, MandatResponse
from app.schemas.commission import (
    DemissionRequest,
    MembreComiteResponse,
    MembreCommissionResponse,
    NommerMembreComiteRequest,
    NommerMembreCommissionRequest,
)
from app.api.deps import MANAGER_ROLES, ensure_club_access, get_current_active_user, is_club_member


router = APIRouter()


# ==================== HELPERS ====================

def get_mandat_actuel(db: Session, club_id: int) -> Optional[Mandat]:
    """Retourne le mandat actuel d'un club, ou None."""
    return db.query(Mandat).filter(
        Mandat.club_id == club_id,
        Mandat.est_actuel.is_(True),
    ).first()


def to_affectation_response(affectation: MembreCommission) -> MembreCommissionResponse:
    return MembreCommissionResponse(
        id=affectation.id,
        commission_id=affectation.commission_id,
        membre_id=affectation.membre_id,
        nom_complet_membre=affectation.membre.full_name,
        email_membre=affectation.membre.email,
        est_responsable=affectation.est_responsable,
        est_actif=affectation.est_actif,
        date_nomination=affectation.date_nomination,
        date_demission=affectation.date_demission,
        commentaires=affectation.commentaires,
        mandat_id=affectation.mandat_id,
        mandat_annee=affectation.mandat.annee,
        mandat_description=affectation.mandat.description,
    )


def _to_comite_response(nomination: MembreComite) -> MembreComiteResponse:
    return MembreComiteResponse(
        id=nomination.id,
        poste_comite_id=nomination.poste_comite_id,
        poste_nom=nomination.poste.nom,
        membre_id=nomination.membre_id,
        nom_complet_membre=nomination.membre.full_name,
        mandat_id=nomination.mandat_id,
        mandat_annee=nomination.mandat.annee,
        club_id=nomination.club_id,
        est_actif=nomination.est_actif,
        date_nomination=nomination.date_nomination,
        date_demission=nomination.date_demission,
        commentaires=nomination.commentaires,
    )


def _get_mandat_or_404(db: Session, mandat_id: int) -> Mandat:
    mandat = db.query(Mandat).filter(Mandat.id == mandat_id).first()
    if not mandat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mandat non trouvé")
    return mandat


def _get_membre_du_club(db: Session, membre_id: int, club_id: int) -> User:
    membre = db.query(User).filter(User.id == membre_id).first()
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")
    if not is_club_member(db, membre.id, club_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le membre n'appartient pas au club du mandat",
        )
    return membre


def _ajouter_commentaire(existant: Optional[str], ajout: Optional[str]) -> Optional[str]:
    if not ajout:
        return existant
    return f"{existant} | {ajout}" if existant else ajout


# ==================== MANDATS ====================

@router.post(
    "/mandats/nouveau",
    response_model=MandatResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un nouveau mandat",
)
async def nouveau_mandat(
    data: MandatCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Crée le mandat d'une nouvelle année pour un club.

    Si le nouveau mandat est actuel, l'ancien mandat actuel est désactivé
    dans la même transaction.
    """
    club = db.query(Club).filter(Club.id == data.club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    ensure_club_access(db, current_user, club.id, MANAGER_ROLES)

    if db.query(Mandat).filter(Mandat.club_id == club.id, Mandat.annee == data.annee).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un mandat existe déjà pour l'année {data.annee} dans ce club",
        )

    with transaction(db, "création du mandat"):
        if data.est_actuel:
            db.query(Mandat).filter(
                Mandat.club_id == club.id,
                Mandat.est_actuel.is_(True),
            ).update({Mandat.est_actuel: False}, synchronize_session="fetch")

        mandat = Mandat(
            club_id=club.id,
            annee=data.annee,
            date_debut=data.date_debut,
            date_fin=data.date_fin,
            description=data.description,
            montant_cotisation=data.montant_cotisation,
            est_actuel=data.est_actuel,
        )
        db.add(mandat)

    db.refresh(mandat)
    log_transition("nouveau_mandat", club.id, mandat.id, {"annee": mandat.annee, "est_actuel": mandat.est_actuel})
    return mandat


@router.get(
    "/mandats/{mandat_id}",
    response_model=MandatResponse,
    summary="Détail d'un mandat",
)
async def get_mandat(
    mandat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    mandat = _get_mandat_or_404(db, mandat_id)
    ensure_club_access(db, current_user, mandat.club_id)
    return mandat


@router.post(
    "/mandats/{mandat_id}/activer",
    response_model=MandatResponse,
    summary="Activer un mandat",
)
async def activer_mandat(
    mandat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    mandat = _get_mandat_or_404(db, mandat_id)
    ensure_club_access(db, current_user, mandat.club_id, MANAGER_ROLES)

    with transaction(db, "activation du mandat"):
        db.query(Mandat).filter(
            Mandat.club_id == mandat.club_id,
            Mandat.id != mandat.id,
            Mandat.est_actuel.is_(True),
        ).update({Mandat.est_actuel: False}, synchronize_session="fetch")
        mandat.est_actuel = True

    db.refresh(mandat)
    log_transition("activation", mandat.club_id, mandat.id, {"annee": mandat.annee})
    return mandat


@router.get(
    "/club/{club_id}/mandat-actuel",
    response_model=MandatResponse,
    summary="Mandat actuel d'un club",
)
async def mandat_actuel(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    ensure_club_access(db, current_user, club_id)
    mandat = get_mandat_actuel(db, club_id)
    if not mandat:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Aucun mandat actuel trouvé pour ce club",
        )
    return mandat


@router.get(
    "/club/{club_id}/historique-mandats",
    response_model=List[MandatResponse],
    summary="Historique des mandats d'un club",
)
async def historique_mandats(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    ensure_club_access(db, current_user, club_id)
    return db.query(Mandat).filter(Mandat.club_id == club_id).order_by(Mandat.annee.desc()).all()


# ==================== COMITÉ ====================

@router.post(
    "/comite/nommer",
    response_model=MembreComiteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Nommer un membre au comité",
)
async def nommer_membre_comite(
    data: NommerMembreComiteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Nomme un membre à un poste du comité pour un mandat.
    Le titulaire actif du poste pour ce mandat est remplacé.
    """
    mandat = _get_mandat_or_404(db, data.mandat_id)
    ensure_club_access(db, current_user, mandat.club_id, MANAGER_ROLES)

    poste = db.query(PosteComite).filter(PosteComite.id == data.poste_comite_id).first()
    if not poste:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poste du comité non trouvé")
    if poste.club_id != mandat.club_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le poste n'appartient pas au club du mandat",
        )
    membre = _get_membre_du_club(db, data.membre_id, mandat.club_id)

    if db.query(MembreComite).filter(
        MembreComite.membre_id == membre.id,
        MembreComite.poste_comite_id == poste.id,
        MembreComite.mandat_id == mandat.id,
        MembreComite.est_actif.is_(True),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre occupe déjà ce poste pour ce mandat",
        )

    date_nomination = data.date_nomination or datetime.utcnow()

    with transaction(db, "nomination au comité"):
        precedents = db.query(MembreComite).filter(
            MembreComite.poste_comite_id == poste.id,
            MembreComite.mandat_id == mandat.id,
            MembreComite.est_actif.is_(True),
        ).all()
        for precedent in precedents:
            precedent.est_actif = False
            precedent.date_demission = date_nomination
            precedent.commentaires = _ajouter_commentaire(precedent.commentaires, "Remplacé par une nouvelle nomination")

        nomination = MembreComite(
            poste_comite_id=poste.id,
            membre_id=membre.id,
            mandat_id=mandat.id,
            club_id=mandat.club_id,
            date_nomination=date_nomination,
            commentaires=data.commentaires,
        )
        db.add(nomination)

    db.refresh(nomination)
    log_transition(
        "nomination",
        mandat.club_id,
        nomination.id,
        {"poste": poste.nom, "membre_id": membre.id, "remplaces": len(precedents)},
    )
    return _to_comite_response(nomination)


def _get_nomination_comite_or_404(db: Session, nomination_id: int) -> MembreComite:
    nomination = db.query(MembreComite).filter(MembreComite.id == nomination_id).first()
    if not nomination:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nomination au comité non trouvée")
    return nomination


@router.post(
    "/comite/{nomination_id}/demissionner",
    response_model=MembreComiteResponse,
    summary="Démission d'un membre du comité",
)
async def demissionner_comite(
    nomination_id: int,
    data: DemissionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    nomination = _get_nomination_comite_or_404(db, nomination_id)
    ensure_club_access(db, current_user, nomination.club_id, MANAGER_ROLES)

    if not nomination.est_actif:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cette nomination n'est plus active",
        )

    nomination.est_actif = False
    nomination.date_demission = data.date_demission or datetime.utcnow()
    nomination.commentaires = _ajouter_commentaire(nomination.commentaires, data.commentaires)
    db.commit()
    db.refresh(nomination)

    log_transition("demission", nomination.club_id, nomination.id, {"poste": nomination.poste.nom})
    return _to_comite_response(nomination)


@router.get(
    "/comite/{nomination_id}",
    response_model=MembreComiteResponse,
    summary="Détail d'une nomination au comité",
)
async def get_nomination_comite(
    nomination_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    nomination = _get_nomination_comite_or_404(db, nomination_id)
    ensure_club_access(db, current_user, nomination.club_id)
    return _to_comite_response(nomination)


# ==================== COMMISSIONS ====================

def _retirer_responsable(db: Session, commission_id: int, mandat_id: int, sauf_id: Optional[int] = None) -> int:
    query = db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission_id,
        MembreCommission.mandat_id == mandat_id,
        MembreCommission.est_actif.is_(True),
        MembreCommission.est_responsable.is_(True),
    )
    if sauf_id is not None:
        query = query.filter(MembreCommission.id != sauf_id)
    anciens = query.all()
    for ancien in anciens:
        ancien.est_responsable = False
    return len(anciens)


@router.post(
    "/commission/nommer",
    response_model=MembreCommissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Nommer un membre dans une commission",
)
async def nommer_membre_commission(
    data: NommerMembreCommissionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Affecte un membre à une commission pour un mandat.
    Un nouveau responsable remplace le responsable actif précédent.
    """
    mandat = _get_mandat_or_404(db, data.mandat_id)
    ensure_club_access(db, current_user, mandat.club_id, MANAGER_ROLES)

    commission = db.query(Commission).filter(Commission.id == data.commission_id).first()
    if not commission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Commission non trouvée")
    if commission.club_id != mandat.club_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La commission n'appartient pas au club du mandat",
        )
    membre = _get_membre_du_club(db, data.membre_id, mandat.club_id)

    if db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission.id,
        MembreCommission.membre_id == membre.id,
        MembreCommission.mandat_id == mandat.id,
        MembreCommission.est_actif.is_(True),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre fait déjà partie de cette commission pour ce mandat",
        )

    with transaction(db, "nomination en commission"):
        retires = _retirer_responsable(db, commission.id, mandat.id) if data.est_responsable else 0
        affectation = MembreCommission(
            commission_id=commission.id,
            membre_id=membre.id,
            mandat_id=mandat.id,
            est_responsable=data.est_responsable,
            date_nomination=data.date_nomination or datetime.utcnow(),
            commentaires=data.commentaires,
        )
        db.add(affectation)

    db.refresh(affectation)
    log_transition(
        "nomination",
        mandat.club_id,
        affectation.id,
        {"commission": commission.nom, "membre_id": membre.id, "responsable": data.est_responsable, "retires": retires},
    )
    return to_affectation_response(affectation)


def _get_affectation_or_404(db: Session, affectation_id: int) -> MembreCommission:
    affectation = db.query(MembreCommission).filter(MembreCommission.id == affectation_id).first()
    if not affectation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Affectation non trouvée")
    return affectation


@router.post(
    "/commission/{affectation_id}/demissionner",
    response_model=MembreCommissionResponse,
    summary="Démission d'un membre d'une commission",
)
async def demissionner_commission(
    affectation_id: int,
    data: DemissionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    affectation = _get_affectation_or_404(db, affectation_id)
    ensure_club_access(db, current_user, affectation.commission.club_id, MANAGER_ROLES)

    if not affectation.est_actif:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cette affectation n'est plus active",
        )

    affectation.est_actif = False
    affectation.est_responsable = False
    affectation.date_demission = data.date_demission or datetime.utcnow()
    affectation.commentaires = _ajouter_commentaire(affectation.commentaires, data.commentaires)
    db.commit()
    db.refresh(affectation)

    log_transition("demission", affectation.commission.club_id, affectation.id, {"commission": affectation.commission.nom})
    return to_affectation_response(affectation)


@router.post(
    "/commission/{affectation_id}/responsable",
    response_model=MembreCommissionResponse,
    summary="Désigner le responsable d'une commission",
)
async def designer_responsable(
    affectation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    affectation = _get_affectation_or_404(db, affectation_id)
    club_id = affectation.commission.club_id
    ensure_club_access(db, current_user, club_id, MANAGER_ROLES)

    if not affectation.est_actif:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cette affectation n'est plus active",
        )
    if affectation.est_responsable:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre est déjà responsable de cette commission",
        )

    with transaction(db, "changement de responsable"):
        _retirer_responsable(db, affectation.commission_id, affectation.mandat_id, sauf_id=affectation.id)
        affectation.est_responsable = True

    db.refresh(affectation)
    logger.info(f"Nouveau responsable de la commission {affectation.commission.nom}: {affectation.membre.email}")
    log_transition("responsable", club_id, affectation.id, {"commission": affectation.commission.nom})
    return to_affectation_response(affectation)


@router.get(
    "/commission/{affectation_id}",
    response_model=MembreCommissionResponse,
    summary="Détail d'une affectation en commission",
)
async def get_affectation(
    affectation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    affectation = _get_affectation_or_404(db, affectation_id)
    ensure_club_access(db, current_user, affectation.commission.club_id)
    return to_affectation_response(affectation)
