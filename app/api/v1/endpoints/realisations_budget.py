"""
Routes des réalisations d'une rubrique budgétaire.
Le montant réalisé de la rubrique est recalculé après chaque écriture.
"""

from decimal import Decimal
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.budget import RubriqueBudget, RubriqueBudgetRealise
from app.models.user import User
from app.schemas.budget import RealisationCreate, RealisationResponse, RealisationUpdate
from app.schemas.common import MessageResponse
from app.api.deps import club_member, club_finance
from app.api.v1.endpoints.rubriques_budget import to_realisation_response


router = APIRouter()


def _get_rubrique_or_404(db: Session, club_id: int, rubrique_id: int) -> RubriqueBudget:
    rubrique = db.query(RubriqueBudget).filter(
        RubriqueBudget.id == rubrique_id,
        RubriqueBudget.club_id == club_id,
    ).first()
    if not rubrique:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubrique budgétaire non trouvée")
    return rubrique


def _get_realisation_or_404(db: Session, rubrique_id: int, realisation_id: int) -> RubriqueBudgetRealise:
    realisation = db.query(RubriqueBudgetRealise).filter(
        RubriqueBudgetRealise.id == realisation_id,
        RubriqueBudgetRealise.rubrique_budget_id == rubrique_id,
    ).first()
    if not realisation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Réalisation non trouvée")
    return realisation


def _verifier_date(rubrique: RubriqueBudget, jour) -> None:
    if not rubrique.mandat.contient(jour):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "La date de réalisation doit être comprise dans la période du mandat "
                f"({rubrique.mandat.periode_complete})"
            ),
        )


def synchroniser_montant_realise(db: Session, rubrique: RubriqueBudget) -> None:
    """Aligne montant_realise sur la somme des réalisations de la rubrique."""
    db.flush()
    total = db.query(func.coalesce(func.sum(RubriqueBudgetRealise.montant), 0)).filter(
        RubriqueBudgetRealise.rubrique_budget_id == rubrique.id,
    ).scalar()
    rubrique.montant_realise = Decimal(str(total))


@router.get(
    "/",
    response_model=List[RealisationResponse],
    summary="Réalisations d'une rubrique",
)
async def list_realisations(
    club_id: int,
    rubrique_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, rubrique_id)
    return [to_realisation_response(r) for r in rubrique.realisations]


@router.get(
    "/statistiques",
    summary="Statistiques des réalisations d'une rubrique",
)
async def statistiques_realisations(
    club_id: int,
    rubrique_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, rubrique_id)
    realisations = sorted(rubrique.realisations, key=lambda r: r.date)

    par_mois: Dict[str, Dict] = {}
    for realisation in realisations:
        mois = realisation.date.strftime("%Y-%m")
        ligne = par_mois.setdefault(mois, {"mois": mois, "nombre": 0, "montant": Decimal(0)})
        ligne["nombre"] += 1
        ligne["montant"] += Decimal(realisation.montant)

    montant_realise = sum((Decimal(r.montant) for r in realisations), Decimal(0))

    return {
        "rubrique_id": rubrique.id,
        "rubrique_libelle": rubrique.libelle,
        "montant_budgete": float(rubrique.montant_total),
        "montant_realise": float(montant_realise),
        "ecart": float(montant_realise - rubrique.montant_total),
        "pourcentage_realisation": rubrique.pourcentage_realisation,
        "nombre_realisations": len(realisations),
        "montant_moyen": float(round(montant_realise / len(realisations), 2)) if realisations else 0.0,
        "par_mois": [
            {"mois": l["mois"], "nombre": l["nombre"], "montant": float(l["montant"])}
            for l in par_mois.values()
        ],
    }


@router.get(
    "/{realisation_id}",
    response_model=RealisationResponse,
    summary="Détail d'une réalisation",
)
async def get_realisation(
    club_id: int,
    rubrique_id: int,
    realisation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    _get_rubrique_or_404(db, club_id, rubrique_id)
    return to_realisation_response(_get_realisation_or_404(db, rubrique_id, realisation_id))


@router.post(
    "/",
    response_model=RealisationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enregistrer une réalisation",
)
async def create_realisation(
    club_id: int,
    rubrique_id: int,
    data: RealisationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, rubrique_id)
    _verifier_date(rubrique, data.date)

    realisation = RubriqueBudgetRealise(
        rubrique_budget_id=rubrique.id,
        date=data.date,
        montant=data.montant,
        commentaires=data.commentaires,
    )
    db.add(realisation)
    synchroniser_montant_realise(db, rubrique)
    db.commit()
    db.refresh(realisation)

    logger.info(f"Réalisation de {data.montant} enregistrée sur la rubrique {rubrique.libelle} (club {club_id})")
    return to_realisation_response(realisation)


@router.put(
    "/{realisation_id}",
    response_model=RealisationResponse,
    summary="Modifier une réalisation",
)
async def update_realisation(
    club_id: int,
    rubrique_id: int,
    realisation_id: int,
    data: RealisationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, rubrique_id)
    realisation = _get_realisation_or_404(db, rubrique_id, realisation_id)

    if data.date is not None:
        _verifier_date(rubrique, data.date)
        realisation.date = data.date
    if data.montant is not None:
        realisation.montant = data.montant
    if data.commentaires is not None:
        realisation.commentaires = data.commentaires

    synchroniser_montant_realise(db, rubrique)
    db.commit()
    db.refresh(realisation)
    return to_realisation_response(realisation)


@router.delete(
    "/{realisation_id}",
    response_model=MessageResponse,
    summary="Supprimer une réalisation",
)
async def delete_realisation(
    club_id: int,
    rubrique_id: int,
    realisation_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, rubrique_id)
    realisation = _get_realisation_or_404(db, rubrique_id, realisation_id)

    db.delete(realisation)
    synchroniser_montant_realise(db, rubrique)
    db.commit()
    return MessageResponse(message="Réalisation supprimée avec succès")
