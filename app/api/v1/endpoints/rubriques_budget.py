"""
Routes des rubriques budgétaires d'un club pour un mandat.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.budget import CategoryBudget, RubriqueBudget, RubriqueBudgetRealise, SousCategoryBudget
from app.models.club import Club, Mandat
from app.models.user import User
from app.schemas.budget import (
    RealisationResponse,
    RealisationResume,
    RubriqueBudgetCreate,
    RubriqueBudgetDetailResponse,
    RubriqueBudgetResponse,
    RubriqueBudgetUpdate,
)
from app.schemas.common import MessageResponse
from app.api.deps import club_member, club_finance


router = APIRouter()


def get_mandat_du_club_or_404(db: Session, club_id: int, mandat_id: int) -> Mandat:
    if not db.query(Club).filter(Club.id == club_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")
    mandat = db.query(Mandat).filter(Mandat.id == mandat_id, Mandat.club_id == club_id).first()
    if not mandat:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Mandat non trouvé pour ce club")
    return mandat


def _get_rubrique_or_404(db: Session, club_id: int, mandat_id: int, rubrique_id: int) -> RubriqueBudget:
    rubrique = db.query(RubriqueBudget).filter(
        RubriqueBudget.id == rubrique_id,
        RubriqueBudget.club_id == club_id,
        RubriqueBudget.mandat_id == mandat_id,
    ).first()
    if not rubrique:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rubrique budgétaire non trouvée")
    return rubrique


def _get_sous_categorie_du_club(db: Session, club_id: int, sous_categorie_id: int) -> SousCategoryBudget:
    sous_categorie = db.query(SousCategoryBudget).filter(
        SousCategoryBudget.id == sous_categorie_id,
        SousCategoryBudget.club_id == club_id,
    ).first()
    if not sous_categorie:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La sous-catégorie spécifiée n'existe pas dans ce club",
        )
    return sous_categorie


def _verifier_libelle_unique(
    db: Session,
    mandat_id: int,
    sous_categorie_id: int,
    libelle: str,
    exclure_id: Optional[int] = None,
) -> None:
    query = db.query(RubriqueBudget).filter(
        RubriqueBudget.mandat_id == mandat_id,
        RubriqueBudget.sous_category_budget_id == sous_categorie_id,
        func.lower(RubriqueBudget.libelle) == libelle.lower(),
    )
    if exclure_id is not None:
        query = query.filter(RubriqueBudget.id != exclure_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Une rubrique '{libelle}' existe déjà pour cette sous-catégorie et ce mandat",
        )


def to_rubrique_response(rubrique: RubriqueBudget) -> RubriqueBudgetResponse:
    sous_categorie = rubrique.sous_category_budget
    categorie = sous_categorie.category_budget
    return RubriqueBudgetResponse(
        id=rubrique.id,
        libelle=rubrique.libelle,
        prix_unitaire=rubrique.prix_unitaire,
        quantite=rubrique.quantite,
        montant_total=rubrique.montant_total,
        sous_category_budget_id=rubrique.sous_category_budget_id,
        sous_category_libelle=sous_categorie.libelle,
        category_budget_libelle=categorie.libelle,
        type_budget_libelle=categorie.type_budget.libelle,
        mandat_id=rubrique.mandat_id,
        mandat_annee=rubrique.mandat.annee,
        club_id=rubrique.club_id,
        club_nom=rubrique.club.name,
        nombre_realisations=len(rubrique.realisations),
        montant_realise=Decimal(rubrique.montant_realise or 0),
        ecart_budget_realise=rubrique.ecart_budget_realise,
        pourcentage_realisation=rubrique.pourcentage_realisation,
    )


def to_realisation_response(realisation: RubriqueBudgetRealise) -> RealisationResponse:
    rubrique = realisation.rubrique
    categorie = rubrique.sous_category_budget.category_budget
    return RealisationResponse(
        id=realisation.id,
        date=realisation.date,
        montant=realisation.montant,
        commentaires=realisation.commentaires,
        rubrique_budget_id=rubrique.id,
        rubrique_libelle=rubrique.libelle,
        sous_category_libelle=rubrique.sous_category_budget.libelle,
        category_budget_libelle=categorie.libelle,
        type_budget_libelle=categorie.type_budget.libelle,
        mandat_annee=rubrique.mandat.annee,
        club_nom=rubrique.club.name,
    )


@router.get(
    "/",
    response_model=List[RubriqueBudgetResponse],
    summary="Rubriques budgétaires du mandat",
)
async def list_rubriques(
    club_id: int,
    mandat_id: int,
    response: Response,
    sous_category_budget_id: Optional[int] = Query(None),
    category_budget_id: Optional[int] = Query(None),
    type_budget_id: Optional[int] = Query(None),
    recherche: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    """Le nombre total de rubriques filtrées est renvoyé dans l'en-tête X-Total-Count."""
    get_mandat_du_club_or_404(db, club_id, mandat_id)

    query = (
        db.query(RubriqueBudget)
        .join(SousCategoryBudget, RubriqueBudget.sous_category_budget_id == SousCategoryBudget.id)
        .join(CategoryBudget, SousCategoryBudget.category_budget_id == CategoryBudget.id)
        .filter(RubriqueBudget.club_id == club_id, RubriqueBudget.mandat_id == mandat_id)
    )
    if sous_category_budget_id is not None:
        query = query.filter(RubriqueBudget.sous_category_budget_id == sous_category_budget_id)
    if category_budget_id is not None:
        query = query.filter(SousCategoryBudget.category_budget_id == category_budget_id)
    if type_budget_id is not None:
        query = query.filter(CategoryBudget.type_budget_id == type_budget_id)
    if recherche and recherche.strip():
        query = query.filter(func.lower(RubriqueBudget.libelle).like(f"%{recherche.strip().lower()}%"))

    total = query.count()
    rubriques = (
        query.order_by(CategoryBudget.libelle, SousCategoryBudget.libelle, RubriqueBudget.libelle)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    response.headers["X-Total-Count"] = str(total)
    return [to_rubrique_response(r) for r in rubriques]


@router.get(
    "/statistiques",
    summary="Statistiques budgétaires du mandat",
)
async def statistiques_budget(
    club_id: int,
    mandat_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    """Montants budgétés et réalisés par type de budget ; écart = réalisé - budget."""
    mandat = get_mandat_du_club_or_404(db, club_id, mandat_id)
    rubriques = db.query(RubriqueBudget).filter(
        RubriqueBudget.club_id == club_id,
        RubriqueBudget.mandat_id == mandat_id,
    ).all()

    par_type: Dict[int, Dict] = {}
    for rubrique in rubriques:
        type_budget = rubrique.sous_category_budget.category_budget.type_budget
        ligne = par_type.setdefault(type_budget.id, {
            "type_budget_id": type_budget.id,
            "type_budget_libelle": type_budget.libelle,
            "nombre_rubriques": 0,
            "montant_budgete": Decimal(0),
            "montant_realise": Decimal(0),
        })
        ligne["nombre_rubriques"] += 1
        ligne["montant_budgete"] += rubrique.montant_total
        ligne["montant_realise"] += Decimal(rubrique.montant_realise or 0)

    lignes = sorted(par_type.values(), key=lambda l: l["type_budget_libelle"])
    for ligne in lignes:
        ligne["ecart"] = float(ligne["montant_realise"] - ligne["montant_budgete"])
        ligne["montant_budgete"] = float(ligne["montant_budgete"])
        ligne["montant_realise"] = float(ligne["montant_realise"])

    total_budgete = sum(l["montant_budgete"] for l in lignes)
    total_realise = sum(l["montant_realise"] for l in lignes)

    return {
        "club_id": club_id,
        "mandat_id": mandat.id,
        "mandat_annee": mandat.annee,
        "nombre_rubriques": len(rubriques),
        "total_budgete": total_budgete,
        "total_realise": total_realise,
        "ecart_total": total_realise - total_budgete,
        "pourcentage_realisation": round(total_realise / total_budgete * 100, 2) if total_budgete else 0.0,
        "par_type_budget": lignes,
    }


@router.get(
    "/{rubrique_id}",
    response_model=RubriqueBudgetDetailResponse,
    summary="Détail d'une rubrique",
)
async def get_rubrique(
    club_id: int,
    mandat_id: int,
    rubrique_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, mandat_id, rubrique_id)
    return RubriqueBudgetDetailResponse(
        **to_rubrique_response(rubrique).model_dump(),
        realisations=[RealisationResume.model_validate(r) for r in rubrique.realisations],
    )


@router.get(
    "/{rubrique_id}/realisations",
    response_model=List[RealisationResponse],
    summary="Réalisations d'une rubrique",
)
async def list_realisations_rubrique(
    club_id: int,
    mandat_id: int,
    rubrique_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, mandat_id, rubrique_id)
    return [to_realisation_response(r) for r in rubrique.realisations]


@router.post(
    "/",
    response_model=RubriqueBudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une rubrique budgétaire",
)
async def create_rubrique(
    club_id: int,
    mandat_id: int,
    data: RubriqueBudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    get_mandat_du_club_or_404(db, club_id, mandat_id)
    _get_sous_categorie_du_club(db, club_id, data.sous_category_budget_id)

    libelle = data.libelle.strip()
    _verifier_libelle_unique(db, mandat_id, data.sous_category_budget_id, libelle)

    rubrique = RubriqueBudget(
        club_id=club_id,
        mandat_id=mandat_id,
        sous_category_budget_id=data.sous_category_budget_id,
        libelle=libelle,
        prix_unitaire=data.prix_unitaire,
        quantite=data.quantite,
        montant_realise=Decimal(0),
    )
    db.add(rubrique)
    db.commit()
    db.refresh(rubrique)

    logger.info(f"Rubrique budgétaire créée: {libelle} ({rubrique.montant_total}) club {club_id}, mandat {mandat_id}")
    return to_rubrique_response(rubrique)


@router.put(
    "/{rubrique_id}",
    response_model=RubriqueBudgetResponse,
    summary="Modifier une rubrique budgétaire",
)
async def update_rubrique(
    club_id: int,
    mandat_id: int,
    rubrique_id: int,
    data: RubriqueBudgetUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, mandat_id, rubrique_id)
    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "sous_category_budget_id" in update_data:
        _get_sous_categorie_du_club(db, club_id, update_data["sous_category_budget_id"])
    if "libelle" in update_data:
        update_data["libelle"] = update_data["libelle"].strip()

    _verifier_libelle_unique(
        db,
        mandat_id,
        update_data.get("sous_category_budget_id", rubrique.sous_category_budget_id),
        update_data.get("libelle", rubrique.libelle),
        exclure_id=rubrique.id,
    )

    for field, value in update_data.items():
        setattr(rubrique, field, value)

    db.commit()
    db.refresh(rubrique)
    return to_rubrique_response(rubrique)


@router.delete(
    "/{rubrique_id}",
    response_model=MessageResponse,
    summary="Supprimer une rubrique budgétaire",
)
async def delete_rubrique(
    club_id: int,
    mandat_id: int,
    rubrique_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    rubrique = _get_rubrique_or_404(db, club_id, mandat_id, rubrique_id)

    if rubrique.realisations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Impossible de supprimer la rubrique '{rubrique.libelle}' car elle contient "
                f"{len(rubrique.realisations)} réalisation(s)"
            ),
        )

    db.delete(rubrique)
    db.commit()
    logger.info(f"Rubrique budgétaire {rubrique_id} supprimée par {current_user.email}")
    return MessageResponse(message="Rubrique supprimée avec succès")
