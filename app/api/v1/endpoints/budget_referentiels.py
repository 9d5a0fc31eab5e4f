"""
Routes des référentiels budgétaires partagés : types et catégories de budget.
"""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.budget import CategoryBudget, SousCategoryBudget, TypeBudget
from app.models.user import User
from app.schemas.club import (
    CategoryBudgetCreate,
    CategoryBudgetResponse,
    TypeBudgetCreate,
    TypeBudgetResponse,
)
from app.schemas.common import MessageResponse
from app.api.deps import get_current_active_user, require_manager


router = APIRouter()


# ==================== TYPES DE BUDGET ====================

@router.get(
    "/types",
    response_model=List[TypeBudgetResponse],
    summary="Types de budget",
)
async def list_types_budget(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return db.query(TypeBudget).order_by(TypeBudget.libelle).all()


@router.post(
    "/types",
    response_model=TypeBudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un type de budget",
)
async def create_type_budget(
    data: TypeBudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    libelle = data.libelle.strip()
    if db.query(TypeBudget).filter(func.lower(TypeBudget.libelle) == libelle.lower()).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un type de budget '{libelle}' existe déjà",
        )

    type_budget = TypeBudget(libelle=libelle)
    db.add(type_budget)
    db.commit()
    db.refresh(type_budget)
    logger.info(f"Type de budget créé: {libelle}")
    return type_budget


@router.delete(
    "/types/{type_id}",
    response_model=MessageResponse,
    summary="Supprimer un type de budget",
)
async def delete_type_budget(
    type_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    type_budget = db.query(TypeBudget).filter(TypeBudget.id == type_id).first()
    if not type_budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type de budget non trouvé")

    if db.query(CategoryBudget).filter(CategoryBudget.type_budget_id == type_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer le type '{type_budget.libelle}' car il contient des catégories",
        )

    db.delete(type_budget)
    db.commit()
    return MessageResponse(message="Type de budget supprimé avec succès")


# ==================== CATÉGORIES ====================

@router.get(
    "/categories",
    response_model=List[CategoryBudgetResponse],
    summary="Catégories de budget",
)
async def list_categories_budget(
    type_budget_id: Optional[int] = Query(None, description="Filtrer par type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = db.query(CategoryBudget)
    if type_budget_id is not None:
        query = query.filter(CategoryBudget.type_budget_id == type_budget_id)
    return query.order_by(CategoryBudget.libelle).all()


@router.post(
    "/categories",
    response_model=CategoryBudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une catégorie de budget",
)
async def create_category_budget(
    data: CategoryBudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    if not db.query(TypeBudget).filter(TypeBudget.id == data.type_budget_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type de budget non trouvé")

    libelle = data.libelle.strip()
    if db.query(CategoryBudget).filter(
        CategoryBudget.type_budget_id == data.type_budget_id,
        func.lower(CategoryBudget.libelle) == libelle.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Une catégorie '{libelle}' existe déjà pour ce type",
        )

    categorie = CategoryBudget(type_budget_id=data.type_budget_id, libelle=libelle)
    db.add(categorie)
    db.commit()
    db.refresh(categorie)
    logger.info(f"Catégorie de budget créée: {libelle}")
    return categorie


@router.delete(
    "/categories/{category_id}",
    response_model=MessageResponse,
    summary="Supprimer une catégorie de budget",
)
async def delete_category_budget(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    categorie = db.query(CategoryBudget).filter(CategoryBudget.id == category_id).first()
    if not categorie:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Catégorie de budget non trouvée")

    if db.query(SousCategoryBudget).filter(SousCategoryBudget.category_budget_id == category_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer la catégorie '{categorie.libelle}' car elle contient des sous-catégories",
        )

    db.delete(categorie)
    db.commit()
    return MessageResponse(message="Catégorie de budget supprimée avec succès")
