"""
Routes des clubs et de leurs référentiels : types de réunion, commissions,
postes du comité et sous-catégories budgétaires.
"""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.budget import CategoryBudget, RubriqueBudget, SousCategoryBudget
from app.models.club import Club
from app.models.commission import Commission, MembreCommission, MembreComite, PosteComite
from app.models.reunion import Reunion, TypeReunion
from app.models.user import User
from app.schemas.club import (
    ClubCreate,
    ClubUpdate,
    ClubResponse,
    CommissionCreate,
    CommissionUpdate,
    CommissionResponse,
    PosteComiteCreate,
    PosteComiteResponse,
    SousCategoryBudgetCreate,
    SousCategoryBudgetResponse,
    TypeReunionCreate,
    TypeReunionResponse,
)
from app.schemas.common import MessageResponse
from app.api.deps import club_member, club_manager, club_finance, require_admin


router = APIRouter()


def get_club_or_404(db: Session, club_id: int) -> Club:
    """Charge un club ou lève une 404."""
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Club non trouvé",
        )
    return club


# ==================== CLUBS ====================

@router.get(
    "/",
    response_model=List[ClubResponse],
    summary="Liste des clubs",
)
async def list_clubs(
    db: Session = Depends(get_db),
) -> Any:
    """Liste publique des clubs (choix du club à la connexion)."""
    return db.query(Club).order_by(Club.name).all()


@router.get(
    "/{club_id}",
    response_model=ClubResponse,
    summary="Détail d'un club",
)
async def get_club(
    club_id: int,
    db: Session = Depends(get_db),
) -> Any:
    return get_club_or_404(db, club_id)


@router.post(
    "/",
    response_model=ClubResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un club",
)
async def create_club(
    data: ClubCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    if db.query(Club).filter(func.lower(Club.name) == data.name.lower()).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un club nommé '{data.name}' existe déjà",
        )

    club = Club(**data.model_dump())
    db.add(club)
    db.commit()
    db.refresh(club)

    logger.info(f"Club créé: {club.name} (ID: {club.id}) par {current_user.email}")
    return club


@router.put(
    "/{club_id}",
    response_model=ClubResponse,
    summary="Modifier un club",
)
async def update_club(
    club_id: int,
    data: ClubUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    club = get_club_or_404(db, club_id)
    update_data = data.model_dump(exclude_unset=True)

    nouveau_nom = update_data.get("name")
    if nouveau_nom and nouveau_nom.lower() != club.name.lower():
        if db.query(Club).filter(func.lower(Club.name) == nouveau_nom.lower(), Club.id != club_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Un club nommé '{nouveau_nom}' existe déjà",
            )

    for field, value in update_data.items():
        setattr(club, field, value)

    db.commit()
    db.refresh(club)
    logger.info(f"Club {club.id} mis à jour par {current_user.email}")
    return club


@router.delete(
    "/{club_id}",
    response_model=MessageResponse,
    summary="Supprimer un club",
)
async def delete_club(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    club = get_club_or_404(db, club_id)

    if db.query(Reunion).filter(Reunion.club_id == club_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer le club '{club.name}' car il contient des réunions",
        )

    db.delete(club)
    db.commit()
    logger.info(f"Club supprimé: {club.name} par {current_user.email}")
    return MessageResponse(message=f"Club '{club.name}' supprimé avec succès")


# ==================== TYPES DE RÉUNION ====================

@router.get(
    "/{club_id}/types-reunion",
    response_model=List[TypeReunionResponse],
    summary="Types de réunion du club",
)
async def list_types_reunion(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    return db.query(TypeReunion).filter(TypeReunion.club_id == club_id).order_by(TypeReunion.libelle).all()


@router.post(
    "/{club_id}/types-reunion",
    response_model=TypeReunionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un type de réunion",
)
async def create_type_reunion(
    club_id: int,
    data: TypeReunionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_club_or_404(db, club_id)
    libelle = data.libelle.strip()

    if db.query(TypeReunion).filter(
        TypeReunion.club_id == club_id,
        func.lower(TypeReunion.libelle) == libelle.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un type de réunion '{libelle}' existe déjà dans ce club",
        )

    type_reunion = TypeReunion(club_id=club_id, libelle=libelle)
    db.add(type_reunion)
    db.commit()
    db.refresh(type_reunion)
    logger.info(f"Type de réunion créé: {libelle} (club {club_id})")
    return type_reunion


@router.put(
    "/{club_id}/types-reunion/{type_id}",
    response_model=TypeReunionResponse,
    summary="Modifier un type de réunion",
)
async def update_type_reunion(
    club_id: int,
    type_id: int,
    data: TypeReunionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    type_reunion = db.query(TypeReunion).filter(
        TypeReunion.id == type_id,
        TypeReunion.club_id == club_id,
    ).first()
    if not type_reunion:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type de réunion non trouvé")

    libelle = data.libelle.strip()
    if db.query(TypeReunion).filter(
        TypeReunion.club_id == club_id,
        TypeReunion.id != type_id,
        func.lower(TypeReunion.libelle) == libelle.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un type de réunion '{libelle}' existe déjà dans ce club",
        )

    type_reunion.libelle = libelle
    db.commit()
    db.refresh(type_reunion)
    return type_reunion


@router.delete(
    "/{club_id}/types-reunion/{type_id}",
    response_model=MessageResponse,
    summary="Supprimer un type de réunion",
)
async def delete_type_reunion(
    club_id: int,
    type_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    type_reunion = db.query(TypeReunion).filter(
        TypeReunion.id == type_id,
        TypeReunion.club_id == club_id,
    ).first()
    if not type_reunion:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Type de réunion non trouvé")

    nombre = db.query(Reunion).filter(Reunion.type_reunion_id == type_id).count()
    if nombre:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer ce type de réunion car il est utilisé par {nombre} réunion(s)",
        )

    db.delete(type_reunion)
    db.commit()
    return MessageResponse(message="Type de réunion supprimé avec succès")


# ==================== COMMISSIONS ====================

@router.get(
    "/{club_id}/commissions",
    response_model=List[CommissionResponse],
    summary="Commissions du club",
)
async def list_commissions(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    return db.query(Commission).filter(Commission.club_id == club_id).order_by(Commission.nom).all()


@router.post(
    "/{club_id}/commissions",
    response_model=CommissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une commission",
)
async def create_commission(
    club_id: int,
    data: CommissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_club_or_404(db, club_id)

    if db.query(Commission).filter(
        Commission.club_id == club_id,
        func.lower(Commission.nom) == data.nom.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Une commission '{data.nom}' existe déjà dans ce club",
        )

    commission = Commission(club_id=club_id, **data.model_dump())
    db.add(commission)
    db.commit()
    db.refresh(commission)
    logger.info(f"Commission créée: {commission.nom} (club {club_id})")
    return commission


@router.put(
    "/{club_id}/commissions/{commission_id}",
    response_model=CommissionResponse,
    summary="Modifier une commission",
)
async def update_commission(
    club_id: int,
    commission_id: int,
    data: CommissionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    commission = db.query(Commission).filter(
        Commission.id == commission_id,
        Commission.club_id == club_id,
    ).first()
    if not commission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Commission non trouvée")

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(commission, field, value)

    db.commit()
    db.refresh(commission)
    return commission


@router.delete(
    "/{club_id}/commissions/{commission_id}",
    response_model=MessageResponse,
    summary="Supprimer une commission",
)
async def delete_commission(
    club_id: int,
    commission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    commission = db.query(Commission).filter(
        Commission.id == commission_id,
        Commission.club_id == club_id,
    ).first()
    if not commission:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Commission non trouvée")

    if db.query(MembreCommission).filter(
        MembreCommission.commission_id == commission_id,
        MembreCommission.est_actif.is_(True),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer la commission '{commission.nom}' car elle a des membres actifs",
        )

    db.delete(commission)
    db.commit()
    return MessageResponse(message="Commission supprimée avec succès")


# ==================== POSTES DU COMITÉ ====================

@router.get(
    "/{club_id}/postes-comite",
    response_model=List[PosteComiteResponse],
    summary="Postes du comité",
)
async def list_postes_comite(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    return db.query(PosteComite).filter(PosteComite.club_id == club_id).order_by(PosteComite.nom).all()


@router.post(
    "/{club_id}/postes-comite",
    response_model=PosteComiteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un poste du comité",
)
async def create_poste_comite(
    club_id: int,
    data: PosteComiteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    get_club_or_404(db, club_id)

    if db.query(PosteComite).filter(
        PosteComite.club_id == club_id,
        func.lower(PosteComite.nom) == data.nom.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un poste '{data.nom}' existe déjà dans ce club",
        )

    poste = PosteComite(club_id=club_id, **data.model_dump())
    db.add(poste)
    db.commit()
    db.refresh(poste)
    return poste


@router.put(
    "/{club_id}/postes-comite/{poste_id}",
    response_model=PosteComiteResponse,
    summary="Modifier un poste du comité",
)
async def update_poste_comite(
    club_id: int,
    poste_id: int,
    data: PosteComiteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    poste = db.query(PosteComite).filter(
        PosteComite.id == poste_id,
        PosteComite.club_id == club_id,
    ).first()
    if not poste:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poste du comité non trouvé")

    if db.query(PosteComite).filter(
        PosteComite.club_id == club_id,
        PosteComite.id != poste_id,
        func.lower(PosteComite.nom) == data.nom.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un poste '{data.nom}' existe déjà dans ce club",
        )

    poste.nom = data.nom
    poste.description = data.description
    db.commit()
    db.refresh(poste)
    return poste


@router.delete(
    "/{club_id}/postes-comite/{poste_id}",
    response_model=MessageResponse,
    summary="Supprimer un poste du comité",
)
async def delete_poste_comite(
    club_id: int,
    poste_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    poste = db.query(PosteComite).filter(
        PosteComite.id == poste_id,
        PosteComite.club_id == club_id,
    ).first()
    if not poste:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poste du comité non trouvé")

    if db.query(MembreComite).filter(MembreComite.poste_comite_id == poste_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer le poste '{poste.nom}' car il a des nominations",
        )

    db.delete(poste)
    db.commit()
    return MessageResponse(message="Poste du comité supprimé avec succès")


# ==================== SOUS-CATÉGORIES BUDGÉTAIRES ====================

@router.get(
    "/{club_id}/sous-categories",
    response_model=List[SousCategoryBudgetResponse],
    summary="Sous-catégories budgétaires du club",
)
async def list_sous_categories(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    return (
        db.query(SousCategoryBudget)
        .filter(SousCategoryBudget.club_id == club_id)
        .order_by(SousCategoryBudget.libelle)
        .all()
    )


@router.post(
    "/{club_id}/sous-categories",
    response_model=SousCategoryBudgetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une sous-catégorie budgétaire",
)
async def create_sous_categorie(
    club_id: int,
    data: SousCategoryBudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    get_club_or_404(db, club_id)

    if not db.query(CategoryBudget).filter(CategoryBudget.id == data.category_budget_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Catégorie de budget non trouvée")

    if db.query(SousCategoryBudget).filter(
        SousCategoryBudget.club_id == club_id,
        SousCategoryBudget.category_budget_id == data.category_budget_id,
        func.lower(SousCategoryBudget.libelle) == data.libelle.lower(),
    ).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Une sous-catégorie '{data.libelle}' existe déjà pour cette catégorie",
        )

    sous_categorie = SousCategoryBudget(club_id=club_id, **data.model_dump())
    db.add(sous_categorie)
    db.commit()
    db.refresh(sous_categorie)
    return sous_categorie


@router.put(
    "/{club_id}/sous-categories/{sous_categorie_id}",
    response_model=SousCategoryBudgetResponse,
    summary="Modifier une sous-catégorie budgétaire",
)
async def update_sous_categorie(
    club_id: int,
    sous_categorie_id: int,
    data: SousCategoryBudgetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_finance),
) -> Any:
    sous_categorie = db.query(SousCategoryBudget).filter(
        SousCategoryBudget.id == sous_categorie_id,
        SousCategoryBudget.club_id == club_id,
    ).first()
    if not sous_categorie:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sous-catégorie non trouvée")

    if not db.query(CategoryBudget).filter(CategoryBudget.id == data.category_budget_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Catégorie de budget non trouvée")

    sous_categorie.category_budget_id = data.category_budget_id
    sous_categorie.libelle = data.libelle
    db.commit()
    db.refresh(sous_categorie)
    return sous_categorie


@router.delete(
    "/{club_id}/sous-categories/{sous_categorie_id}",
    response_model=MessageResponse,
    summary="Supprimer une sous-catégorie budgétaire",
)
async def delete_sous_categorie(
    club_id: int,
    sous_categorie_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    sous_categorie = db.query(SousCategoryBudget).filter(
        SousCategoryBudget.id == sous_categorie_id,
        SousCategoryBudget.club_id == club_id,
    ).first()
    if not sous_categorie:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sous-catégorie non trouvée")

    if db.query(RubriqueBudget).filter(RubriqueBudget.sous_category_budget_id == sous_categorie_id).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Impossible de supprimer la sous-catégorie '{sous_categorie.libelle}' car elle contient des rubriques",
        )

    db.delete(sous_categorie)
    db.commit()
    return MessageResponse(message="Sous-catégorie supprimée avec succès")
