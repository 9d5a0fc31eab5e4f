"""
Routes des galas : création avec ses tables, consultation, modification,
suppression protégée et statistiques.
"""

from datetime import datetime, time, timedelta
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.core.logging import logger
from app.models.gala import Gala, GalaTable
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.gala import (
    GalaCreate,
    GalaDetailResponse,
    GalaInviteResponse,
    GalaResponse,
    GalaTableResponse,
    GalaUpdate,
    GalaVenteResume,
)
from app.api.deps import get_current_active_user, require_manager


router = APIRouter()


def parse_date_gala(valeur: str) -> datetime:
    """
    Convertit la date saisie en date/heure du gala (heure par défaut 19:00).

    Raises:
        HTTPException 400: date invalide
    """
    try:
        jour = datetime.fromisoformat(valeur.strip()).date()
    except (ValueError, AttributeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Format de date invalide. Utilisez le format YYYY-MM-DD",
        )
    return datetime.combine(jour, time(hour=settings.GALA_HEURE_DEFAUT))


def get_gala_or_404(db: Session, gala_id: int) -> Gala:
    gala = db.query(Gala).filter(Gala.id == gala_id).first()
    if not gala:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Gala avec l'ID {gala_id} introuvable",
        )
    return gala


def _verifier_libelle_unique(db: Session, libelle: str, date_gala: datetime, exclure_id: Optional[int] = None) -> None:
    debut = datetime.combine(date_gala.date(), time.min)
    query = db.query(Gala).filter(
        func.lower(Gala.libelle) == libelle.lower(),
        Gala.date >= debut,
        Gala.date < debut + timedelta(days=1),
    )
    if exclure_id is not None:
        query = query.filter(Gala.id != exclure_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Un gala avec le libellé '{libelle}' existe déjà à cette date",
        )


def _creer_tables(gala: Gala, a_partir_de: int, jusqu_a: int) -> None:
    for numero in range(a_partir_de, jusqu_a + 1):
        gala.tables.append(GalaTable(table_libelle=f"Table {numero}"))


def _to_response(gala: Gala) -> GalaResponse:
    return GalaResponse(
        id=gala.id,
        libelle=gala.libelle,
        date=gala.date,
        lieu=gala.lieu,
        nombre_tables=len(gala.tables),
        nombre_invites=len(gala.invites),
        nombre_tickets_vendus=sum(t.quantite for t in gala.tickets),
        nombre_tombolas_vendues=sum(t.quantite for t in gala.tombolas),
    )


def _to_detail(gala: Gala) -> GalaDetailResponse:
    invites = sorted(gala.invites, key=lambda i: i.nom_prenom.lower())
    return GalaDetailResponse(
        **_to_response(gala).model_dump(),
        nombre_souches_tickets=gala.nombre_souches_tickets,
        quantite_par_souche_tickets=gala.quantite_par_souche_tickets,
        nombre_souches_tombola=gala.nombre_souches_tombola,
        quantite_par_souche_tombola=gala.quantite_par_souche_tombola,
        total_tickets_disponibles=gala.total_tickets_disponibles,
        total_tombola_disponibles=gala.total_tombola_disponibles,
        invites=[
            GalaInviteResponse(
                id=i.id,
                gala_id=i.gala_id,
                nom_prenom=i.nom_prenom,
                present=i.present,
                table_id=i.table.id if i.table else None,
                table_libelle=i.table.table_libelle if i.table else None,
                date_affectation=i.affectation.date_ajout if i.affectation else None,
            )
            for i in invites
        ],
        tables=[
            GalaTableResponse(id=t.id, table_libelle=t.table_libelle, nombre_invites=len(t.affectations))
            for t in gala.tables
        ],
        tickets=[
            GalaVenteResume(id=t.id, membre_id=t.membre_id, participant_nom=t.participant_nom, quantite=t.quantite)
            for t in gala.tickets
        ],
        tombolas=[
            GalaVenteResume(id=t.id, membre_id=t.membre_id, participant_nom=t.participant_nom, quantite=t.quantite)
            for t in gala.tombolas
        ],
    )


@router.get(
    "/",
    response_model=List[GalaResponse],
    summary="Liste des galas",
)
async def list_galas(
    recherche: Optional[str] = Query(None, description="Recherche sur le libellé ou le lieu"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    query = db.query(Gala)
    if recherche and recherche.strip():
        motif = f"%{recherche.strip().lower()}%"
        query = query.filter(or_(func.lower(Gala.libelle).like(motif), func.lower(Gala.lieu).like(motif)))
    return [_to_response(g) for g in query.order_by(Gala.date.desc()).all()]


@router.get(
    "/statistiques",
    summary="Statistiques des galas",
)
async def statistiques_galas(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    galas = db.query(Gala).order_by(Gala.date.desc()).all()
    details = [_to_response(g).model_dump() for g in galas]

    return {
        "nombre_galas": len(galas),
        "total_invites": sum(d["nombre_invites"] for d in details),
        "total_tables": sum(d["nombre_tables"] for d in details),
        "total_tickets_vendus": sum(d["nombre_tickets_vendus"] for d in details),
        "total_tombolas_vendues": sum(d["nombre_tombolas_vendues"] for d in details),
        "galas_details": details,
    }


@router.get(
    "/{gala_id}",
    response_model=GalaDetailResponse,
    summary="Détail d'un gala",
)
async def get_gala(
    gala_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return _to_detail(get_gala_or_404(db, gala_id))


@router.post(
    "/",
    response_model=GalaDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un gala",
)
async def create_gala(
    data: GalaCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    """
    Crée un gala et ses tables "Table 1" à "Table N".
    """
    date_gala = parse_date_gala(data.date)
    libelle = data.libelle.strip()
    _verifier_libelle_unique(db, libelle, date_gala)

    gala = Gala(
        libelle=libelle,
        date=date_gala,
        lieu=data.lieu.strip(),
        nombre_tables=data.nombre_tables,
        nombre_souches_tickets=data.nombre_souches_tickets,
        quantite_par_souche_tickets=data.quantite_par_souche_tickets,
        nombre_souches_tombola=data.nombre_souches_tombola,
        quantite_par_souche_tombola=data.quantite_par_souche_tombola,
    )
    _creer_tables(gala, 1, data.nombre_tables)

    db.add(gala)
    db.commit()
    db.refresh(gala)

    logger.info(f"Gala créé: {gala.libelle} le {gala.date:%d/%m/%Y} ({gala.nombre_tables} tables)")
    return _to_detail(gala)


@router.put(
    "/{gala_id}",
    response_model=GalaDetailResponse,
    summary="Modifier un gala",
)
async def update_gala(
    gala_id: int,
    data: GalaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    gala = get_gala_or_404(db, gala_id)
    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "date" in update_data:
        update_data["date"] = parse_date_gala(update_data["date"])
    if "libelle" in update_data:
        update_data["libelle"] = update_data["libelle"].strip()

    if "libelle" in update_data or "date" in update_data:
        _verifier_libelle_unique(
            db,
            update_data.get("libelle", gala.libelle),
            update_data.get("date", gala.date),
            exclure_id=gala.id,
        )

    nombre_tables = update_data.get("nombre_tables")
    if nombre_tables is not None and nombre_tables > len(gala.tables):
        _creer_tables(gala, len(gala.tables) + 1, nombre_tables)

    for field, value in update_data.items():
        setattr(gala, field, value)

    db.commit()
    db.refresh(gala)
    logger.info(f"Gala {gala.id} modifié par {current_user.email}")
    return _to_detail(gala)


@router.delete(
    "/{gala_id}",
    response_model=MessageResponse,
    summary="Supprimer un gala",
)
async def delete_gala(
    gala_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
) -> Any:
    """
    Supprime un gala et ses tables.

    Refusé tant que le gala contient des invités, des tickets ou des tombolas.
    """
    gala = get_gala_or_404(db, gala_id)

    nombre_invites = len(gala.invites)
    nombre_tickets = sum(t.quantite for t in gala.tickets)
    nombre_tombolas = sum(t.quantite for t in gala.tombolas)

    if nombre_invites + nombre_tickets + nombre_tombolas > 0:
        logger.warning(f"Suppression du gala {gala.id} refusée: données associées")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Impossible de supprimer le gala '{gala.libelle}' car il contient des données "
                f"({nombre_invites} invité(s), {nombre_tickets} ticket(s), {nombre_tombolas} tombola(s)). "
                "Veuillez d'abord supprimer toutes les données associées."
            ),
        )

    libelle = gala.libelle
    db.delete(gala)
    db.commit()

    logger.info(f"Gala supprimé: {libelle} par {current_user.email}")
    return MessageResponse(message=f"Gala '{libelle}' supprimé avec succès")
