"""
Routes communes aux ventes de gala (tickets d'entrée et billets de tombola).
Chaque vente est rattachée soit à un membre soit à un participant externe.
"""

from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.logging import logger
from app.models.gala import Gala
from app.models.user import User
from app.schemas.common import MessageResponse
from app.schemas.gala import (
    GalaVenteBulkRequest,
    GalaVenteBulkResult,
    GalaVenteCreate,
    GalaVenteResponse,
    GalaVenteUpdate,
)
from app.api.deps import get_current_active_user, require_manager
from app.api.v1.endpoints.galas import get_gala_or_404


def to_vente_response(vente) -> GalaVenteResponse:
    return GalaVenteResponse(
        id=vente.id,
        gala_id=vente.gala_id,
        gala_libelle=vente.gala.libelle,
        membre_id=vente.membre_id,
        membre_email=vente.membre.email if vente.membre else None,
        externe=vente.externe,
        participant_nom=vente.participant_nom,
        quantite=vente.quantite,
    )


def ventes_par_participant(ventes: List) -> List[Dict]:
    """Regroupe les ventes par participant, triées par quantité décroissante."""
    total = sum(v.quantite for v in ventes)
    groupes: Dict[tuple, Dict] = {}
    for vente in ventes:
        cle = ("membre", vente.membre_id) if vente.membre_id else ("externe", (vente.externe or "").lower())
        ligne = groupes.setdefault(cle, {
            "membre_id": vente.membre_id,
            "externe": vente.externe if not vente.membre_id else None,
            "participant_nom": vente.participant_nom,
            "quantite": 0,
        })
        ligne["quantite"] += vente.quantite

    lignes = sorted(groupes.values(), key=lambda l: l["quantite"], reverse=True)
    for ligne in lignes:
        ligne["pourcentage"] = round(ligne["quantite"] / total * 100, 2) if total else 0.0
    return lignes


def creer_router_ventes(modele: Type, libelle: str, disponibles: str) -> APIRouter:
    """
    Construit le routeur CRUD et statistiques d'un type de vente.

    Args:
        modele: GalaTicket ou GalaTombola
        libelle: Nom affiché dans les messages ("ticket", "tombola")
        disponibles: Propriété du gala donnant le total disponible
    """
    router = APIRouter()

    def get_vente_or_404(db: Session, vente_id: int):
        vente = db.query(modele).filter(modele.id == vente_id).first()
        if not vente:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Vente de {libelle} avec l'ID {vente_id} introuvable",
            )
        return vente

    def valider_vente(db: Session, gala_id: int, membre_id: Optional[int], externe: Optional[str], exclure_id: Optional[int] = None) -> None:
        if not db.query(Gala).filter(Gala.id == gala_id).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Gala avec l'ID {gala_id} introuvable",
            )

        if not membre_id and not (externe and externe.strip()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Soit l'ID du membre soit le nom externe doit être renseigné",
            )

        if membre_id:
            if not db.query(User).filter(User.id == membre_id).first():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Membre avec l'ID {membre_id} introuvable",
                )
            query = db.query(modele).filter(modele.gala_id == gala_id, modele.membre_id == membre_id)
            if exclure_id is not None:
                query = query.filter(modele.id != exclure_id)
            if query.first():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=(
                        f"Une vente de {libelle} existe déjà pour ce membre dans ce gala. "
                        "Utilisez l'endpoint de modification pour changer la quantité."
                    ),
                )

    def creer_vente(db: Session, data: GalaVenteCreate):
        valider_vente(db, data.gala_id, data.membre_id, data.externe)
        vente = modele(
            gala_id=data.gala_id,
            membre_id=data.membre_id or None,
            externe=data.externe.strip() if data.externe and not data.membre_id else None,
            quantite=data.quantite,
        )
        db.add(vente)
        db.flush()
        return vente

    @router.get(
        "/gala/{gala_id}",
        response_model=List[GalaVenteResponse],
        summary=f"Ventes de {libelle} d'un gala",
    )
    async def list_ventes_gala(
        gala_id: int,
        recherche: Optional[str] = Query(None),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user),
    ) -> Any:
        get_gala_or_404(db, gala_id)
        query = (
            db.query(modele)
            .outerjoin(User, modele.membre_id == User.id)
            .filter(modele.gala_id == gala_id)
        )
        if recherche and recherche.strip():
            motif = f"%{recherche.strip().lower()}%"
            query = query.filter(or_(
                func.lower(modele.externe).like(motif),
                func.lower(User.first_name).like(motif),
                func.lower(User.last_name).like(motif),
                func.lower(User.email).like(motif),
            ))
        return [to_vente_response(v) for v in query.order_by(modele.id).all()]

    @router.get(
        "/membre/{membre_id}",
        response_model=List[GalaVenteResponse],
        summary=f"Ventes de {libelle} d'un membre",
    )
    async def list_ventes_membre(
        membre_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user),
    ) -> Any:
        ventes = db.query(modele).filter(modele.membre_id == membre_id).order_by(modele.gala_id.desc()).all()
        return [to_vente_response(v) for v in ventes]

    @router.get(
        "/gala/{gala_id}/statistiques",
        summary=f"Statistiques des ventes de {libelle}",
    )
    async def statistiques_ventes(
        gala_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user),
    ) -> Any:
        gala = get_gala_or_404(db, gala_id)
        ventes = db.query(modele).filter(modele.gala_id == gala_id).all()

        total_disponible = getattr(gala, disponibles)
        total_vendu = sum(v.quantite for v in ventes)
        participants = ventes_par_participant(ventes)

        return {
            "gala_id": gala.id,
            "gala_libelle": gala.libelle,
            "total_disponible": total_disponible,
            "total_vendu": total_vendu,
            "total_restant": max(total_disponible - total_vendu, 0),
            "pourcentage_vendu": round(total_vendu / total_disponible * 100, 2) if total_disponible else 0.0,
            "nombre_participants": len(participants),
            "nombre_membres": sum(1 for p in participants if p["membre_id"]),
            "nombre_externes": sum(1 for p in participants if not p["membre_id"]),
            "moyenne_par_participant": round(total_vendu / len(participants), 2) if participants else 0.0,
            "ventes_par_participant": participants,
        }

    @router.get(
        "/gala/{gala_id}/top-vendeurs",
        summary=f"Meilleurs vendeurs de {libelle}",
    )
    async def top_vendeurs(
        gala_id: int,
        limit: int = Query(10, ge=1, le=100),
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user),
    ) -> Any:
        get_gala_or_404(db, gala_id)
        ventes = db.query(modele).filter(modele.gala_id == gala_id).all()
        return [
            {"rang": rang, **ligne}
            for rang, ligne in enumerate(ventes_par_participant(ventes)[:limit], start=1)
        ]

    @router.get(
        "/{vente_id}",
        response_model=GalaVenteResponse,
        summary=f"Détail d'une vente de {libelle}",
    )
    async def get_vente(
        vente_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user),
    ) -> Any:
        return to_vente_response(get_vente_or_404(db, vente_id))

    @router.post(
        "/",
        response_model=GalaVenteResponse,
        status_code=status.HTTP_201_CREATED,
        summary=f"Enregistrer une vente de {libelle}",
    )
    async def create_vente(
        data: GalaVenteCreate,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_manager),
    ) -> Any:
        vente = creer_vente(db, data)
        db.commit()
        db.refresh(vente)
        logger.info(f"Vente de {libelle} enregistrée: gala {vente.gala_id}, {vente.participant_nom} x{vente.quantite}")
        return to_vente_response(vente)

    @router.post(
        "/bulk-create",
        response_model=GalaVenteBulkResult,
        summary=f"Enregistrer plusieurs ventes de {libelle}",
    )
    async def bulk_create_ventes(
        data: GalaVenteBulkRequest,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_manager),
    ) -> Any:
        """Chaque vente est validée séparément ; une erreur n'interrompt pas le lot."""
        creees = []
        erreurs: List[str] = []

        for index, item in enumerate(data.ventes, start=1):
            try:
                creees.append(creer_vente(db, item))
            except HTTPException as e:
                erreurs.append(f"Vente {index}: {e.detail}")

        db.commit()
        for vente in creees:
            db.refresh(vente)

        logger.info(f"Création en masse de {libelle}: {len(creees)}/{len(data.ventes)} vente(s)")
        return GalaVenteBulkResult(
            nombre_total=len(data.ventes),
            creees=[to_vente_response(v) for v in creees],
            erreurs=erreurs,
        )

    @router.put(
        "/{vente_id}",
        response_model=GalaVenteResponse,
        summary=f"Modifier une vente de {libelle}",
    )
    async def update_vente(
        vente_id: int,
        data: GalaVenteUpdate,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_manager),
    ) -> Any:
        vente = get_vente_or_404(db, vente_id)
        update_data = data.model_dump(exclude_unset=True)

        membre_id = update_data.get("membre_id", vente.membre_id)
        externe = update_data.get("externe", vente.externe)
        valider_vente(db, vente.gala_id, membre_id, externe, exclure_id=vente.id)

        vente.membre_id = membre_id or None
        vente.externe = externe.strip() if externe and not membre_id else None
        if update_data.get("quantite") is not None:
            vente.quantite = update_data["quantite"]

        db.commit()
        db.refresh(vente)
        return to_vente_response(vente)

    @router.delete(
        "/{vente_id}",
        response_model=MessageResponse,
        summary=f"Supprimer une vente de {libelle}",
    )
    async def delete_vente(
        vente_id: int,
        db: Session = Depends(get_db),
        current_user: User = Depends(require_manager),
    ) -> Any:
        vente = get_vente_or_404(db, vente_id)
        db.delete(vente)
        db.commit()
        logger.info(f"Vente de {libelle} {vente_id} supprimée")
        return MessageResponse(message=f"Vente de {libelle} supprimée avec succès")

    return router
