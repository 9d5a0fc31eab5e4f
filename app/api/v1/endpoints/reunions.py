"""
Routes des réunions d'un club : planification, ordre du jour, calendrier
mensuel et compte-rendu Word.
"""

import calendar
from datetime import date, datetime, time
from typing import Any, List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.core.logging import logger
from app.models.club import Club
from app.models.reunion import OrdreDuJour, Reunion, TypeReunion
from app.models.user import User, UserClub
from app.schemas.common import MessageResponse
from app.schemas.reunion import (
    CompteRenduRequest,
    EvenementCalendrier,
    InviteResume,
    OrdreDuJourResponse,
    PresenceResume,
    ReunionCompleteCreate,
    ReunionCompleteUpdate,
    ReunionCreate,
    ReunionDetailResponse,
    ReunionResponse,
    ReunionUpdate,
)
from app.services.compte_rendu import DOCX_MEDIA_TYPE, generer_compte_rendu, nom_fichier_compte_rendu
from app.api.deps import club_member, club_manager


router = APIRouter()


def nettoyer_ordres_du_jour(ordres: List[str]) -> List[str]:
    """Retire les lignes vides, supprime les espaces et les doublons (casse ignorée)."""
    resultat: List[str] = []
    vus = set()
    for ordre in ordres:
        texte = (ordre or "").strip()
        if texte and texte.lower() not in vus:
            vus.add(texte.lower())
            resultat.append(texte)
    return resultat


def get_reunion_or_404(db: Session, club_id: int, reunion_id: int) -> Reunion:
    reunion = db.query(Reunion).filter(Reunion.id == reunion_id, Reunion.club_id == club_id).first()
    if not reunion:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Réunion non trouvée")
    return reunion


def _get_club_or_404(db: Session, club_id: int) -> Club:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")
    return club


def _valider_reunion(db: Session, club_id: int, data: ReunionCreate, exclure_id: Optional[int] = None) -> None:
    type_reunion = db.query(TypeReunion).filter(
        TypeReunion.id == data.type_reunion_id,
        TypeReunion.club_id == club_id,
    ).first()
    if not type_reunion:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le type de réunion spécifié n'existe pas dans ce club",
        )

    query = db.query(Reunion).filter(
        Reunion.club_id == club_id,
        Reunion.date == data.date,
        Reunion.heure == data.heure,
        Reunion.type_reunion_id == data.type_reunion_id,
    )
    if exclure_id is not None:
        query = query.filter(Reunion.id != exclure_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Une réunion de ce type existe déjà à cette date et cette heure",
        )


def _to_response(reunion: Reunion) -> ReunionResponse:
    return ReunionResponse(
        id=reunion.id,
        date=reunion.date,
        heure=reunion.heure,
        club_id=reunion.club_id,
        club_nom=reunion.club.name,
        type_reunion_id=reunion.type_reunion_id,
        type_reunion_libelle=reunion.type_reunion.libelle,
        nombre_ordres_du_jour=len(reunion.ordres_du_jour),
        nombre_presences=len(reunion.presences),
        nombre_invites=len(reunion.invites),
    )


def _to_detail(reunion: Reunion) -> ReunionDetailResponse:
    return ReunionDetailResponse(
        **_to_response(reunion).model_dump(),
        ordres_du_jour=[OrdreDuJourResponse.model_validate(o) for o in reunion.ordres_du_jour],
        presences=[
            PresenceResume(
                id=p.id,
                membre_id=p.membre_id,
                nom_complet_membre=p.membre.full_name,
                email_membre=p.membre.email,
            )
            for p in sorted(reunion.presences, key=lambda p: (p.membre.last_name, p.membre.first_name))
        ],
        invites=[InviteResume.model_validate(i) for i in sorted(reunion.invites, key=lambda i: (i.nom, i.prenom))],
    )


# ==================== CONSULTATION ====================

@router.get(
    "/calendrier/{mois}",
    response_model=List[EvenementCalendrier],
    summary="Calendrier mensuel du club",
)
async def calendrier_mois(
    club_id: int,
    mois: int,
    annee: Optional[int] = Query(None, description="Année (année courante par défaut)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    """
    Réunions du club et anniversaires des membres pour le mois donné,
    triés par date.
    """
    if not 1 <= mois <= 12:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Le mois doit être compris entre 1 et 12")

    _get_club_or_404(db, club_id)
    annee = annee or date.today().year
    dernier_jour = calendar.monthrange(annee, mois)[1]

    reunions = db.query(Reunion).filter(
        Reunion.club_id == club_id,
        Reunion.date >= date(annee, mois, 1),
        Reunion.date <= date(annee, mois, dernier_jour),
    ).all()

    evenements = [
        EvenementCalendrier(
            type="reunion",
            id=r.id,
            libelle=r.type_reunion.libelle,
            date=r.date_time_complete,
        )
        for r in reunions
    ]

    membres = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id, User.is_active.is_(True), User.date_anniversaire.isnot(None))
        .all()
    )
    for membre in membres:
        if membre.date_anniversaire.month != mois:
            continue
        jour = min(membre.date_anniversaire.day, dernier_jour)
        evenements.append(EvenementCalendrier(
            type="anniversaire",
            libelle=f"Anniversaire de {membre.full_name}",
            date=datetime.combine(date(annee, mois, jour), time.min),
            membre_id=membre.id,
        ))

    return sorted(evenements, key=lambda e: e.date)


@router.get(
    "/prochaines",
    response_model=List[ReunionResponse],
    summary="Prochaines réunions",
)
async def prochaines_reunions(
    club_id: int,
    nombre: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    reunions = (
        db.query(Reunion)
        .filter(Reunion.club_id == club_id, Reunion.date >= date.today())
        .order_by(Reunion.date, Reunion.heure)
        .limit(nombre)
        .all()
    )
    return [_to_response(r) for r in reunions]


@router.get(
    "/",
    response_model=List[ReunionResponse],
    summary="Réunions du club",
)
async def list_reunions(
    club_id: int,
    type_reunion_id: Optional[int] = Query(None),
    date_debut: Optional[date] = Query(None),
    date_fin: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    query = db.query(Reunion).filter(Reunion.club_id == club_id)
    if type_reunion_id is not None:
        query = query.filter(Reunion.type_reunion_id == type_reunion_id)
    if date_debut is not None:
        query = query.filter(Reunion.date >= date_debut)
    if date_fin is not None:
        query = query.filter(Reunion.date <= date_fin)

    reunions = query.order_by(Reunion.date.desc(), Reunion.heure.desc()).all()
    return [_to_response(r) for r in reunions]


@router.get(
    "/{reunion_id}",
    response_model=ReunionDetailResponse,
    summary="Détail d'une réunion",
)
async def get_reunion(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    return _to_detail(get_reunion_or_404(db, club_id, reunion_id))


# ==================== ÉCRITURE ====================

@router.post(
    "/",
    response_model=ReunionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une réunion",
)
async def create_reunion(
    club_id: int,
    data: ReunionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    _get_club_or_404(db, club_id)
    _valider_reunion(db, club_id, data)

    reunion = Reunion(club_id=club_id, **data.model_dump())
    db.add(reunion)
    db.commit()
    db.refresh(reunion)

    logger.info(f"Réunion créée: {reunion.type_reunion.libelle} le {reunion.date:%d/%m/%Y} (club {club_id})")
    return _to_response(reunion)


@router.post(
    "/complete",
    response_model=ReunionDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une réunion avec son ordre du jour",
)
async def create_reunion_complete(
    club_id: int,
    data: ReunionCompleteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    _get_club_or_404(db, club_id)
    _valider_reunion(db, club_id, data)

    with transaction(db, "création de la réunion"):
        reunion = Reunion(
            club_id=club_id,
            date=data.date,
            heure=data.heure,
            type_reunion_id=data.type_reunion_id,
        )
        for description in nettoyer_ordres_du_jour(data.ordres_du_jour):
            reunion.ordres_du_jour.append(OrdreDuJour(description=description))
        db.add(reunion)

    db.refresh(reunion)
    logger.info(
        f"Réunion complète créée: {reunion.id} avec {len(reunion.ordres_du_jour)} point(s) à l'ordre du jour"
    )
    return _to_detail(reunion)


@router.put(
    "/{reunion_id}",
    response_model=ReunionResponse,
    summary="Modifier une réunion",
)
async def update_reunion(
    club_id: int,
    reunion_id: int,
    data: ReunionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    _valider_reunion(db, club_id, data, exclure_id=reunion.id)

    for field, value in data.model_dump().items():
        setattr(reunion, field, value)

    db.commit()
    db.refresh(reunion)
    return _to_response(reunion)


@router.put(
    "/{reunion_id}/complete",
    response_model=ReunionDetailResponse,
    summary="Modifier une réunion et son ordre du jour",
)
async def update_reunion_complete(
    club_id: int,
    reunion_id: int,
    data: ReunionCompleteUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    """
    Sans ``remplacer_ordres_du_jour``, seuls les nouveaux points (casse
    ignorée) sont ajoutés aux points existants.
    """
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    _valider_reunion(db, club_id, data, exclure_id=reunion.id)
    ordres = nettoyer_ordres_du_jour(data.ordres_du_jour)

    with transaction(db, "modification de la réunion"):
        reunion.date = data.date
        reunion.heure = data.heure
        reunion.type_reunion_id = data.type_reunion_id

        if data.remplacer_ordres_du_jour:
            reunion.ordres_du_jour.clear()
            existants = set()
        else:
            existants = {o.description.lower() for o in reunion.ordres_du_jour}

        for description in ordres:
            if description.lower() not in existants:
                reunion.ordres_du_jour.append(OrdreDuJour(description=description))

    db.refresh(reunion)
    return _to_detail(reunion)


@router.delete(
    "/{reunion_id}",
    response_model=MessageResponse,
    summary="Supprimer une réunion",
)
async def delete_reunion(
    club_id: int,
    reunion_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Any:
    """Supprime la réunion avec son ordre du jour, ses présences et ses invités."""
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    db.delete(reunion)
    db.commit()
    logger.info(f"Réunion {reunion_id} supprimée (club {club_id}) par {current_user.email}")
    return MessageResponse(message="Réunion supprimée avec succès")


@router.post(
    "/{reunion_id}/compte-rendu",
    summary="Générer le compte-rendu Word",
    response_class=Response,
)
async def generer_compte_rendu_reunion(
    club_id: int,
    reunion_id: int,
    data: CompteRenduRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_manager),
) -> Response:
    reunion = get_reunion_or_404(db, club_id, reunion_id)
    contenu = generer_compte_rendu(reunion, data)
    nom_fichier = nom_fichier_compte_rendu(reunion)

    logger.info(f"Compte-rendu généré pour la réunion {reunion.id}: {nom_fichier}")
    return Response(
        content=contenu,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(nom_fichier)}"},
    )
