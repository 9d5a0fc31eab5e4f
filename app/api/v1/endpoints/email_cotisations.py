"""
Routes d'envoi par email des relevés de situation de cotisation.
"""

import asyncio
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.core.logging import logger
from app.models.club import Club
from app.models.user import User, UserClub
from app.schemas.email import (
    EmailEnvoiGroupeResult,
    EmailEnvoiStatistiques,
    EmailMembreResult,
    EmailRequest,
    EmailResult,
    SendToAllClubMembersRequest,
    SendToMemberRequest,
    SendToMultipleMembersRequest,
    TestEmailRequest,
)
from app.services.cotisation_service import CotisationService
from app.services.email_service import email_service
from app.api.deps import FINANCE_ROLES, ensure_club_access, get_current_active_user, require_admin


router = APIRouter()


def _get_club_or_404(db: Session, club_id: int) -> Club:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")
    return club


def _membre_du_club(db: Session, membre_id: int, club_id: int) -> Optional[User]:
    return (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(User.id == membre_id, UserClub.club_id == club_id)
        .first()
    )


def _envoyer_situation(service: CotisationService, membre: User, club: Club) -> EmailResult:
    situation = service.situation_membre(membre, club)
    return email_service.send_simple_email(EmailRequest(
        to=[membre.email],
        subject=f"💳 Situation de Cotisation - {club.name}",
        html_body=email_service.build_situation_html(situation),
    ))


async def _envoyer_groupe(db: Session, club: Club, membres_ids: List[int]) -> EmailEnvoiGroupeResult:
    """
    Envoie le relevé à chaque membre, un par un, avec une pause entre deux envois.
    Un échec n'interrompt pas la boucle.
    """
    service = CotisationService(db)
    resultats: List[EmailMembreResult] = []

    for index, membre_id in enumerate(membres_ids):
        if index > 0 and settings.EMAIL_BATCH_DELAY_SECONDS > 0:
            await asyncio.sleep(settings.EMAIL_BATCH_DELAY_SECONDS)

        membre = _membre_du_club(db, membre_id, club.id)
        if not membre:
            resultats.append(EmailMembreResult(
                membre_id=membre_id, success=False, message="Membre non trouvé",
            ))
            continue

        if not membre.email:
            resultats.append(EmailMembreResult(
                membre_id=membre_id,
                nom_complet=membre.full_name,
                success=False,
                message="Adresse email non disponible",
            ))
            continue

        envoi = _envoyer_situation(service, membre, club)
        resultats.append(EmailMembreResult(
            membre_id=membre.id,
            email=membre.email,
            nom_complet=membre.full_name,
            success=envoi.success,
            message="Email envoyé avec succès" if envoi.success else f"Erreur d'envoi: {envoi.error_message}",
            email_id=envoi.email_id,
        ))

    envoyes = sum(1 for r in resultats if r.success)
    total = len(resultats)
    statistiques = EmailEnvoiStatistiques(
        total_membres=total,
        emails_envoyes=envoyes,
        emails_echoues=total - envoyes,
        taux_reussite=round(envoyes / total * 100, 2) if total else 0.0,
    )

    logger.info(f"Envoi groupé club {club.id}: {envoyes}/{total} email(s) envoyé(s)")

    return EmailEnvoiGroupeResult(
        success=envoyes > 0,
        message=f"{envoyes} email(s) envoyé(s) sur {total}",
        statistiques=statistiques,
        resultats=resultats,
    )


@router.post(
    "/send-to-member",
    response_model=EmailMembreResult,
    summary="Envoyer sa situation à un membre",
)
async def send_to_member(
    data: SendToMemberRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    ensure_club_access(db, current_user, data.club_id, FINANCE_ROLES)
    club = _get_club_or_404(db, data.club_id)

    membre = _membre_du_club(db, data.membre_id, data.club_id)
    if not membre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membre non trouvé")

    if not membre.email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ce membre n'a pas d'adresse email",
        )

    envoi = _envoyer_situation(CotisationService(db), membre, club)
    if not envoi.success:
        logger.error(f"Échec d'envoi de la situation à {membre.email}: {envoi.error_message}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erreur lors de l'envoi de l'email: {envoi.error_message}",
        )

    return EmailMembreResult(
        membre_id=membre.id,
        email=membre.email,
        nom_complet=membre.full_name,
        success=True,
        message="Email envoyé avec succès",
        email_id=envoi.email_id,
    )


@router.post(
    "/send-to-multiple-members",
    response_model=EmailEnvoiGroupeResult,
    summary="Envoyer leur situation à plusieurs membres",
)
async def send_to_multiple_members(
    data: SendToMultipleMembersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    ensure_club_access(db, current_user, data.club_id, FINANCE_ROLES)

    limite = settings.EMAIL_MAX_RECIPIENTS
    if len(data.membres_ids) > limite:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Le nombre de destinataires ({len(data.membres_ids)}) dépasse la limite autorisée ({limite})",
        )

    club = _get_club_or_404(db, data.club_id)
    return await _envoyer_groupe(db, club, data.membres_ids)


@router.post(
    "/send-to-all-club-members",
    response_model=EmailEnvoiGroupeResult,
    summary="Envoyer leur situation à tous les membres du club",
)
async def send_to_all_club_members(
    data: SendToAllClubMembersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    club = _get_club_or_404(db, data.club_id)

    query = (
        db.query(User)
        .join(UserClub, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club.id, User.email.isnot(None), User.email != "")
    )
    if not data.include_inactive:
        query = query.filter(User.is_active.is_(True))
    membres = query.order_by(User.last_name, User.first_name).all()

    if not membres:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Aucun membre avec adresse email trouvé dans ce club",
        )

    return await _envoyer_groupe(db, club, [m.id for m in membres])


@router.post(
    "/test-email",
    response_model=EmailResult,
    summary="Envoyer un email de test",
)
async def send_test_email(
    data: TestEmailRequest,
    current_user: User = Depends(require_admin),
) -> Any:
    envoi = email_service.send_simple_email(EmailRequest(
        to=[data.test_email],
        subject=f"Test de configuration email - {settings.APP_NAME}",
        html_body=email_service.build_test_html(),
    ))
    if not envoi.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Erreur lors de l'envoi de l'email de test: {envoi.error_message}",
        )
    logger.info(f"Email de test envoyé à {data.test_email} par {current_user.email}")
    return envoi
