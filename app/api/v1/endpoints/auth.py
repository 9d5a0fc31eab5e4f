"""
Routes d'authentification - Inscription, connexion, tokens et
gestion des membres des clubs.
"""

from datetime import datetime, timedelta
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.security import (
    create_access_token,
    create_refresh_token,
    verify_password,
    get_password_hash,
    verify_token,
)
from app.core.logging import logger
from app.config import settings
from app.models.club import Club
from app.models.user import User, UserClub, UserRole
from app.schemas.common import MessageResponse
from app.schemas.user import (
    AuthResponse,
    ClubMemberResponse,
    LoginRequest,
    RefreshTokenRequest,
    RegisterAdminRequest,
    RegisterRequest,
    UserClubInfo,
    UserResponse,
    UserWithClubsResponse,
)
from app.api.deps import get_current_active_user, require_admin, club_member


router = APIRouter()


def _auth_response(user: User, message: str, club_id: int = None) -> AuthResponse:
    """Construit la réponse avec la paire de tokens de l'utilisateur."""
    return AuthResponse(
        message=message,
        access_token=create_access_token(subject=user.id, role=user.role, club_id=club_id),
        refresh_token=create_refresh_token(
            subject=user.id,
            token_version=user.token_version,
            club_id=club_id,
        ),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        club_id=club_id,
        user=UserResponse.model_validate(user),
    )


def _with_clubs(user: User) -> UserWithClubsResponse:
    response = UserWithClubsResponse.model_validate(user)
    response.clubs = [
        UserClubInfo(club_id=m.club_id, club_name=m.club.name, joined_date=m.joined_date)
        for m in user.club_memberships
    ]
    return response


def _member_response(membership: UserClub) -> ClubMemberResponse:
    user = membership.user
    return ClubMemberResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        phone_number=user.phone_number,
        numero_membre=user.numero_membre,
        role=user.role,
        is_active=user.is_active,
        joined_date=membership.joined_date,
    )


def _create_user(db: Session, data, role: str) -> User:
    """Crée un utilisateur après vérification de l'unicité de l'email."""
    if db.query(User).filter(User.email == data.email).first():
        logger.warning(f"Email déjà utilisé: {data.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un utilisateur avec cet email existe déjà.",
        )

    user = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        phone_number=data.phone_number,
        numero_membre=data.numero_membre,
        date_anniversaire=data.date_anniversaire,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Inscription d'un membre",
)
async def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
) -> Any:
    """
    Crée un compte membre rattaché à un club existant.
    """
    logger.info(f"Tentative d'inscription: {data.email}")

    if not data.club_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un club valide doit être spécifié lors de l'enregistrement.",
        )

    club = db.query(Club).filter(Club.id == data.club_id).first()
    if not club:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Le club spécifié n'existe pas.",
        )

    user = _create_user(db, data, UserRole.MEMBRE.value)
    db.add(UserClub(user_id=user.id, club_id=club.id))
    db.commit()
    db.refresh(user)

    logger.info(f"Nouveau membre créé: {user.email} (ID: {user.id}) dans {club.name}")
    return _auth_response(user, "Utilisateur créé avec succès.", club.id)


def _register_admin(db: Session, data: RegisterAdminRequest) -> AuthResponse:
    club = None
    if data.club_id:
        club = db.query(Club).filter(Club.id == data.club_id).first()
        if not club:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Le club spécifié n'existe pas.",
            )

    user = _create_user(db, data, UserRole.ADMIN.value)
    if club:
        db.add(UserClub(user_id=user.id, club_id=club.id))
    db.commit()
    db.refresh(user)

    logger.info(f"Administrateur créé: {user.email} (ID: {user.id})")
    return _auth_response(user, "Administrateur créé avec succès.", club.id if club else None)


@router.post(
    "/register-admin",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un administrateur",
)
async def register_admin(
    data: RegisterAdminRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """Crée un administrateur (réservé aux administrateurs)."""
    return _register_admin(db, data)


@router.post(
    "/register-initial-admin",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer le premier administrateur",
)
async def register_initial_admin(
    data: RegisterAdminRequest,
    db: Session = Depends(get_db),
) -> Any:
    """Crée le premier administrateur ; refusé dès qu'un administrateur existe."""
    if db.query(User).filter(User.role == UserRole.ADMIN.value).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Un administrateur existe déjà. Utilisez /register-admin.",
        )
    return _register_admin(db, data)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Connexion utilisateur",
)
async def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
) -> Any:
    """
    Authentifie un utilisateur sur un club et retourne les tokens JWT.
    """
    logger.info(f"Tentative de connexion: {credentials.email} (club {credentials.club_id})")

    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Email, mot de passe ou club incorrect.",
    )

    user = db.query(User).filter(User.email == credentials.email).first()
    if not user:
        raise invalid

    if not user.is_active:
        logger.warning(f"Compte désactivé: {user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Ce compte est désactivé. Veuillez contacter l'administrateur.",
        )

    if not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Mot de passe incorrect pour: {user.email}")
        raise invalid

    if not db.query(Club).filter(Club.id == credentials.club_id).first():
        raise invalid

    if not user.is_admin and credentials.club_id not in user.club_ids:
        logger.warning(f"{user.email} n'est pas membre du club {credentials.club_id}")
        raise invalid

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)

    logger.info(f"Connexion réussie: {user.email}")
    return _auth_response(user, "Connexion réussie.", credentials.club_id)


@router.post(
    "/refresh-token",
    response_model=AuthResponse,
    summary="Rafraîchir le token d'accès",
)
async def refresh_token(
    data: RefreshTokenRequest,
    db: Session = Depends(get_db),
) -> Any:
    """
    Génère une nouvelle paire de tokens à partir d'un refresh token non révoqué.
    """
    payload = verify_token(data.refresh_token, token_type="refresh")
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token invalide ou expiré",
        )

    user = db.query(User).filter(User.id == int(payload.get("sub"))).first()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Utilisateur non trouvé ou désactivé",
        )

    if payload.get("ver") != user.token_version:
        logger.warning(f"Refresh token révoqué utilisé par {user.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token révoqué",
        )

    logger.info(f"Token rafraîchi pour: {user.email}")
    return _auth_response(user, "Token rafraîchi.", payload.get("club_id"))


@router.post(
    "/revoke-token",
    response_model=MessageResponse,
    summary="Révoquer les refresh tokens",
)
async def revoke_token(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    """
    Invalide tous les refresh tokens émis pour l'utilisateur connecté.
    """
    current_user.token_version = (current_user.token_version or 0) + 1
    db.commit()

    logger.info(f"Refresh tokens révoqués pour: {current_user.email}")
    return MessageResponse(message="Token révoqué avec succès")


@router.get(
    "/me",
    response_model=UserWithClubsResponse,
    summary="Profil de l'utilisateur connecté",
)
async def get_me(
    current_user: User = Depends(get_current_active_user),
) -> Any:
    return _with_clubs(current_user)


@router.get(
    "/club/{club_id}/member/{user_id}",
    response_model=ClubMemberResponse,
    summary="Détail d'un membre du club",
)
async def get_club_member(
    club_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    membership = db.query(UserClub).filter(
        UserClub.club_id == club_id,
        UserClub.user_id == user_id,
    ).first()
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membre non trouvé dans ce club",
        )
    return _member_response(membership)


@router.get(
    "/user/{user_id}/clubs",
    response_model=List[UserClubInfo],
    summary="Clubs d'un utilisateur",
)
async def get_user_clubs(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Any:
    if user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès refusé aux clubs de cet utilisateur",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Utilisateur non trouvé",
        )
    return _with_clubs(user).clubs


@router.get(
    "/all-users-with-clubs",
    response_model=List[UserWithClubsResponse],
    summary="Tous les utilisateurs avec leurs clubs",
)
async def get_all_users_with_clubs(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    users = db.query(User).order_by(User.last_name, User.first_name).all()
    return [_with_clubs(u) for u in users]


@router.get(
    "/club/{club_id}/stats",
    summary="Statistiques des membres d'un club",
)
async def get_club_stats(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Club non trouvé",
        )

    memberships = db.query(UserClub).filter(UserClub.club_id == club_id).order_by(
        UserClub.joined_date
    ).all()
    total = len(memberships)
    actifs = sum(1 for m in memberships if m.user.is_active)
    limite = datetime.utcnow() - timedelta(days=30)

    def _resume(membership):
        if membership is None:
            return None
        return {
            "id": membership.user.id,
            "name": membership.user.full_name,
            "joined_date": membership.joined_date,
            "joined_date_formatted": f"{membership.joined_date:%d/%m/%Y}",
        }

    return {
        "success": True,
        "club_id": club.id,
        "club_name": club.name,
        "stats": {
            "total_members": total,
            "active_members": actifs,
            "inactive_members": total - actifs,
            "recent_joins_30_days": sum(1 for m in memberships if m.joined_date >= limite),
            "oldest_member": _resume(memberships[0] if memberships else None),
            "newest_member": _resume(memberships[-1] if memberships else None),
        },
    }


@router.post(
    "/promote-to-admin/{user_id}",
    response_model=MessageResponse,
    summary="Promouvoir un utilisateur administrateur",
)
async def promote_to_admin(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Utilisateur non trouvé",
        )

    if user.is_admin:
        return MessageResponse(message=f"L'utilisateur {user.email} est déjà Admin")

    user.role = UserRole.ADMIN.value
    db.commit()

    logger.info(f"{user.email} promu administrateur par {current_user.email}")
    return MessageResponse(message=f"L'utilisateur {user.email} a été promu Admin avec succès")


@router.post(
    "/club/{club_id}/member/{user_id}",
    response_model=ClubMemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ajouter un utilisateur à un club",
)
async def add_club_member(
    club_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur non trouvé")

    if club_id in user.club_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="L'utilisateur est déjà membre de ce club",
        )

    membership = UserClub(user_id=user.id, club_id=club.id)
    db.add(membership)
    db.commit()
    db.refresh(membership)

    logger.info(f"{user.email} ajouté au club {club.name}")
    return _member_response(membership)


@router.get(
    "/club/{club_id}/members",
    response_model=List[ClubMemberResponse],
    summary="Membres d'un club",
)
async def get_club_members(
    club_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(club_member),
) -> Any:
    memberships = (
        db.query(UserClub)
        .join(User, UserClub.user_id == User.id)
        .filter(UserClub.club_id == club_id)
        .order_by(User.last_name, User.first_name)
        .all()
    )
    return [_member_response(m) for m in memberships]


@router.delete(
    "/club/{club_id}/member/{user_id}",
    summary="Retirer un membre d'un club",
)
async def remove_club_member(
    club_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    """
    Retire un utilisateur d'un club.
    Le dernier administrateur d'un club ne peut pas être retiré.
    """
    club = db.query(Club).filter(Club.id == club_id).first()
    if not club:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Club non trouvé")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur non trouvé")

    membership = db.query(UserClub).filter(
        UserClub.club_id == club_id,
        UserClub.user_id == user_id,
    ).first()
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="L'utilisateur n'est pas membre de ce club",
        )

    if user.is_admin:
        admin_count = (
            db.query(UserClub)
            .join(User, UserClub.user_id == User.id)
            .filter(UserClub.club_id == club_id, User.role == UserRole.ADMIN.value)
            .count()
        )
        if admin_count <= 1:
            logger.warning(f"Refus de retirer le dernier administrateur du club {club.name}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Impossible de supprimer le dernier administrateur du club",
            )

    db.delete(membership)
    db.commit()

    logger.info(f"{user.email} retiré du club {club.name} par {current_user.email}")
    return {
        "success": True,
        "message": f"L'utilisateur {user.full_name} a été retiré du club {club.name}",
        "removed_member": {
            "user_id": user.id,
            "user_name": user.full_name,
            "user_email": user.email,
            "club_id": club.id,
            "club_name": club.name,
            "removed_date": datetime.utcnow(),
        },
    }


def _set_active(db: Session, user_id: int, active: bool, current_user: User) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Utilisateur non trouvé")

    if not active and user.id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Vous ne pouvez pas désactiver votre propre compte",
        )

    user.is_active = active
    db.commit()
    db.refresh(user)
    logger.info(f"Compte {user.email} {'activé' if active else 'désactivé'} par {current_user.email}")
    return user


@router.patch(
    "/user/{user_id}/deactivate",
    response_model=UserResponse,
    summary="Désactiver un utilisateur",
)
async def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    return _set_active(db, user_id, False, current_user)


@router.patch(
    "/user/{user_id}/activate",
    response_model=UserResponse,
    summary="Activer un utilisateur",
)
async def activate_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Any:
    return _set_active(db, user_id, True, current_user)
