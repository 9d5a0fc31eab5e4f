"""
Dépendances FastAPI pour l'injection de dépendances.
Gère l'authentification, les autorisations par rôle et l'accès aux clubs.
"""

from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.security import verify_token
from app.core.logging import logger
from app.core.tenant import set_current_tenant_id
from app.models.user import User, UserClub, UserRole


# Schéma de sécurité Bearer Token
security = HTTPBearer(auto_error=False)

# Groupes de rôles utilisés par les routes
ADMIN_ROLES = [UserRole.ADMIN.value]
MANAGER_ROLES = [UserRole.ADMIN.value, UserRole.PRESIDENT.value, UserRole.SECRETAIRE.value]
FINANCE_ROLES = MANAGER_ROLES + [UserRole.TRESORIER.value]


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Récupère l'utilisateur courant à partir du token JWT.

    Args:
        credentials: Token Bearer JWT
        db: Session de base de données

    Returns:
        Instance User de l'utilisateur authentifié

    Raises:
        HTTPException: Si le token est invalide ou l'utilisateur non trouvé
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Token d'authentification invalide ou expiré",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not credentials:
        logger.warning("Tentative d'accès sans token")
        raise credentials_exception

    payload = verify_token(credentials.credentials, token_type="access")
    if payload is None:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning("Token sans identifiant utilisateur valide")
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning(f"Utilisateur {user_id} non trouvé")
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Vérifie que l'utilisateur courant est actif.

    Raises:
        HTTPException: Si l'utilisateur est désactivé
    """
    if not current_user.is_active:
        logger.warning(f"Tentative d'accès par utilisateur désactivé: {current_user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Compte utilisateur désactivé",
        )
    return current_user


def require_roles(allowed_roles: List[str]):
    """
    Dépendance pour restreindre l'accès à certains rôles.

    Args:
        allowed_roles: Liste des rôles autorisés

    Usage:
        @router.delete("/{id}")
        async def delete(user: User = Depends(require_roles(["admin"]))):
            ...
    """
    async def role_checker(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(
                f"Accès refusé pour {current_user.email}: "
                f"rôle {current_user.role} non autorisé"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Accès refusé. Rôles requis: {allowed_roles}",
            )
        return current_user

    return role_checker


require_admin = require_roles(ADMIN_ROLES)
require_manager = require_roles(MANAGER_ROLES)
require_finance = require_roles(FINANCE_ROLES)


def is_club_member(db: Session, user_id: int, club_id: int) -> bool:
    """Vérifie qu'un utilisateur appartient à un club."""
    return db.query(UserClub).filter(
        UserClub.user_id == user_id,
        UserClub.club_id == club_id,
    ).first() is not None


def ensure_club_access(
    db: Session,
    user: User,
    club_id: int,
    roles: Optional[List[str]] = None,
) -> None:
    """
    Vérifie qu'un utilisateur peut accéder (ou gérer) un club.

    L'administrateur a accès à tous les clubs. Les autres utilisateurs doivent
    être membres du club et, si des rôles sont précisés, avoir l'un d'eux.

    Raises:
        HTTPException 403: accès refusé
    """
    if user.is_admin:
        set_current_tenant_id(club_id)
        return

    if not is_club_member(db, user.id, club_id):
        logger.warning(f"Accès refusé au club {club_id} pour {user.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès non autorisé à ce club",
        )

    if roles and user.role not in roles:
        logger.warning(f"Gestion du club {club_id} refusée pour {user.email} (rôle {user.role})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Vous n'avez pas l'autorisation de gérer ce club",
        )

    set_current_tenant_id(club_id)


class ClubPermission:
    """
    Vérification des permissions pour le club ciblé par la route.
    Positionne également le club courant (tenant) pour la requête.
    """

    def __init__(self, roles: Optional[List[str]] = None):
        """
        Args:
            roles: Rôles autorisés à gérer le club (None = tout membre)
        """
        self.roles = roles or []

    async def __call__(
        self,
        club_id: int,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db),
    ) -> User:
        ensure_club_access(db, current_user, club_id, self.roles)
        return current_user


# Instances de permissions prédéfinies
club_member = ClubPermission()
club_manager = ClubPermission(roles=MANAGER_ROLES)
club_finance = ClubPermission(roles=FINANCE_ROLES)


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "require_roles",
    "require_admin",
    "require_manager",
    "require_finance",
    "is_club_member",
    "ensure_club_access",
    "ClubPermission",
    "club_member",
    "club_manager",
    "club_finance",
    "security",
    "ADMIN_ROLES",
    "MANAGER_ROLES",
    "FINANCE_ROLES",
]
