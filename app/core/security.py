"""
Module de sécurité pour RotaryClubManager.
Gestion de l'authentification JWT et du hashage des mots de passe.
"""

from datetime import datetime, timedelta
from typing import Any, Optional, Dict, Union

import bcrypt
from jose import JWTError, jwt

from app.config import settings
from app.core.logging import logger


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Vérifie si un mot de passe en clair correspond au hash stocké.

    Args:
        plain_password: Mot de passe en clair
        hashed_password: Hash du mot de passe stocké

    Returns:
        True si le mot de passe est correct, False sinon
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError as e:
        logger.error(f"Hash de mot de passe invalide: {e}")
        return False


def get_password_hash(password: str) -> str:
    """Hash un mot de passe pour le stockage."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def _encode(claims: Dict[str, Any], duree: timedelta) -> str:
    maintenant = datetime.utcnow()
    claims.update({"iat": maintenant, "exp": maintenant + duree})
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    subject: Union[str, int],
    role: str,
    club_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Crée un token JWT d'accès portant le rôle et le club de connexion.

    Args:
        subject: Identifiant de l'utilisateur
        role: Rôle de l'utilisateur (admin, president, secretaire, tresorier, membre)
        club_id: Club choisi à la connexion
        expires_delta: Durée de validité, ACCESS_TOKEN_EXPIRE_MINUTES par défaut
    """
    token = _encode(
        {"sub": str(subject), "role": role, "club_id": club_id, "type": "access"},
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.debug(f"Token d'accès créé pour l'utilisateur {subject} ({role}, club {club_id})")
    return token


def create_refresh_token(
    subject: Union[str, int],
    token_version: int = 0,
    club_id: Optional[int] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Crée un token JWT de rafraîchissement.

    La claim "ver" est comparée à User.token_version au rafraîchissement :
    incrémenter cette version invalide tous les refresh tokens déjà émis.
    """
    token = _encode(
        {"sub": str(subject), "ver": token_version, "club_id": club_id, "type": "refresh"},
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )
    logger.debug(f"Token de rafraîchissement créé pour l'utilisateur {subject}")
    return token


def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
    """
    Vérifie et décode un token JWT.

    Args:
        token: Token JWT à vérifier
        token_type: Type de token attendu (access ou refresh)

    Returns:
        Payload du token si valide, None sinon
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        logger.warning(f"Erreur de vérification du token JWT: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"Type de token invalide: attendu {token_type}, reçu {payload.get('type')}")
        return None

    return payload


def decode_token_unsafe(token: str) -> Optional[Dict[str, Any]]:
    """
    Décode un token sans vérifier l'expiration (journalisation des requêtes).
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": False}
        )
    except JWTError:
        return None


__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "decode_token_unsafe",
]
