"""
Module core - Fonctionnalités centrales de l'application.
Contient la sécurité, le logging et le contexte du club courant.
"""

from .security import (
    create_access_token,
    create_refresh_token,
    verify_password,
    get_password_hash,
    verify_token,
)
from .logging import setup_logging, logger
from .tenant import set_current_tenant_id, get_current_tenant_id

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "verify_password",
    "get_password_hash",
    "verify_token",
    "setup_logging",
    "logger",
    "set_current_tenant_id",
    "get_current_tenant_id",
]
