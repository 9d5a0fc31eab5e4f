"""
Contexte du club courant (tenant).

Le club ciblé par une requête est stocké dans un ContextVar : chaque requête
FastAPI garde sa propre valeur. Il est positionné par la dépendance
ClubPermission et repris par le logging.
"""

from contextvars import ContextVar
from typing import Optional

_current_tenant_id: ContextVar[Optional[int]] = ContextVar("current_tenant_id", default=None)


def set_current_tenant_id(club_id: Optional[int]) -> None:
    """Positionne le club courant pour le contexte de la requête."""
    _current_tenant_id.set(club_id)


def get_current_tenant_id() -> Optional[int]:
    """Retourne le club courant (ou None hors d'une route de club)."""
    return _current_tenant_id.get()


__all__ = ["set_current_tenant_id", "get_current_tenant_id"]
