"""
Schémas communs : enveloppes de réponse {success, message, data}.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Enveloppe standard des réponses d'écriture."""
    success: bool = True
    message: str
    data: Optional[T] = None


class MessageResponse(BaseModel):
    """Réponse sans données."""
    success: bool = True
    message: str
