"""
Schémas Pydantic pour les utilisateurs et l'authentification.
Validation des données d'entrée et sérialisation des réponses.
"""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator
import re

from app.models.user import UserRole


class UserBase(BaseModel):
    """Schéma de base pour les utilisateurs."""
    email: EmailStr = Field(..., description="Adresse email")
    first_name: str = Field(..., min_length=1, max_length=100, description="Prénom")
    last_name: str = Field(..., min_length=1, max_length=100, description="Nom de famille")
    phone_number: Optional[str] = Field(None, max_length=20, description="Numéro de téléphone")
    numero_membre: Optional[str] = Field(None, max_length=50)
    date_anniversaire: Optional[date] = None

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        """Valide le format du numéro de téléphone."""
        if v is None:
            return v
        cleaned = re.sub(r"[\s\-]", "", v)
        if not re.match(r"^\+?[0-9]{8,15}$", cleaned):
            raise ValueError("Format de téléphone invalide. Exemple: +221771234567")
        return cleaned


class RegisterRequest(UserBase):
    """Inscription d'un membre dans un club existant."""
    password: str = Field(..., min_length=6, description="Mot de passe (min 6 caractères)")
    club_id: Optional[int] = Field(None, description="Club de rattachement (obligatoire)")


class RegisterAdminRequest(UserBase):
    """Création d'un administrateur, éventuellement rattaché à un club."""
    password: str = Field(..., min_length=6)
    club_id: Optional[int] = None


class LoginRequest(BaseModel):
    """Connexion : email, mot de passe et club choisi."""
    email: EmailStr
    password: str
    club_id: int = Field(..., description="Club auquel se connecter")


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    """Schéma de réponse pour un utilisateur."""
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    full_name: str
    phone_number: Optional[str] = None
    numero_membre: Optional[str] = None
    date_anniversaire: Optional[date] = None
    profile_picture_url: Optional[str] = None
    role: UserRole
    is_active: bool
    joined_date: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserClubInfo(BaseModel):
    """Club d'un utilisateur avec sa date d'adhésion."""
    club_id: int
    club_name: str
    joined_date: datetime


class UserWithClubsResponse(UserResponse):
    clubs: List[UserClubInfo] = []


class ClubMemberResponse(BaseModel):
    """Membre d'un club."""
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    full_name: str
    phone_number: Optional[str] = None
    numero_membre: Optional[str] = None
    role: UserRole
    is_active: bool
    joined_date: datetime


class AuthResponse(BaseModel):
    """Réponse des opérations d'inscription et de connexion."""
    success: bool = True
    message: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = Field(None, description="Durée de validité en secondes")
    club_id: Optional[int] = None
    user: Optional[UserResponse] = None
