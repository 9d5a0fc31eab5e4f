"""
Modèle User - Membres et administrateurs des clubs.
Gère les informations personnelles, l'authentification, les rôles et
l'appartenance aux clubs.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class UserRole(str, enum.Enum):
    """Rôles disponibles pour les utilisateurs."""
    MEMBRE = "membre"             # Membre d'un club
    PRESIDENT = "president"       # Président du club
    SECRETAIRE = "secretaire"     # Secrétaire (réunions, galas)
    TRESORIER = "tresorier"       # Trésorier (cotisations, budget)
    ADMIN = "admin"               # Administrateur de la plateforme


class User(Base):
    """
    Modèle représentant un membre ou un administrateur.

    Attributes:
        id: Identifiant unique
        email: Adresse email (unique)
        hashed_password: Mot de passe hashé
        first_name: Prénom
        last_name: Nom de famille
        phone_number: Numéro de téléphone
        numero_membre: Numéro de membre Rotary
        date_anniversaire: Date de naissance
        role: Rôle de l'utilisateur
        is_active: Compte actif ou non
        joined_date: Date d'inscription
        token_version: Incrémentée à chaque révocation des refresh tokens
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Authentification
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    token_version = Column(Integer, default=0, nullable=False)

    # Informations personnelles
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone_number = Column(String(20), nullable=True)
    numero_membre = Column(String(50), nullable=True)
    date_anniversaire = Column(Date, nullable=True)
    profile_picture_url = Column(String(500), nullable=True)

    # Rôle et statut
    role = Column(String(20), default=UserRole.MEMBRE.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    joined_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relations
    club_memberships = relationship(
        "UserClub",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_user_email_active", "email", "is_active"),
        Index("idx_user_role", "role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"

    @property
    def full_name(self) -> str:
        """Retourne le nom complet de l'utilisateur."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        """Vérifie si l'utilisateur est administrateur."""
        return self.role == UserRole.ADMIN.value

    @property
    def club_ids(self) -> list:
        """Identifiants des clubs dont l'utilisateur est membre."""
        return [m.club_id for m in self.club_memberships]


class UserClub(Base):
    """
    Appartenance d'un utilisateur à un club.

    Attributes:
        user_id: Membre
        club_id: Club
        joined_date: Date d'adhésion au club
    """

    __tablename__ = "user_clubs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    joined_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="club_memberships")
    club = relationship("Club", back_populates="memberships", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "club_id", name="unique_user_club"),
        Index("idx_user_club_club", "club_id"),
    )

    def __repr__(self) -> str:
        return f"<UserClub(user_id={self.user_id}, club_id={self.club_id})>"
