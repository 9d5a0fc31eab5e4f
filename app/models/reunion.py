"""
Modèles des réunions : type, réunion, ordre du jour, présences et invités.
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Time, Text,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class TypeReunion(Base):
    """Type de réunion propre à un club (Statutaire, Comité, Assemblée...)."""

    __tablename__ = "types_reunion"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    libelle = Column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("club_id", "libelle", name="unique_type_reunion_club"),
    )

    def __repr__(self) -> str:
        return f"<TypeReunion(id={self.id}, libelle='{self.libelle}')>"


class Reunion(Base):
    """
    Réunion d'un club.

    Attributes:
        date: Jour de la réunion
        heure: Heure de début
        type_reunion_id: Type de réunion
    """

    __tablename__ = "reunions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    type_reunion_id = Column(Integer, ForeignKey("types_reunion.id"), nullable=False)
    date = Column(Date, nullable=False)
    heure = Column(Time, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    club = relationship("Club", lazy="selectin")
    type_reunion = relationship("TypeReunion", lazy="selectin")
    ordres_du_jour = relationship(
        "OrdreDuJour",
        back_populates="reunion",
        cascade="all, delete-orphan",
        order_by="OrdreDuJour.id",
    )
    presences = relationship(
        "ListePresence",
        back_populates="reunion",
        cascade="all, delete-orphan",
    )
    invites = relationship(
        "InviteReunion",
        back_populates="reunion",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_reunion_club_date", "club_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Reunion(id={self.id}, club_id={self.club_id}, date={self.date})>"

    @property
    def date_time_complete(self) -> datetime:
        """Date et heure combinées."""
        return datetime.combine(self.date, self.heure)


class OrdreDuJour(Base):
    """Point de l'ordre du jour d'une réunion."""

    __tablename__ = "ordres_du_jour"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    reunion_id = Column(Integer, ForeignKey("reunions.id", ondelete="CASCADE"), nullable=False)
    description = Column(String(1000), nullable=False)
    rapport = Column(Text, nullable=True)

    reunion = relationship("Reunion", back_populates="ordres_du_jour")


class ListePresence(Base):
    """Présence d'un membre à une réunion."""

    __tablename__ = "listes_presence"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    reunion_id = Column(Integer, ForeignKey("reunions.id", ondelete="CASCADE"), nullable=False)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    reunion = relationship("Reunion", back_populates="presences")
    membre = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("reunion_id", "membre_id", name="unique_presence_reunion_membre"),
    )


class InviteReunion(Base):
    """Invité extérieur présent à une réunion."""

    __tablename__ = "invites_reunion"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    reunion_id = Column(Integer, ForeignKey("reunions.id", ondelete="CASCADE"), nullable=False)
    nom = Column(String(100), nullable=False)
    prenom = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    telephone = Column(String(20), nullable=True)
    organisation = Column(String(200), nullable=True)

    reunion = relationship("Reunion", back_populates="invites")

    @property
    def nom_complet(self) -> str:
        return f"{self.prenom} {self.nom}".strip()
