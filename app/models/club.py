"""
Modèles Club et Mandat.
Un club est le tenant de l'application ; un mandat est son année d'exercice.
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Text,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Club(Base):
    """
    Modèle représentant un club.

    Attributes:
        name: Nom du club
        numero_club: Numéro officiel du club
        lieu_reunion: Lieu habituel des réunions
        jour_reunion: Jour habituel des réunions
        heure_reunion: Heure habituelle (texte libre, ex. "19:30")
        frequence: Fréquence des réunions
        parraine_par: Club parrain
    """

    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)
    date_creation = Column(Date, nullable=True)
    numero_club = Column(String(50), nullable=True)
    numero_telephone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    lieu_reunion = Column(String(200), nullable=True)
    parraine_par = Column(String(200), nullable=True)
    jour_reunion = Column(String(20), nullable=True)
    heure_reunion = Column(String(10), nullable=True)
    frequence = Column(String(50), nullable=True)
    adresse = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    memberships = relationship(
        "UserClub",
        back_populates="club",
        cascade="all, delete-orphan",
    )
    mandats = relationship(
        "Mandat",
        back_populates="club",
        cascade="all, delete-orphan",
        order_by="Mandat.annee.desc()",
    )

    def __repr__(self) -> str:
        return f"<Club(id={self.id}, name='{self.name}')>"


class Mandat(Base):
    """
    Année d'exercice d'un club.

    Un seul mandat est "actuel" à la fois pour un club ; l'activation d'un
    mandat désactive les autres.
    """

    __tablename__ = "mandats"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    annee = Column(Integer, nullable=False)
    date_debut = Column(Date, nullable=False)
    date_fin = Column(Date, nullable=False)
    description = Column(String(200), nullable=True)
    montant_cotisation = Column(Integer, default=0, nullable=False)
    est_actuel = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    club = relationship("Club", back_populates="mandats", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("club_id", "annee", name="unique_mandat_annee"),
        CheckConstraint("date_fin > date_debut", name="mandat_dates_valides"),
        Index("idx_mandat_club_actuel", "club_id", "est_actuel"),
    )

    def __repr__(self) -> str:
        return f"<Mandat(id={self.id}, club_id={self.club_id}, annee={self.annee})>"

    @property
    def periode_complete(self) -> str:
        """Période lisible du mandat, ex. "01/07/2024 - 30/06/2025"."""
        return f"{self.date_debut:%d/%m/%Y} - {self.date_fin:%d/%m/%Y}"

    def contient(self, jour) -> bool:
        """Vérifie qu'une date est comprise dans la période du mandat."""
        if isinstance(jour, datetime):
            jour = jour.date()
        return self.date_debut <= jour <= self.date_fin
