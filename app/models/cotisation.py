"""
Modèles Cotisation et PaiementCotisation.
Une cotisation est le montant dû par un membre pour un mandat ; les paiements
sont enregistrés par club et viennent en déduction.
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Cotisation(Base):
    """
    Montant dû par un membre pour un mandat.

    Attributes:
        membre_id: Membre redevable
        mandat_id: Mandat concerné
        montant: Montant dû (FCFA)
    """

    __tablename__ = "cotisations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mandat_id = Column(Integer, ForeignKey("mandats.id", ondelete="CASCADE"), nullable=False)
    montant = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    membre = relationship("User", lazy="selectin")
    mandat = relationship("Mandat", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("membre_id", "mandat_id", name="unique_cotisation_membre_mandat"),
        CheckConstraint("montant >= 0", name="cotisation_montant_positif"),
        Index("idx_cotisation_mandat", "mandat_id"),
    )

    def __repr__(self) -> str:
        return f"<Cotisation(id={self.id}, membre_id={self.membre_id}, mandat_id={self.mandat_id}, montant={self.montant})>"


class PaiementCotisation(Base):
    """Paiement effectué par un membre auprès de son club."""

    __tablename__ = "paiements_cotisation"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    montant = Column(Integer, nullable=False)
    date = Column(DateTime, default=datetime.utcnow, nullable=False)
    commentaires = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    membre = relationship("User", lazy="selectin")
    club = relationship("Club")

    __table_args__ = (
        CheckConstraint("montant > 0", name="paiement_montant_positif"),
        Index("idx_paiement_membre_club", "membre_id", "club_id"),
    )

    def __repr__(self) -> str:
        return f"<PaiementCotisation(id={self.id}, membre_id={self.membre_id}, montant={self.montant})>"
