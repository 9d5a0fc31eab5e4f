"""
Modèles des commissions et du comité d'un club.
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text,
    ForeignKey, Index,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Commission(Base):
    """Commission permanente d'un club (ex. Effectif, Action professionnelle)."""

    __tablename__ = "commissions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    nom = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    role_et_responsabilite = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    membres = relationship(
        "MembreCommission",
        back_populates="commission",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_commission_club", "club_id"),
    )

    def __repr__(self) -> str:
        return f"<Commission(id={self.id}, nom='{self.nom}')>"


class MembreCommission(Base):
    """
    Affectation d'un membre à une commission pour un mandat.

    Au plus un responsable actif par commission et par mandat.
    """

    __tablename__ = "membres_commission"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    commission_id = Column(Integer, ForeignKey("commissions.id", ondelete="CASCADE"), nullable=False)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mandat_id = Column(Integer, ForeignKey("mandats.id", ondelete="CASCADE"), nullable=False)
    est_responsable = Column(Boolean, default=False, nullable=False)
    est_actif = Column(Boolean, default=True, nullable=False)
    date_nomination = Column(DateTime, default=datetime.utcnow, nullable=False)
    date_demission = Column(DateTime, nullable=True)
    commentaires = Column(String(500), nullable=True)

    commission = relationship("Commission", back_populates="membres", lazy="selectin")
    membre = relationship("User", lazy="selectin")
    mandat = relationship("Mandat", lazy="selectin")

    __table_args__ = (
        Index("idx_membre_commission_mandat", "commission_id", "mandat_id"),
    )

    def __repr__(self) -> str:
        return f"<MembreCommission(id={self.id}, membre_id={self.membre_id}, commission_id={self.commission_id})>"


class PosteComite(Base):
    """Poste du comité d'un club (Président, Secrétaire, Trésorier...)."""

    __tablename__ = "postes_comite"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    nom = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PosteComite(id={self.id}, nom='{self.nom}')>"


class MembreComite(Base):
    """Nomination d'un membre à un poste du comité pour un mandat."""

    __tablename__ = "membres_comite"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    poste_comite_id = Column(Integer, ForeignKey("postes_comite.id", ondelete="CASCADE"), nullable=False)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    mandat_id = Column(Integer, ForeignKey("mandats.id", ondelete="CASCADE"), nullable=False)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    est_actif = Column(Boolean, default=True, nullable=False)
    date_nomination = Column(DateTime, default=datetime.utcnow, nullable=False)
    date_demission = Column(DateTime, nullable=True)
    commentaires = Column(String(500), nullable=True)

    poste = relationship("PosteComite", lazy="selectin")
    membre = relationship("User", lazy="selectin")
    mandat = relationship("Mandat", lazy="selectin")

    __table_args__ = (
        Index("idx_membre_comite_mandat", "mandat_id", "est_actif"),
    )

    def __repr__(self) -> str:
        return f"<MembreComite(id={self.id}, membre_id={self.membre_id}, poste_comite_id={self.poste_comite_id})>"
