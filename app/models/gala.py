"""
Modèles des galas : invités, tables, affectations, tickets et tombola.
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class Gala(Base):
    """
    Gala de levée de fonds.

    Attributes:
        libelle: Nom du gala (unique pour une date donnée)
        date: Date et heure du gala
        lieu: Lieu
        nombre_tables: Nombre de tables créées ("Table 1".."Table N")
        nombre_souches_tickets: Nombre de carnets de tickets d'entrée
        quantite_par_souche_tickets: Tickets par carnet
        nombre_souches_tombola: Nombre de carnets de tombola
        quantite_par_souche_tombola: Billets par carnet
    """

    __tablename__ = "galas"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    libelle = Column(String(200), nullable=False)
    date = Column(DateTime, nullable=False)
    lieu = Column(String(300), nullable=False)
    nombre_tables = Column(Integer, default=1, nullable=False)
    nombre_souches_tickets = Column(Integer, default=1, nullable=False)
    quantite_par_souche_tickets = Column(Integer, default=1, nullable=False)
    nombre_souches_tombola = Column(Integer, default=1, nullable=False)
    quantite_par_souche_tombola = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    invites = relationship("GalaInvites", back_populates="gala", cascade="all, delete-orphan")
    tables = relationship(
        "GalaTable",
        back_populates="gala",
        cascade="all, delete-orphan",
        order_by="GalaTable.id",
    )
    tickets = relationship("GalaTicket", back_populates="gala", cascade="all, delete-orphan")
    tombolas = relationship("GalaTombola", back_populates="gala", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("nombre_tables >= 1 AND nombre_tables <= 100", name="gala_nombre_tables"),
        Index("idx_gala_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Gala(id={self.id}, libelle='{self.libelle}')>"

    @property
    def total_tickets_disponibles(self) -> int:
        return self.nombre_souches_tickets * self.quantite_par_souche_tickets

    @property
    def total_tombola_disponibles(self) -> int:
        return self.nombre_souches_tombola * self.quantite_par_souche_tombola


class GalaInvites(Base):
    """Invité d'un gala (nom et prénom en un seul champ)."""

    __tablename__ = "gala_invites"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    gala_id = Column(Integer, ForeignKey("galas.id", ondelete="CASCADE"), nullable=False)
    nom_prenom = Column(String(200), nullable=False)
    present = Column(Boolean, default=False, nullable=True)

    gala = relationship("Gala", back_populates="invites")
    affectation = relationship(
        "GalaTableAffectation",
        back_populates="invite",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def table(self):
        """Table affectée à l'invité, ou None."""
        return self.affectation.table if self.affectation else None


class GalaTable(Base):
    """Table d'un gala."""

    __tablename__ = "gala_tables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    gala_id = Column(Integer, ForeignKey("galas.id", ondelete="CASCADE"), nullable=False)
    table_libelle = Column(String(100), nullable=False)

    gala = relationship("Gala", back_populates="tables")
    affectations = relationship(
        "GalaTableAffectation",
        back_populates="table",
        cascade="all, delete-orphan",
    )


class GalaTableAffectation(Base):
    """Placement d'un invité à une table ; un invité n'occupe qu'une table."""

    __tablename__ = "gala_table_affectations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    gala_table_id = Column(Integer, ForeignKey("gala_tables.id", ondelete="CASCADE"), nullable=False)
    gala_invites_id = Column(Integer, ForeignKey("gala_invites.id", ondelete="CASCADE"), nullable=False)
    date_ajout = Column(DateTime, default=datetime.utcnow, nullable=False)

    table = relationship("GalaTable", back_populates="affectations", lazy="selectin")
    invite = relationship("GalaInvites", back_populates="affectation")

    __table_args__ = (
        UniqueConstraint("gala_invites_id", name="unique_affectation_invite"),
    )


class _VenteGalaMixin:
    """Colonnes communes aux ventes de tickets et de tombola."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    quantite = Column(Integer, nullable=False)
    externe = Column(String(250), nullable=True)

    @property
    def participant_nom(self) -> str:
        """Nom du membre vendeur/acheteur, ou du participant externe."""
        if self.membre is not None:
            return self.membre.full_name
        return self.externe or ""


class GalaTicket(_VenteGalaMixin, Base):
    """Tickets d'entrée vendus par un membre ou à un participant externe."""

    __tablename__ = "gala_tickets"

    gala_id = Column(Integer, ForeignKey("galas.id", ondelete="CASCADE"), nullable=False)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    gala = relationship("Gala", back_populates="tickets")
    membre = relationship("User", lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantite >= 1", name="gala_ticket_quantite"),
    )


class GalaTombola(_VenteGalaMixin, Base):
    """Billets de tombola vendus par un membre ou à un participant externe."""

    __tablename__ = "gala_tombolas"

    gala_id = Column(Integer, ForeignKey("galas.id", ondelete="CASCADE"), nullable=False)
    membre_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    gala = relationship("Gala", back_populates="tombolas")
    membre = relationship("User", lazy="selectin")

    __table_args__ = (
        CheckConstraint("quantite >= 1", name="gala_tombola_quantite"),
    )
