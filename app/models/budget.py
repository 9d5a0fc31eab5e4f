"""
Modèles du budget : hiérarchie TypeBudget > CategoryBudget > SousCategoryBudget,
rubriques budgétées par mandat et leurs réalisations.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Numeric,
    ForeignKey, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base


class TypeBudget(Base):
    """Type de budget (Recettes, Dépenses)."""

    __tablename__ = "types_budget"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    libelle = Column(String(100), unique=True, nullable=False)

    categories = relationship("CategoryBudget", back_populates="type_budget")


class CategoryBudget(Base):
    """Catégorie de budget rattachée à un type."""

    __tablename__ = "categories_budget"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    type_budget_id = Column(Integer, ForeignKey("types_budget.id"), nullable=False)
    libelle = Column(String(100), nullable=False)

    type_budget = relationship("TypeBudget", back_populates="categories", lazy="selectin")


class SousCategoryBudget(Base):
    """Sous-catégorie de budget propre à un club."""

    __tablename__ = "sous_categories_budget"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    category_budget_id = Column(Integer, ForeignKey("categories_budget.id"), nullable=False)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    libelle = Column(String(100), nullable=False)

    category_budget = relationship("CategoryBudget", lazy="selectin")


class RubriqueBudget(Base):
    """
    Ligne budgétaire d'un club pour un mandat.

    Attributes:
        libelle: Libellé (unique par sous-catégorie et mandat)
        prix_unitaire: Prix unitaire
        quantite: Quantité budgétée
        montant_realise: Somme des réalisations enregistrées
    """

    __tablename__ = "rubriques_budget"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    club_id = Column(Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False)
    mandat_id = Column(Integer, ForeignKey("mandats.id", ondelete="CASCADE"), nullable=False)
    sous_category_budget_id = Column(Integer, ForeignKey("sous_categories_budget.id"), nullable=False)
    libelle = Column(String(200), nullable=False)
    prix_unitaire = Column(Numeric(14, 2), nullable=False)
    quantite = Column(Integer, default=1, nullable=False)
    montant_realise = Column(Numeric(14, 2), default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    club = relationship("Club", lazy="selectin")
    mandat = relationship("Mandat", lazy="selectin")
    sous_category_budget = relationship("SousCategoryBudget", lazy="selectin")
    realisations = relationship(
        "RubriqueBudgetRealise",
        back_populates="rubrique",
        order_by="RubriqueBudgetRealise.date.desc()",
    )

    __table_args__ = (
        UniqueConstraint("mandat_id", "sous_category_budget_id", "libelle", name="unique_rubrique_libelle"),
        CheckConstraint("quantite >= 1", name="rubrique_quantite_positive"),
        Index("idx_rubrique_club_mandat", "club_id", "mandat_id"),
    )

    @property
    def montant_total(self) -> Decimal:
        """Montant budgété : prix unitaire × quantité."""
        return Decimal(self.prix_unitaire) * self.quantite

    @property
    def ecart_budget_realise(self) -> Decimal:
        return Decimal(self.montant_realise or 0) - self.montant_total

    @property
    def pourcentage_realisation(self) -> float:
        if self.montant_total > 0:
            return round(float(Decimal(self.montant_realise or 0) / self.montant_total * 100), 2)
        return 0.0


class RubriqueBudgetRealise(Base):
    """Dépense ou recette effectivement réalisée sur une rubrique."""

    __tablename__ = "rubriques_budget_realisees"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    rubrique_budget_id = Column(Integer, ForeignKey("rubriques_budget.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    montant = Column(Numeric(14, 2), nullable=False)
    commentaires = Column(String(500), nullable=True)

    rubrique = relationship("RubriqueBudget", back_populates="realisations", lazy="selectin")

    __table_args__ = (
        CheckConstraint("montant > 0", name="realisation_montant_positif"),
    )
