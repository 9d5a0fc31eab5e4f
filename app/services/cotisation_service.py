"""
Service de calcul de la situation des cotisations.
Le solde d'un membre est la somme de ses cotisations moins la somme de ses
paiements dans le club.
"""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.club import Club, Mandat
from app.models.cotisation import Cotisation, PaiementCotisation
from app.models.user import User, UserClub
from app.schemas.cotisation import SituationMembre


STATUT_AUCUNE = "Aucune cotisation"
STATUT_A_JOUR = "À jour"
STATUT_PARTIEL = "Partiellement payé"
STATUT_EN_RETARD = "En retard"


def determiner_statut_membre(montant_cotisations: int, montant_paiements: int, solde: int) -> str:
    """
    Détermine le statut d'un membre à partir de ses montants.

    Args:
        montant_cotisations: Total dû
        montant_paiements: Total payé
        solde: Total dû moins total payé
    """
    if montant_cotisations == 0:
        return STATUT_AUCUNE
    if solde <= 0:
        return STATUT_A_JOUR
    if montant_paiements > 0:
        return STATUT_PARTIEL
    return STATUT_EN_RETARD


def taux_recouvrement(montant_paye: int, montant_du: int) -> float:
    """Pourcentage payé arrondi à 2 décimales (0 si rien n'est dû)."""
    if montant_du > 0:
        return round(montant_paye / montant_du * 100, 2)
    return 0.0


class CotisationService:
    """Calculs de situation financière des membres et des clubs."""

    def __init__(self, db: Session):
        self.db = db

    def _cotisations_club(self, club_id: int, membre_id: Optional[int] = None) -> List[Cotisation]:
        query = (
            self.db.query(Cotisation)
            .join(Mandat, Cotisation.mandat_id == Mandat.id)
            .filter(Mandat.club_id == club_id)
        )
        if membre_id is not None:
            query = query.filter(Cotisation.membre_id == membre_id)
        return query.all()

    def _paiements_club(self, club_id: int, membre_id: Optional[int] = None) -> List[PaiementCotisation]:
        query = self.db.query(PaiementCotisation).filter(PaiementCotisation.club_id == club_id)
        if membre_id is not None:
            query = query.filter(PaiementCotisation.membre_id == membre_id)
        return query.all()

    @staticmethod
    def _situation(membre: User, club: Club, cotisations, paiements) -> SituationMembre:
        total_du = sum(c.montant for c in cotisations)
        total_paye = sum(p.montant for p in paiements)
        solde = total_du - total_paye
        return SituationMembre(
            membre_id=membre.id,
            nom_complet=membre.full_name,
            email=membre.email,
            numero_membre=membre.numero_membre,
            club_id=club.id,
            club_nom=club.name,
            is_active=membre.is_active,
            nombre_cotisations=len(cotisations),
            montant_total_cotisations=total_du,
            nombre_paiements=len(paiements),
            montant_total_paiements=total_paye,
            solde=solde,
            taux_recouvrement=taux_recouvrement(total_paye, total_du),
            statut=determiner_statut_membre(total_du, total_paye, solde),
            dernier_paiement=max((p.date for p in paiements), default=None),
        )

    def situation_membre(self, membre: User, club: Club) -> SituationMembre:
        """Situation d'un membre dans un club."""
        return self._situation(
            membre,
            club,
            self._cotisations_club(club.id, membre.id),
            self._paiements_club(club.id, membre.id),
        )

    def situation_membres_club(self, club: Club, include_inactive: bool = False) -> List[SituationMembre]:
        """Situation de chaque membre du club, triée par nom."""
        query = (
            self.db.query(User)
            .join(UserClub, UserClub.user_id == User.id)
            .filter(UserClub.club_id == club.id)
        )
        if not include_inactive:
            query = query.filter(User.is_active.is_(True))
        membres = query.order_by(User.last_name, User.first_name).all()

        cotisations = self._cotisations_club(club.id)
        paiements = self._paiements_club(club.id)

        return [
            self._situation(
                membre,
                club,
                [c for c in cotisations if c.membre_id == membre.id],
                [p for p in paiements if p.membre_id == membre.id],
            )
            for membre in membres
        ]

    @staticmethod
    def statistiques_membres(situations: List[SituationMembre]) -> Dict:
        """Totaux du club et répartition des membres par statut."""
        total_du = sum(s.montant_total_cotisations for s in situations)
        total_paye = sum(s.montant_total_paiements for s in situations)
        statuts = [s.statut for s in situations]
        return {
            "nombre_membres": len(situations),
            "total_cotisations": total_du,
            "total_paiements": total_paye,
            "solde_global": total_du - total_paye,
            "taux_recouvrement_global": taux_recouvrement(total_paye, total_du),
            "nombres_par_statut": {
                "a_jour": statuts.count(STATUT_A_JOUR),
                "partiellement_paye": statuts.count(STATUT_PARTIEL),
                "en_retard": statuts.count(STATUT_EN_RETARD),
                "aucune_cotisation": statuts.count(STATUT_AUCUNE),
            },
        }

    def situation_globale(self) -> Dict:
        """Situation tous clubs confondus avec le détail par mandat."""
        total_du = self.db.query(func.coalesce(func.sum(Cotisation.montant), 0)).scalar()
        total_paye = self.db.query(func.coalesce(func.sum(PaiementCotisation.montant), 0)).scalar()
        nombre_cotisations = self.db.query(Cotisation).count()
        nombre_paiements = self.db.query(PaiementCotisation).count()

        details = []
        mandats = (
            self.db.query(Mandat)
            .join(Cotisation, Cotisation.mandat_id == Mandat.id)
            .distinct()
            .order_by(Mandat.annee.desc())
            .all()
        )
        for mandat in mandats:
            cotisations = self.db.query(Cotisation).filter(Cotisation.mandat_id == mandat.id).all()
            membres_ids = {c.membre_id for c in cotisations}
            montant_cotisations = sum(c.montant for c in cotisations)
            montant_paiements = sum(
                p.montant
                for p in self._paiements_club(mandat.club_id)
                if p.membre_id in membres_ids
            )
            details.append({
                "mandat_id": mandat.id,
                "annee": mandat.annee,
                "description": mandat.description,
                "club_id": mandat.club_id,
                "montant_cotisations": montant_cotisations,
                "montant_paiements": montant_paiements,
                "solde": montant_cotisations - montant_paiements,
                "nombre_cotisations": len(cotisations),
                "taux_recouvrement": taux_recouvrement(montant_paiements, montant_cotisations),
            })

        return {
            "success": True,
            "resume": {
                "montant_total_cotisations": total_du,
                "montant_total_paiements": total_paye,
                "solde_global": total_du - total_paye,
                "nombre_total_cotisations": nombre_cotisations,
                "nombre_total_paiements": nombre_paiements,
                "taux_recouvrement_global": taux_recouvrement(total_paye, total_du),
                "montant_moyen_cotisation": round(total_du / nombre_cotisations, 2) if nombre_cotisations else 0,
                "montant_moyen_paiement": round(total_paye / nombre_paiements, 2) if nombre_paiements else 0,
            },
            "details_par_mandat": details,
        }
