"""Tests unitaires des services : tirage, statuts, import Excel et compte-rendu."""
import random
from datetime import date, time
from io import BytesIO
from types import SimpleNamespace

import pytest
from docx import Document
from openpyxl import Workbook

from app.api.v1.endpoints.presences import taux_presence
from app.api.v1.endpoints.reunions import nettoyer_ordres_du_jour
from app.schemas.reunion import CompteRenduRequest
from app.services.compte_rendu import generer_compte_rendu, nom_fichier_compte_rendu
from app.services.cotisation_service import determiner_statut_membre, taux_recouvrement
from app.services.email_service import format_montant
from app.services.excel_import import analyser_invites, extension_acceptee
from app.services.tombola_service import numeroter_billets, tirer_gagnants


def _participations(*quantites):
    return [SimpleNamespace(id=i, quantite=q) for i, q in enumerate(quantites, start=1)]


# ==================== TOMBOLA ====================

def test_numeroter_billets():
    billets = numeroter_billets(_participations(2, 1, 3))
    assert [numero for numero, _ in billets] == [1, 2, 3, 4, 5, 6]
    assert [p.id for _, p in billets] == [1, 1, 2, 3, 3, 3]


def test_tirer_gagnants_distinct_tickets():
    gagnants = tirer_gagnants(_participations(5, 3, 2), 4, rng=random.Random(42))
    numeros = [g.numero_ticket for g in gagnants]
    assert len(numeros) == 4
    assert len(set(numeros)) == 4
    assert all(1 <= n <= 10 for n in numeros)
    assert [g.position for g in gagnants] == [1, 2, 3, 4]


def test_tirer_gagnants_bounded_by_ticket_count():
    gagnants = tirer_gagnants(_participations(1, 1), 5, rng=random.Random(1))
    assert sorted(g.numero_ticket for g in gagnants) == [1, 2]


def test_tirer_gagnants_is_reproducible_with_seed():
    participations = _participations(4, 4, 4)
    premier = [g.numero_ticket for g in tirer_gagnants(participations, 3, rng=random.Random(7))]
    second = [g.numero_ticket for g in tirer_gagnants(participations, 3, rng=random.Random(7))]
    assert premier == second


def test_tirer_gagnants_requires_positive_count():
    with pytest.raises(ValueError):
        tirer_gagnants(_participations(3), 0)


def test_tirer_gagnants_without_tickets():
    assert tirer_gagnants([], 3, rng=random.Random(0)) == []


# ==================== COTISATIONS ====================

@pytest.mark.parametrize(
    "cotisations, paiements, attendu",
    [
        (0, 0, "Aucune cotisation"),
        (0, 5000, "Aucune cotisation"),
        (480000, 480000, "À jour"),
        (480000, 500000, "À jour"),
        (480000, 100000, "Partiellement payé"),
        (480000, 0, "En retard"),
    ],
)
def test_determiner_statut_membre(cotisations, paiements, attendu):
    assert determiner_statut_membre(cotisations, paiements, cotisations - paiements) == attendu


def test_taux_recouvrement_and_format_montant():
    assert taux_recouvrement(240000, 480000) == 50.0
    assert taux_recouvrement(1000, 0) == 0.0
    assert format_montant(1480000) == "1 480 000"


# ==================== RÉUNIONS ====================

def test_nettoyer_ordres_du_jour():
    assert nettoyer_ordres_du_jour(["  Accueil ", "", "accueil", None, "Divers"]) == ["Accueil", "Divers"]


def test_taux_presence():
    assert taux_presence(2, 3) == 66.7
    assert taux_presence(0, 0) == 0.0


def _reunion():
    return SimpleNamespace(
        club=SimpleNamespace(name="Rotary Club Dakar Teranga"),
        type_reunion=SimpleNamespace(libelle="Assemblée générale"),
        date=date(2025, 6, 20),
        heure=time(18, 0),
    )


def test_nom_fichier_compte_rendu():
    assert nom_fichier_compte_rendu(_reunion()) == "compte-rendu-Assemblée-générale-20-06-2025.docx"


def test_compte_rendu_without_agenda_or_participants():
    contenu = generer_compte_rendu(_reunion(), CompteRenduRequest(divers="   "))
    doc = Document(BytesIO(contenu))
    textes = [p.text for p in doc.paragraphs]
    assert "Aucun ordre du jour défini." in textes
    assert "DIVERS" not in textes
    assert doc.tables == []


# ==================== IMPORT EXCEL ====================

def _classeur(*valeurs) -> bytes:
    wb = Workbook()
    for valeur in valeurs:
        wb.active.append([valeur])
    sortie = BytesIO()
    wb.save(sortie)
    return sortie.getvalue()


def test_extension_acceptee():
    assert extension_acceptee("Invites.XLSX")
    assert not extension_acceptee("invites.xls")
    assert not extension_acceptee("")


def test_analyser_invites_counts_errors_and_duplicates():
    contenu = _classeur("Awa Ndiaye", "  Moussa Ba  ", "AWA NDIAYE", "y" * 201, "Cheikh Diallo", 2025)
    analyse = analyser_invites(contenu, ["cheikh diallo"])

    assert analyse.noms_a_creer == ["Awa Ndiaye", "Moussa Ba", "2025"]
    assert analyse.nombre_lignes_traitees == 3
    assert analyse.nombre_doublons == 2
    assert analyse.nombre_erreurs == 1
    assert analyse.erreurs[1].startswith("Ligne 4:")


def test_analyser_invites_rejects_invalid_content():
    with pytest.raises(ValueError):
        analyser_invites(b"not a workbook", [])
