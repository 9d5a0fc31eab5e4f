"""Tests des rubriques budgétaires et de leurs réalisations."""
import pytest

from app.models import CategoryBudget, RubriqueBudget, SousCategoryBudget, TypeBudget


@pytest.fixture()
def sous_categorie(db, seed):
    type_budget = TypeBudget(libelle="Dépenses")
    db.add(type_budget)
    db.flush()
    categorie = CategoryBudget(type_budget_id=type_budget.id, libelle="Actions humanitaires")
    db.add(categorie)
    db.flush()
    sous_categorie = SousCategoryBudget(category_budget_id=categorie.id, club_id=seed["club_id"], libelle="Santé")
    db.add(sous_categorie)
    db.commit()
    return sous_categorie


@pytest.fixture()
def rubriques_url(seed):
    return f"/api/v1/clubs/{seed['club_id']}/mandats/{seed['mandat_id']}/rubriques"


@pytest.fixture()
def rubrique(client, headers, sous_categorie, rubriques_url):
    r = client.post(
        f"{rubriques_url}/",
        json={
            "libelle": "Campagne de dépistage",
            "prix_unitaire": "250000",
            "quantite": 2,
            "sous_category_budget_id": sous_categorie.id,
        },
        headers=headers["tresorier"],
    )
    assert r.status_code == 201
    return r.json()


def _realisations_url(seed, rubrique_id):
    return f"/api/v1/clubs/{seed['club_id']}/rubriques/{rubrique_id}/realisations"


def test_create_rubrique_computes_total(rubrique):
    assert float(rubrique["montant_total"]) == 500000
    assert float(rubrique["montant_realise"]) == 0
    assert rubrique["type_budget_libelle"] == "Dépenses"
    assert rubrique["mandat_annee"] == 2024
    assert rubrique["pourcentage_realisation"] == 0.0


def test_create_rubrique_rules(client, headers, sous_categorie, rubriques_url, rubrique):
    payload = {"libelle": "campagne de dépistage", "prix_unitaire": "1000", "sous_category_budget_id": sous_categorie.id}

    r = client.post(f"{rubriques_url}/", json=payload, headers=headers["tresorier"])
    assert r.status_code == 400

    r = client.post(f"{rubriques_url}/", json={**payload, "sous_category_budget_id": 999, "libelle": "Autre"}, headers=headers["tresorier"])
    assert r.status_code == 400
    assert r.json()["detail"] == "La sous-catégorie spécifiée n'existe pas dans ce club"

    r = client.post(f"{rubriques_url}/", json={**payload, "libelle": "Autre"}, headers=headers["membre"])
    assert r.status_code == 403


def test_rubrique_unknown_mandat(client, seed, headers, sous_categorie):
    r = client.get(f"/api/v1/clubs/{seed['club_id']}/mandats/999/rubriques/", headers=headers["membre"])
    assert r.status_code == 404
    assert r.json()["detail"] == "Mandat non trouvé pour ce club"


def test_list_rubriques_filters_and_total_header(client, headers, sous_categorie, rubriques_url, rubrique):
    client.post(
        f"{rubriques_url}/",
        json={"libelle": "Don de matériel", "prix_unitaire": "100000", "sous_category_budget_id": sous_categorie.id},
        headers=headers["tresorier"],
    )

    r = client.get(f"{rubriques_url}/", params={"recherche": "matériel"}, headers=headers["membre"])
    assert r.headers["X-Total-Count"] == "1"
    assert [x["libelle"] for x in r.json()] == ["Don de matériel"]

    r = client.get(f"{rubriques_url}/", params={"page_size": 1, "page": 2}, headers=headers["membre"])
    assert r.headers["X-Total-Count"] == "2"
    assert len(r.json()) == 1


def test_realisation_date_must_be_in_mandat(client, seed, headers, rubrique):
    r = client.post(
        f"{_realisations_url(seed, rubrique['id'])}/",
        json={"date": "2025-08-01", "montant": "1000"},
        headers=headers["tresorier"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == (
        "La date de réalisation doit être comprise dans la période du mandat (01/07/2024 - 30/06/2025)"
    )


def test_realisations_keep_montant_realise_in_sync(client, seed, headers, rubriques_url, rubrique):
    url = _realisations_url(seed, rubrique["id"])

    ids = []
    for jour, montant in (("2024-09-10", "100000"), ("2024-09-25", "50000"), ("2024-11-02", "150000")):
        r = client.post(f"{url}/", json={"date": jour, "montant": montant}, headers=headers["tresorier"])
        assert r.status_code == 201
        ids.append(r.json()["id"])

    detail = client.get(f"{rubriques_url}/{rubrique['id']}", headers=headers["membre"]).json()
    assert float(detail["montant_realise"]) == 300000
    assert float(detail["ecart_budget_realise"]) == -200000
    assert detail["pourcentage_realisation"] == 60.0
    assert [r["date"] for r in detail["realisations"]] == ["2024-11-02", "2024-09-25", "2024-09-10"]

    r = client.put(f"{url}/{ids[1]}", json={"montant": "100000"}, headers=headers["tresorier"])
    assert r.status_code == 200

    r = client.get(f"{url}/statistiques", headers=headers["membre"])
    stats = r.json()
    assert stats["montant_realise"] == 350000
    assert stats["ecart"] == -150000
    assert stats["montant_moyen"] == round(350000 / 3, 2)
    assert stats["par_mois"] == [
        {"mois": "2024-09", "nombre": 2, "montant": 200000},
        {"mois": "2024-11", "nombre": 1, "montant": 150000},
    ]

    assert client.delete(f"{url}/{ids[0]}", headers=headers["tresorier"]).status_code == 200
    detail = client.get(f"{rubriques_url}/{rubrique['id']}", headers=headers["membre"]).json()
    assert float(detail["montant_realise"]) == 250000


def test_delete_rubrique_refused_with_realisations(client, seed, headers, db, rubriques_url, rubrique):
    client.post(
        f"{_realisations_url(seed, rubrique['id'])}/",
        json={"date": "2024-10-01", "montant": "5000"},
        headers=headers["tresorier"],
    )
    r = client.delete(f"{rubriques_url}/{rubrique['id']}", headers=headers["tresorier"])
    assert r.status_code == 400
    assert "1 réalisation(s)" in r.json()["detail"]
    assert db.query(RubriqueBudget).count() == 1


def test_budget_statistics_by_type(client, seed, headers, rubriques_url, rubrique):
    client.post(
        f"{_realisations_url(seed, rubrique['id'])}/",
        json={"date": "2024-10-01", "montant": "125000"},
        headers=headers["tresorier"],
    )
    r = client.get(f"{rubriques_url}/statistiques", headers=headers["membre"])
    body = r.json()
    assert body["total_budgete"] == 500000
    assert body["total_realise"] == 125000
    assert body["pourcentage_realisation"] == 25.0
    assert body["par_type_budget"][0]["type_budget_libelle"] == "Dépenses"
    assert body["par_type_budget"][0]["ecart"] == -375000
