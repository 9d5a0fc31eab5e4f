"""Tests des clubs et de leurs référentiels."""
from datetime import date, time

from app.models import Commission, MembreCommission, Reunion, TypeReunion


API = "/api/v1"


def test_list_clubs_is_public(client, seed):
    r = client.get(f"{API}/clubs/")
    assert r.status_code == 200
    assert [c["name"] for c in r.json()] == ["Rotary Club Dakar Teranga"]


def test_create_club_admin_only_and_unique(client, seed, headers):
    payload = {"name": "Rotary Club Saint-Louis", "email": "contact@rotary-stlouis.org"}
    assert client.post(f"{API}/clubs/", json=payload, headers=headers["president"]).status_code == 403

    r = client.post(f"{API}/clubs/", json=payload, headers=headers["admin"])
    assert r.status_code == 201
    assert r.json()["name"] == "Rotary Club Saint-Louis"

    r = client.post(f"{API}/clubs/", json=payload, headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Un club nommé 'Rotary Club Saint-Louis' existe déjà"


def test_delete_club_refused_with_reunions(client, seed, headers, db):
    type_reunion = TypeReunion(club_id=seed["club_id"], libelle="Statutaire")
    db.add(type_reunion)
    db.flush()
    db.add(Reunion(club_id=seed["club_id"], type_reunion_id=type_reunion.id, date=date(2024, 9, 5), heure=time(19)))
    db.commit()

    r = client.delete(f"{API}/clubs/{seed['club_id']}", headers=headers["admin"])
    assert r.status_code == 400


def test_types_reunion_crud(client, seed, headers, db):
    url = f"{API}/clubs/{seed['club_id']}/types-reunion"

    r = client.post(url, json={"libelle": "Statutaire"}, headers=headers["membre"])
    assert r.status_code == 403

    r = client.post(url, json={"libelle": "Statutaire"}, headers=headers["secretaire"])
    assert r.status_code == 201
    type_id = r.json()["id"]

    r = client.post(url, json={"libelle": "statutaire"}, headers=headers["secretaire"])
    assert r.status_code == 400

    r = client.put(f"{url}/{type_id}", json={"libelle": "Assemblée"}, headers=headers["president"])
    assert r.status_code == 200
    assert r.json()["libelle"] == "Assemblée"

    db.add(Reunion(club_id=seed["club_id"], type_reunion_id=type_id, date=date(2024, 9, 5), heure=time(19)))
    db.commit()
    r = client.delete(f"{url}/{type_id}", headers=headers["president"])
    assert r.status_code == 400
    assert "utilisé par 1 réunion(s)" in r.json()["detail"]


def test_commission_delete_refused_with_active_members(client, seed, headers, db):
    url = f"{API}/clubs/{seed['club_id']}/commissions"
    r = client.post(url, json={"nom": "Effectif", "description": "Recrutement"}, headers=headers["president"])
    assert r.status_code == 201
    commission_id = r.json()["id"]

    db.add(MembreCommission(
        commission_id=commission_id,
        membre_id=seed["users"]["membre"].id,
        mandat_id=seed["mandat_id"],
    ))
    db.commit()

    r = client.delete(f"{url}/{commission_id}", headers=headers["president"])
    assert r.status_code == 400
    assert db.query(Commission).count() == 1


def test_postes_comite(client, seed, headers):
    url = f"{API}/clubs/{seed['club_id']}/postes-comite"
    r = client.post(url, json={"nom": "Protocole"}, headers=headers["secretaire"])
    assert r.status_code == 201
    poste_id = r.json()["id"]

    r = client.put(f"{url}/{poste_id}", json={"nom": "Chef du protocole"}, headers=headers["secretaire"])
    assert r.status_code == 200

    r = client.get(url, headers=headers["membre"])
    assert [p["nom"] for p in r.json()] == ["Chef du protocole"]

    assert client.delete(f"{url}/{poste_id}", headers=headers["secretaire"]).status_code == 200


def test_budget_hierarchy(client, seed, headers):
    r = client.post(f"{API}/budget/types", json={"libelle": "Dépenses"}, headers=headers["president"])
    assert r.status_code == 201
    type_id = r.json()["id"]

    r = client.post(
        f"{API}/budget/categories",
        json={"type_budget_id": type_id, "libelle": "Fonctionnement"},
        headers=headers["president"],
    )
    assert r.status_code == 201
    categorie_id = r.json()["id"]

    url = f"{API}/clubs/{seed['club_id']}/sous-categories"
    r = client.post(url, json={"category_budget_id": 999, "libelle": "Salle"}, headers=headers["tresorier"])
    assert r.status_code == 404
    assert r.json()["detail"] == "Catégorie de budget non trouvée"

    r = client.post(url, json={"category_budget_id": categorie_id, "libelle": "Salle"}, headers=headers["tresorier"])
    assert r.status_code == 201

    r = client.delete(f"{API}/budget/types/{type_id}", headers=headers["president"])
    assert r.status_code == 400

    r = client.get(f"{API}/budget/categories", params={"type_budget_id": type_id}, headers=headers["membre"])
    assert [c["libelle"] for c in r.json()] == ["Fonctionnement"]
