"""Tests des cotisations, des paiements et des situations financières."""
from app.models import Cotisation, PaiementCotisation, UserClub

from tests.conftest import creer_utilisateur


API = "/api/v1"


def _cotisation(seed, nom="membre", montant=480000):
    return {"membre_id": seed["users"][nom].id, "mandat_id": seed["mandat_id"], "montant": montant}


def test_create_cotisation_and_duplicate_rejected(client, seed, headers, db):
    r = client.post(f"{API}/cotisations/", json=_cotisation(seed), headers=headers["tresorier"])
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Cotisation créée avec succès"
    assert body["data"]["mandat_annee"] == 2024
    assert body["data"]["club_id"] == seed["club_id"]

    r = client.post(f"{API}/cotisations/", json=_cotisation(seed, montant=100), headers=headers["tresorier"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Une cotisation existe déjà pour ce membre et ce mandat."
    assert db.query(Cotisation).count() == 1


def test_create_cotisation_requires_finance_role(client, seed, headers):
    r = client.post(f"{API}/cotisations/", json=_cotisation(seed), headers=headers["membre"])
    assert r.status_code == 403


def test_update_cannot_create_duplicate(client, seed, headers):
    client.post(f"{API}/cotisations/", json=_cotisation(seed, "membre"), headers=headers["admin"])
    r = client.post(f"{API}/cotisations/", json=_cotisation(seed, "president"), headers=headers["admin"])
    cotisation_id = r.json()["data"]["id"]

    r = client.put(
        f"{API}/cotisations/{cotisation_id}",
        json={"membre_id": seed["users"]["membre"].id},
        headers=headers["admin"],
    )
    assert r.status_code == 400

    r = client.put(f"{API}/cotisations/{cotisation_id}", json={"montant": 240000}, headers=headers["admin"])
    assert r.status_code == 200
    assert r.json()["data"]["montant"] == 240000


def test_bulk_create_skips_existing_members(client, seed, headers, db):
    client.post(f"{API}/cotisations/", json=_cotisation(seed, "membre", 100000), headers=headers["admin"])
    inactif = creer_utilisateur(db, "inactif@rotary-dakar.org", club=seed["club"])
    inactif.is_active = False
    db.commit()

    r = client.post(
        f"{API}/cotisations/bulk-create",
        json={"mandat_id": seed["mandat_id"]},
        headers=headers["admin"],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["cotisations_creees"] == 4
    assert body["membres_ignores"] == 1
    ignore = body["membres_ignores_details"][0]
    assert ignore["id"] == seed["users"]["membre"].id
    assert ignore["reason"] == "Cotisation déjà existante"
    assert body["mandat_info"]["annee"] == 2024
    assert body["message"] == "4 cotisation(s) créée(s), 1 membre(s) ignoré(s)"

    montants = {c.membre_id: c.montant for c in db.query(Cotisation).all()}
    assert montants[seed["users"]["membre"].id] == 100000
    assert montants[seed["users"]["president"].id] == 480000
    assert inactif.id not in montants


def test_bulk_create_unknown_mandat_or_empty_club(client, seed, headers, db):
    r = client.post(f"{API}/cotisations/bulk-create", json={"mandat_id": 999}, headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Le mandat spécifié n'existe pas."

    db.query(UserClub).delete()
    db.commit()
    r = client.post(f"{API}/cotisations/bulk-create", json={"mandat_id": seed["mandat_id"]}, headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Aucun membre actif trouvé dans ce club."


def test_statistics(client, seed, headers):
    client.post(f"{API}/cotisations/", json=_cotisation(seed, "membre", 400000), headers=headers["admin"])
    client.post(f"{API}/cotisations/", json=_cotisation(seed, "president", 600000), headers=headers["admin"])

    r = client.get(f"{API}/cotisations/statistics", headers=headers["tresorier"])
    assert r.status_code == 200
    body = r.json()
    assert body["total_general"] == 1000000
    assert body["nombre_total_cotisations"] == 2
    stats = body["statistiques_par_mandat"][0]
    assert stats["montant_min"] == 400000
    assert stats["montant_max"] == 600000
    assert stats["montant_moyen"] == 500000


def test_situation_membres_club_statuts(client, seed, headers, db):
    users = seed["users"]
    for nom in ("membre", "president", "tresorier"):
        db.add(Cotisation(membre_id=users[nom].id, mandat_id=seed["mandat_id"], montant=480000))
    db.add(PaiementCotisation(membre_id=users["membre"].id, club_id=seed["club_id"], montant=480000))
    db.add(PaiementCotisation(membre_id=users["president"].id, club_id=seed["club_id"], montant=200000))
    db.commit()

    r = client.get(f"{API}/cotisations/situation/club/{seed['club_id']}/membres", headers=headers["membre"])
    assert r.status_code == 200
    body = r.json()
    statuts = {m["membre_id"]: m["statut"] for m in body["membres"]}
    assert statuts[users["membre"].id] == "À jour"
    assert statuts[users["president"].id] == "Partiellement payé"
    assert statuts[users["tresorier"].id] == "En retard"
    assert statuts[users["admin"].id] == "Aucune cotisation"
    assert body["statistiques"]["solde_global"] == 3 * 480000 - 680000


def test_situation_membre_restricted_to_self(client, seed, headers):
    autre_id = seed["users"]["president"].id
    r = client.get(f"{API}/cotisations/situation/membre/{autre_id}", headers=headers["membre"])
    assert r.status_code == 403

    membre_id = seed["users"]["membre"].id
    r = client.get(f"{API}/cotisations/situation/membre/{membre_id}", headers=headers["membre"])
    assert r.status_code == 200
    assert r.json()["resume"]["solde"] == 0


def test_paiement_member_must_belong_to_club(client, seed, headers, db):
    externe = creer_utilisateur(db, "externe@rotary-thies.org")
    r = client.post(
        f"{API}/paiements-cotisation/",
        json={"membre_id": externe.id, "club_id": seed["club_id"], "montant": 10000},
        headers=headers["tresorier"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Le membre n'appartient pas à ce club"


def test_paiement_lifecycle_and_member_statistics(client, seed, headers):
    membre_id = seed["users"]["membre"].id
    ids = []
    for montant in (100000, 50000):
        r = client.post(
            f"{API}/paiements-cotisation/",
            json={"membre_id": membre_id, "club_id": seed["club_id"], "montant": montant},
            headers=headers["tresorier"],
        )
        assert r.status_code == 201
        ids.append(r.json()["id"])

    r = client.put(f"{API}/paiements-cotisation/{ids[1]}", json={"montant": 80000}, headers=headers["tresorier"])
    assert r.status_code == 200
    assert r.json()["montant"] == 80000

    r = client.get(f"{API}/paiements-cotisation/membre/{membre_id}", headers=headers["membre"])
    assert r.status_code == 200
    assert len(r.json()) == 2

    r = client.delete(f"{API}/paiements-cotisation/{ids[0]}", headers=headers["membre"])
    assert r.status_code == 403
    assert client.delete(f"{API}/paiements-cotisation/{ids[0]}", headers=headers["tresorier"]).status_code == 200
