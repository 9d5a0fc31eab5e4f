"""Tests des commissions, du comité et des passations de mandat."""
import pytest

from app.models import Club, Commission, Mandat, MembreComite, PosteComite


API = "/api/v1"


@pytest.fixture()
def commission(db, seed):
    commission = Commission(club_id=seed["club_id"], nom="Action professionnelle")
    db.add(commission)
    db.commit()
    return commission


@pytest.fixture()
def poste(db, seed):
    poste = PosteComite(club_id=seed["club_id"], nom="Protocole")
    db.add(poste)
    db.commit()
    return poste


def _affecter(client, seed, headers, commission, nom, est_responsable=False):
    return client.post(
        f"{API}/clubs/{seed['club_id']}/commissions/{commission.id}/membres/",
        json={
            "membre_id": seed["users"][nom].id,
            "mandat_id": seed["mandat_id"],
            "est_responsable": est_responsable,
        },
        headers=headers["president"],
    )


def test_commission_single_active_responsable(client, seed, headers, commission):
    r = _affecter(client, seed, headers, commission, "membre", est_responsable=True)
    assert r.status_code == 201
    assert r.json()["mandat_annee"] == 2024

    r = _affecter(client, seed, headers, commission, "membre")
    assert r.status_code == 400
    assert r.json()["detail"] == "Ce membre fait déjà partie de cette commission pour ce mandat"

    r = _affecter(client, seed, headers, commission, "tresorier", est_responsable=True)
    assert r.status_code == 400
    assert r.json()["detail"] == "Cette commission a déjà un responsable actif pour ce mandat"

    r = _affecter(client, seed, headers, commission, "tresorier")
    assert r.status_code == 201


def test_commission_members_listing_and_disponibles(client, seed, headers, commission):
    _affecter(client, seed, headers, commission, "tresorier")
    _affecter(client, seed, headers, commission, "membre", est_responsable=True)
    url = f"{API}/clubs/{seed['club_id']}/commissions/{commission.id}/membres"

    r = client.get(f"{url}/", headers=headers["membre"])
    body = r.json()
    assert body["membres"][0]["membre_id"] == seed["users"]["membre"].id
    assert body["statistiques"]["nombre_responsables"] == 1

    r = client.get(f"{url}/disponibles", headers=headers["membre"])
    assert len(r.json()) == 3


def test_deactivating_affectation_clears_responsable(client, seed, headers, commission):
    affectation = _affecter(client, seed, headers, commission, "membre", est_responsable=True).json()
    url = f"{API}/clubs/{seed['club_id']}/commissions/{commission.id}/membres/{affectation['id']}"

    r = client.put(url, json={"est_actif": False}, headers=headers["president"])
    assert r.status_code == 200
    body = r.json()
    assert body["est_actif"] is False
    assert body["est_responsable"] is False
    assert body["date_demission"] is not None

    r = client.put(url, json={"est_responsable": True}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Un membre inactif ne peut pas être responsable"


def test_membres_club_and_fonctions(client, seed, headers, db, commission, poste):
    db.add(MembreComite(
        poste_comite_id=poste.id,
        membre_id=seed["users"]["secretaire"].id,
        mandat_id=seed["mandat_id"],
        club_id=seed["club_id"],
    ))
    db.commit()
    _affecter(client, seed, headers, commission, "membre")

    r = client.get(f"{API}/clubs/{seed['club_id']}/membres/fonctions-commissions", headers=headers["membre"])
    assert r.status_code == 200
    body = r.json()
    assert body["mandat_actuel"]["annee"] == 2024
    assert body["statistiques"] == {
        "nombre_membres": 5,
        "avec_fonction": 1,
        "avec_commission": 1,
        "sans_affectation": 3,
    }

    r = client.get(f"{API}/clubs/{seed['club_id']}/membres/{seed['users']['membre'].id}", headers=headers["membre"])
    assert [c["nom_commission"] for c in r.json()["commissions_actuelles"]] == ["Action professionnelle"]


def _nouveau_mandat(client, seed, headers, annee=2025, **champs):
    payload = {
        "club_id": seed["club_id"],
        "annee": annee,
        "date_debut": f"{annee}-07-01",
        "date_fin": f"{annee + 1}-06-30",
        "description": f"Mandat {annee}-{annee + 1}",
        "montant_cotisation": 500000,
    }
    payload.update(champs)
    return client.post(f"{API}/transitions/mandats/nouveau", json=payload, headers=headers["president"])


def test_nouveau_mandat_replaces_current(client, seed, headers, db):
    r = _nouveau_mandat(client, seed, headers)
    assert r.status_code == 201
    nouveau = r.json()
    assert nouveau["est_actuel"] is True

    db.expire_all()
    assert db.get(Mandat, seed["mandat_id"]).est_actuel is False

    r = client.get(f"{API}/transitions/club/{seed['club_id']}/mandat-actuel", headers=headers["membre"])
    assert r.json()["id"] == nouveau["id"]

    r = client.get(f"{API}/transitions/club/{seed['club_id']}/historique-mandats", headers=headers["membre"])
    assert [m["annee"] for m in r.json()] == [2025, 2024]


def test_nouveau_mandat_rules(client, seed, headers):
    r = _nouveau_mandat(client, seed, headers, annee=2024)
    assert r.status_code == 400
    assert r.json()["detail"] == "Un mandat existe déjà pour l'année 2024 dans ce club"

    r = _nouveau_mandat(client, seed, headers, date_fin="2025-01-01", date_debut="2025-07-01")
    assert r.status_code == 422

    r = client.post(
        f"{API}/transitions/mandats/nouveau",
        json={"club_id": seed["club_id"], "annee": 2026, "date_debut": "2026-07-01", "date_fin": "2027-06-30"},
        headers=headers["tresorier"],
    )
    assert r.status_code == 403


def test_mandat_non_actuel_then_activer(client, seed, headers, db):
    r = _nouveau_mandat(client, seed, headers, est_actuel=False)
    futur = r.json()
    assert futur["est_actuel"] is False

    r = client.get(f"{API}/transitions/club/{seed['club_id']}/mandat-actuel", headers=headers["membre"])
    assert r.json()["id"] == seed["mandat_id"]

    r = client.post(f"{API}/transitions/mandats/{futur['id']}/activer", headers=headers["secretaire"])
    assert r.status_code == 200
    assert r.json()["est_actuel"] is True

    db.expire_all()
    assert db.query(Mandat).filter_by(est_actuel=True).count() == 1


def test_mandat_actuel_absent(client, seed, headers, db):
    autre = Club(name="Rotary Club Ziguinchor")
    db.add(autre)
    db.commit()
    r = client.get(f"{API}/transitions/club/{autre.id}/mandat-actuel", headers=headers["admin"])
    assert r.status_code == 404
    assert r.json()["detail"] == "Aucun mandat actuel trouvé pour ce club"


def test_comite_nomination_replaces_holder(client, seed, headers, poste):
    url = f"{API}/transitions/comite"
    payload = {"poste_comite_id": poste.id, "mandat_id": seed["mandat_id"]}

    r = client.post(f"{url}/nommer", json={**payload, "membre_id": seed["users"]["membre"].id}, headers=headers["president"])
    assert r.status_code == 201
    premier = r.json()
    assert premier["poste_nom"] == "Protocole"

    r = client.post(f"{url}/nommer", json={**payload, "membre_id": seed["users"]["membre"].id}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Ce membre occupe déjà ce poste pour ce mandat"

    r = client.post(f"{url}/nommer", json={**payload, "membre_id": seed["users"]["tresorier"].id}, headers=headers["president"])
    assert r.status_code == 201
    second = r.json()

    r = client.get(f"{url}/{premier['id']}", headers=headers["membre"])
    ancien = r.json()
    assert ancien["est_actif"] is False
    assert ancien["date_demission"] is not None
    assert ancien["commentaires"] == "Remplacé par une nouvelle nomination"

    r = client.post(f"{url}/{second['id']}/demissionner", json={"commentaires": "Départ à l'étranger"}, headers=headers["president"])
    assert r.status_code == 200
    assert r.json()["est_actif"] is False

    r = client.post(f"{url}/{second['id']}/demissionner", json={}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Cette nomination n'est plus active"


def test_comite_demission_appends_comment(client, seed, headers, poste):
    r = client.post(
        f"{API}/transitions/comite/nommer",
        json={
            "poste_comite_id": poste.id,
            "mandat_id": seed["mandat_id"],
            "membre_id": seed["users"]["membre"].id,
            "commentaires": "Nommé en assemblée",
        },
        headers=headers["president"],
    )
    nomination_id = r.json()["id"]

    r = client.post(
        f"{API}/transitions/comite/{nomination_id}/demissionner",
        json={"commentaires": "Raisons personnelles"},
        headers=headers["president"],
    )
    assert r.json()["commentaires"] == "Nommé en assemblée | Raisons personnelles"


def test_comite_nomination_outside_club_refused(client, seed, headers, db, poste):
    externe = Club(name="Rotary Club Kaolack")
    db.add(externe)
    db.commit()
    poste_externe = PosteComite(club_id=externe.id, nom="Trésorier")
    db.add(poste_externe)
    db.commit()

    r = client.post(
        f"{API}/transitions/comite/nommer",
        json={"poste_comite_id": poste_externe.id, "mandat_id": seed["mandat_id"], "membre_id": seed["users"]["membre"].id},
        headers=headers["president"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Le poste n'appartient pas au club du mandat"

    from tests.conftest import creer_utilisateur
    etranger = creer_utilisateur(db, "etranger@rotary-kaolack.org")
    r = client.post(
        f"{API}/transitions/comite/nommer",
        json={"poste_comite_id": poste.id, "mandat_id": seed["mandat_id"], "membre_id": etranger.id},
        headers=headers["president"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Le membre n'appartient pas au club du mandat"


def test_commission_nomination_transfers_responsable(client, seed, headers, commission):
    url = f"{API}/transitions/commission"
    payload = {"commission_id": commission.id, "mandat_id": seed["mandat_id"]}

    r = client.post(f"{url}/nommer", json={**payload, "membre_id": seed["users"]["membre"].id, "est_responsable": True}, headers=headers["president"])
    assert r.status_code == 201
    ancien = r.json()

    r = client.post(f"{url}/nommer", json={**payload, "membre_id": seed["users"]["tresorier"].id, "est_responsable": True}, headers=headers["president"])
    assert r.status_code == 201
    nouveau = r.json()
    assert nouveau["est_responsable"] is True

    r = client.get(f"{url}/{ancien['id']}", headers=headers["membre"])
    assert r.json()["est_responsable"] is False
    assert r.json()["est_actif"] is True

    r = client.post(f"{url}/{ancien['id']}/responsable", headers=headers["president"])
    assert r.status_code == 200
    assert client.get(f"{url}/{nouveau['id']}", headers=headers["membre"]).json()["est_responsable"] is False

    r = client.post(f"{url}/{ancien['id']}/responsable", headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Ce membre est déjà responsable de cette commission"


def test_commission_demission(client, seed, headers, commission):
    url = f"{API}/transitions/commission"
    r = client.post(
        f"{url}/nommer",
        json={"commission_id": commission.id, "mandat_id": seed["mandat_id"], "membre_id": seed["users"]["membre"].id, "est_responsable": True},
        headers=headers["president"],
    )
    affectation_id = r.json()["id"]

    r = client.post(f"{url}/{affectation_id}/demissionner", json={}, headers=headers["president"])
    body = r.json()
    assert body["est_actif"] is False
    assert body["est_responsable"] is False

    r = client.post(f"{url}/{affectation_id}/responsable", headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Cette affectation n'est plus active"

    r = client.post(f"{url}/{affectation_id}/demissionner", json={}, headers=headers["membre"])
    assert r.status_code == 403
