"""Tests des réunions, présences, invités et compte-rendu."""
from datetime import date
from io import BytesIO

import pytest
from docx import Document

from app.models import TypeReunion


API = "/api/v1"


@pytest.fixture()
def type_reunion(db, seed):
    type_reunion = TypeReunion(club_id=seed["club_id"], libelle="Réunion statutaire")
    db.add(type_reunion)
    db.commit()
    return type_reunion


@pytest.fixture()
def reunion(client, seed, headers, type_reunion):
    r = client.post(
        f"{API}/clubs/{seed['club_id']}/reunions/complete",
        json={
            "date": "2025-03-05",
            "heure": "19:30:00",
            "type_reunion_id": type_reunion.id,
            "ordres_du_jour": ["Accueil des invités", "  ", "Projet eau potable", "accueil des invités"],
        },
        headers=headers["secretaire"],
    )
    assert r.status_code == 201
    return r.json()


def test_create_reunion_complete_cleans_agenda(reunion):
    assert [o["description"] for o in reunion["ordres_du_jour"]] == ["Accueil des invités", "Projet eau potable"]
    assert reunion["type_reunion_libelle"] == "Réunion statutaire"
    assert reunion["club_nom"] == "Rotary Club Dakar Teranga"


def test_create_reunion_rules(client, seed, headers, type_reunion, reunion):
    url = f"{API}/clubs/{seed['club_id']}/reunions/"
    payload = {"date": "2025-03-05", "heure": "19:30:00", "type_reunion_id": type_reunion.id}

    r = client.post(url, json=payload, headers=headers["secretaire"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Une réunion de ce type existe déjà à cette date et cette heure"

    r = client.post(url, json={**payload, "type_reunion_id": 999}, headers=headers["secretaire"])
    assert r.status_code == 400

    r = client.post(url, json={**payload, "date": "2025-03-12"}, headers=headers["membre"])
    assert r.status_code == 403


def test_update_reunion_complete_merges_or_replaces_agenda(client, seed, headers, type_reunion, reunion):
    url = f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}/complete"
    payload = {"date": "2025-03-05", "heure": "19:30:00", "type_reunion_id": type_reunion.id}

    r = client.put(url, json={**payload, "ordres_du_jour": ["PROJET EAU POTABLE", "Divers"]}, headers=headers["secretaire"])
    assert r.status_code == 200
    assert [o["description"] for o in r.json()["ordres_du_jour"]] == [
        "Accueil des invités", "Projet eau potable", "Divers",
    ]

    r = client.put(
        url,
        json={**payload, "ordres_du_jour": ["Bilan"], "remplacer_ordres_du_jour": True},
        headers=headers["secretaire"],
    )
    assert [o["description"] for o in r.json()["ordres_du_jour"]] == ["Bilan"]


def test_list_reunions_filters_by_date(client, seed, headers, reunion):
    url = f"{API}/clubs/{seed['club_id']}/reunions/"
    assert len(client.get(url, headers=headers["membre"]).json()) == 1

    r = client.get(url, params={"date_debut": "2025-04-01"}, headers=headers["membre"])
    assert r.json() == []


def test_reunion_hidden_from_other_club(client, seed, headers, db, reunion):
    from app.models import Club
    autre = Club(name="Rotary Club Thiès")
    db.add(autre)
    db.commit()

    r = client.get(f"{API}/clubs/{autre.id}/reunions/{reunion['id']}", headers=headers["admin"])
    assert r.status_code == 404

    r = client.get(f"{API}/clubs/{autre.id}/reunions/", headers=headers["membre"])
    assert r.status_code == 403


def test_calendrier_reunions_and_anniversaires(client, seed, headers, db, reunion):
    membre = seed["users"]["membre"]
    membre.date_anniversaire = date(1980, 3, 2)
    db.commit()

    r = client.get(f"{API}/clubs/{seed['club_id']}/reunions/calendrier/3", params={"annee": 2025}, headers=headers["membre"])
    assert r.status_code == 200
    evenements = r.json()
    assert [e["type"] for e in evenements] == ["anniversaire", "reunion"]
    assert evenements[0]["date"].startswith("2025-03-02")
    assert evenements[0]["membre_id"] == membre.id
    assert evenements[1]["date"] == "2025-03-05T19:30:00"

    r = client.get(f"{API}/clubs/{seed['club_id']}/reunions/calendrier/13", headers=headers["membre"])
    assert r.status_code == 400


def test_presences_batch_and_statistics(client, seed, headers, reunion):
    users = seed["users"]
    url = f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}/presences"

    r = client.post(f"{url}/", json={"membre_id": users["membre"].id}, headers=headers["secretaire"])
    assert r.status_code == 201

    r = client.post(f"{url}/", json={"membre_id": users["membre"].id}, headers=headers["secretaire"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Ce membre est déjà marqué présent à cette réunion"

    r = client.post(
        f"{url}/batch",
        json={"membres_ids": [users["membre"].id, users["president"].id, users["tresorier"].id, 999]},
        headers=headers["secretaire"],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["nombre_ajoutes"] == 2
    assert body["membres_deja_presents"] == [users["membre"].id]
    assert body["membres_invalides"] == [999]

    r = client.get(f"{url}/", headers=headers["membre"])
    body = r.json()
    assert len(body["presences"]) == 3
    assert len(body["membres_absents"]) == 2
    assert body["statistiques"]["taux_presence"] == 60.0

    r = client.delete(f"{url}/by-membre/{users['president'].id}", headers=headers["secretaire"])
    assert r.status_code == 200
    r = client.get(f"{url}/statistiques", headers=headers["membre"])
    assert r.json()["nombre_presents"] == 2
    assert r.json()["moyenne_presences_meme_type"] == 2.0


def test_presences_batch_requires_members(client, seed, headers, reunion):
    url = f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}/presences/batch"
    r = client.post(url, json={"membres_ids": []}, headers=headers["secretaire"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Aucun membre spécifié"


def test_invites_batch_skips_duplicates(client, seed, headers, reunion):
    url = f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}/invites"

    r = client.post(
        f"{url}/",
        json={"nom": "Faye", "prenom": "Mariama", "email": "mariama@sonatel.sn", "organisation": "Sonatel"},
        headers=headers["secretaire"],
    )
    assert r.status_code == 201
    assert r.json()["nom_complet"] == "Mariama Faye"

    r = client.post(
        f"{url}/batch",
        json={"invites": [
            {"nom": "FAYE", "prenom": "mariama"},
            {"nom": "Gueye", "prenom": "Cheikh", "email": "mariama@sonatel.sn"},
            {"nom": "Sy", "prenom": "Binta", "organisation": "Ecobank"},
            {"nom": "Sy", "prenom": "Binta"},
        ]},
        headers=headers["secretaire"],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["nombre_crees"] == 1
    assert body["nombre_ignores"] == 3
    assert body["invites"][0]["nom_complet"] == "Binta Sy"

    r = client.get(f"{url}/organisations", headers=headers["membre"])
    assert r.json() == ["Ecobank", "Sonatel"]


def test_delete_reunion_cascades(client, seed, headers, reunion):
    base = f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}"
    client.post(f"{base}/presences/", json={"membre_id": seed["users"]["membre"].id}, headers=headers["secretaire"])
    client.post(f"{base}/invites/", json={"nom": "Kane", "prenom": "Oumar"}, headers=headers["secretaire"])

    assert client.delete(base, headers=headers["secretaire"]).status_code == 200
    assert client.get(base, headers=headers["membre"]).status_code == 404


def test_compte_rendu_docx(client, seed, headers, reunion):
    r = client.post(
        f"{API}/clubs/{seed['club_id']}/reunions/{reunion['id']}/compte-rendu",
        json={
            "presences": [{"nom_complet": "Awa Diop"}, {"nom_complet": "Moussa Ba"}],
            "invites": [{"nom": "Faye", "prenom": "Mariama"}],
            "ordres_du_jour": [
                {"numero": 1, "description": "Accueil des invités", "contenu": "Mot de bienvenue\n\nTour de table"},
                {"numero": 2, "description": "Projet eau potable"},
            ],
            "divers": "Prochaine sortie le 15 mars",
        },
        headers=headers["secretaire"],
    )
    assert r.status_code == 200
    assert r.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert "compte-rendu-R%C3%A9union-statutaire-05-03-2025.docx" in r.headers["content-disposition"]

    doc = Document(BytesIO(r.content))
    textes = [p.text for p in doc.paragraphs]
    assert "COMPTE-RENDU DE RÉUNION" in textes
    assert "Réunion statutaire du 05/03/2025 à 19:30" in textes
    assert "1. Accueil des invités" in textes
    assert "Tour de table" in textes
    assert "(Point non traité ou sans détail)" in textes
    assert "DIVERS" in textes

    table = doc.tables[0]
    assert table.rows[0].cells[0].text == "LISTE DES PRÉSENCES"
    assert table.rows[1].cells[1].text == "Mariama Faye"
    assert table.rows[2].cells[1].text == ""
