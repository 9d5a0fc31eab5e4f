"""Tests des galas : tables, invités, import Excel, ventes et tirage de la tombola."""
from io import BytesIO

import pytest
from openpyxl import Workbook

from app.models import GalaInvites


API = "/api/v1"


def _payload(**champs):
    payload = {
        "libelle": "Gala de la Paix",
        "date": "2025-03-15",
        "lieu": "King Fahd Palace",
        "nombre_tables": 3,
        "nombre_souches_tickets": 4,
        "quantite_par_souche_tickets": 25,
        "nombre_souches_tombola": 2,
        "quantite_par_souche_tombola": 50,
    }
    payload.update(champs)
    return payload


@pytest.fixture()
def gala(client, headers):
    r = client.post(f"{API}/galas/", json=_payload(), headers=headers["president"])
    assert r.status_code == 201
    return r.json()


def _classeur(*valeurs) -> bytes:
    wb = Workbook()
    ws = wb.active
    for valeur in valeurs:
        ws.append([valeur])
    sortie = BytesIO()
    wb.save(sortie)
    return sortie.getvalue()


def test_create_gala_builds_tables(gala):
    assert gala["date"].startswith("2025-03-15T19:00")
    assert [t["table_libelle"] for t in gala["tables"]] == ["Table 1", "Table 2", "Table 3"]
    assert gala["total_tickets_disponibles"] == 100
    assert gala["total_tombola_disponibles"] == 100


def test_create_gala_validation(client, seed, headers, gala):
    r = client.post(f"{API}/galas/", json=_payload(), headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Un gala avec le libellé 'Gala de la Paix' existe déjà à cette date"

    r = client.post(f"{API}/galas/", json=_payload(date="15/03/2025"), headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Format de date invalide. Utilisez le format YYYY-MM-DD"

    r = client.post(f"{API}/galas/", json=_payload(nombre_tables=101), headers=headers["president"])
    assert r.status_code == 422

    r = client.post(f"{API}/galas/", json=_payload(libelle="Autre"), headers=headers["membre"])
    assert r.status_code == 403


@pytest.mark.parametrize("saisie", ["2025-12-20T19:00:00Z", "2025-12-20T21:30:00+00:00", "2025-12-20"])
def test_create_gala_accepts_iso_dates(client, headers, saisie):
    r = client.post(
        f"{API}/galas/",
        json=_payload(libelle="Gala de Noël", date=saisie),
        headers=headers["president"],
    )
    assert r.status_code == 201
    assert r.json()["date"].startswith("2025-12-20T19:00")


def test_update_gala_adds_missing_tables(client, headers, gala):
    r = client.put(f"{API}/galas/{gala['id']}", json={"nombre_tables": 5}, headers=headers["president"])
    assert r.status_code == 200
    body = r.json()
    assert body["nombre_tables"] == 5
    assert body["tables"][-1]["table_libelle"] == "Table 5"


def test_delete_gala_refused_with_associated_data(client, headers, gala):
    client.post(
        f"{API}/gala-invites/",
        json={"gala_id": gala["id"], "nom_prenom": "Fatou Sow"},
        headers=headers["president"],
    )
    r = client.delete(f"{API}/galas/{gala['id']}", headers=headers["president"])
    assert r.status_code == 400
    assert "(1 invité(s), 0 ticket(s), 0 tombola(s))" in r.json()["detail"]

    r = client.post(f"{API}/galas/", json=_payload(libelle="Gala vide"), headers=headers["president"])
    vide_id = r.json()["id"]
    r = client.delete(f"{API}/galas/{vide_id}", headers=headers["president"])
    assert r.status_code == 200
    assert client.get(f"{API}/galas/{vide_id}", headers=headers["membre"]).status_code == 404


def test_invites_unique_name_and_table_assignment(client, headers, gala):
    url = f"{API}/gala-invites"
    r = client.post(f"{url}/", json={"gala_id": gala["id"], "nom_prenom": "  Moussa Ba "}, headers=headers["president"])
    assert r.status_code == 201
    invite = r.json()
    assert invite["nom_prenom"] == "Moussa Ba"
    assert invite["table_id"] is None

    r = client.post(f"{url}/", json={"gala_id": gala["id"], "nom_prenom": "moussa ba"}, headers=headers["president"])
    assert r.status_code == 400

    table_1, table_2 = gala["tables"][0], gala["tables"][1]
    r = client.post(f"{url}/{invite['id']}/affecter-table", json={"table_id": table_1["id"]}, headers=headers["president"])
    assert r.status_code == 200
    assert r.json()["table_libelle"] == "Table 1"

    r = client.post(f"{url}/{invite['id']}/affecter-table", json={"table_id": table_2["id"]}, headers=headers["president"])
    assert r.json()["table_libelle"] == "Table 2"

    r = client.get(f"{url}/gala/{gala['id']}", params={"table_id": table_2["id"]}, headers=headers["membre"])
    assert [i["nom_prenom"] for i in r.json()] == ["Moussa Ba"]

    r = client.delete(f"{url}/{invite['id']}/retirer-table", headers=headers["president"])
    assert r.status_code == 200
    assert r.json()["table_id"] is None

    r = client.get(f"{url}/gala/{gala['id']}/sans-table", headers=headers["membre"])
    assert len(r.json()) == 1

    r = client.delete(f"{url}/{invite['id']}/retirer-table", headers=headers["president"])
    assert r.status_code == 400


def test_table_from_another_gala_refused(client, headers, gala):
    autre = client.post(f"{API}/galas/", json=_payload(libelle="Gala Jeunesse"), headers=headers["president"]).json()
    invite = client.post(
        f"{API}/gala-invites/",
        json={"gala_id": gala["id"], "nom_prenom": "Aminata Fall"},
        headers=headers["president"],
    ).json()

    r = client.post(
        f"{API}/gala-invites/{invite['id']}/affecter-table",
        json={"table_id": autre["tables"][0]["id"]},
        headers=headers["president"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "La table n'appartient pas au gala de cet invité"


def test_import_excel_invites(client, headers, gala, db):
    db.add(GalaInvites(gala_id=gala["id"], nom_prenom="Awa Ndiaye"))
    db.commit()

    contenu = _classeur("Ibrahima Sarr", None, "  ", "awa ndiaye", "Khady Diouf", "x" * 201, "Ibrahima Sarr")
    r = client.post(
        f"{API}/gala-invites/import-excel-file",
        data={"gala_id": str(gala["id"])},
        files={"file": ("invites.xlsx", contenu, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        headers=headers["president"],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["est_succes"] is True
    assert body["nombre_invites_crees"] == 2
    assert body["nombre_doublons"] == 2
    assert body["nombre_erreurs"] == 1
    assert len(body["erreurs"]) == 3

    noms = sorted(n for (n,) in db.query(GalaInvites.nom_prenom).all())
    assert noms == ["Awa Ndiaye", "Ibrahima Sarr", "Khady Diouf"]


def test_import_excel_rejects_bad_files(client, headers, gala):
    url = f"{API}/gala-invites/import-excel-file"

    r = client.post(
        url,
        data={"gala_id": str(gala["id"])},
        files={"file": ("invites.csv", b"Awa Ndiaye\n", "text/csv")},
        headers=headers["president"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Seuls les fichiers Excel (.xlsx) sont acceptés"

    r = client.post(
        url,
        data={"gala_id": str(gala["id"])},
        files={"file": ("invites.xlsx", b"pas un classeur", "application/octet-stream")},
        headers=headers["president"],
    )
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Fichier Excel illisible")

    r = client.post(url, data={"gala_id": "999"}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Gala avec l'ID 999 introuvable"


def test_ticket_sales_rules(client, seed, headers, gala):
    url = f"{API}/gala-tickets"
    membre_id = seed["users"]["membre"].id

    r = client.post(f"{url}/", json={"gala_id": gala["id"], "quantite": 2}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Soit l'ID du membre soit le nom externe doit être renseigné"

    r = client.post(f"{url}/", json={"gala_id": gala["id"], "membre_id": membre_id, "quantite": 10}, headers=headers["president"])
    assert r.status_code == 201
    vente = r.json()
    assert vente["participant_nom"] == "Membre Diop"
    assert vente["membre_email"] == "membre@rotary-dakar.org"

    r = client.post(f"{url}/", json={"gala_id": gala["id"], "membre_id": membre_id, "quantite": 1}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Une vente de ticket existe déjà pour ce membre dans ce gala")

    r = client.put(f"{url}/{vente['id']}", json={"quantite": 12}, headers=headers["president"])
    assert r.status_code == 200
    assert r.json()["quantite"] == 12


def test_ticket_statistics_and_top_vendeurs(client, seed, headers, gala):
    url = f"{API}/gala-tickets"
    users = seed["users"]
    r = client.post(
        f"{url}/bulk-create",
        json={"ventes": [
            {"gala_id": gala["id"], "membre_id": users["membre"].id, "quantite": 30},
            {"gala_id": gala["id"], "membre_id": users["president"].id, "quantite": 10},
            {"gala_id": gala["id"], "externe": "Entreprise Sonatel", "quantite": 20},
            {"gala_id": gala["id"], "quantite": 5},
        ]},
        headers=headers["president"],
    )
    assert r.status_code == 200
    body = r.json()
    assert len(body["creees"]) == 3
    assert body["erreurs"] == ["Vente 4: Soit l'ID du membre soit le nom externe doit être renseigné"]

    r = client.get(f"{url}/gala/{gala['id']}/statistiques", headers=headers["membre"])
    stats = r.json()
    assert stats["total_disponible"] == 100
    assert stats["total_vendu"] == 60
    assert stats["total_restant"] == 40
    assert stats["pourcentage_vendu"] == 60.0
    assert stats["nombre_membres"] == 2
    assert stats["nombre_externes"] == 1
    assert stats["moyenne_par_participant"] == 20.0

    r = client.get(f"{url}/gala/{gala['id']}/top-vendeurs", params={"limit": 2}, headers=headers["membre"])
    top = r.json()
    assert [(t["rang"], t["quantite"]) for t in top] == [(1, 30), (2, 20)]
    assert top[1]["externe"] == "Entreprise Sonatel"
    assert top[0]["pourcentage"] == 50.0

    r = client.get(f"{url}/gala/{gala['id']}", params={"recherche": "sonatel"}, headers=headers["membre"])
    assert [v["externe"] for v in r.json()] == ["Entreprise Sonatel"]


def test_tirage_tombola_distinct_and_bounded(client, seed, headers, gala):
    url = f"{API}/gala-tombolas"
    client.post(f"{url}/", json={"gala_id": gala["id"], "membre_id": seed["users"]["membre"].id, "quantite": 2}, headers=headers["president"])
    client.post(f"{url}/", json={"gala_id": gala["id"], "externe": "Ousmane Kane", "quantite": 1}, headers=headers["president"])

    r = client.get(f"{url}/gala/{gala['id']}/tirage-gagnants", params={"nombre_gagnants": 10}, headers=headers["president"])
    assert r.status_code == 200
    body = r.json()
    assert body["nombre_gagnants_demandes"] == 10
    assert body["nombre_tickets_total"] == 3
    numeros = [g["numero_ticket_gagnant"] for g in body["gagnants"]]
    assert sorted(numeros) == [1, 2, 3]
    assert [g["position"] for g in body["gagnants"]] == [1, 2, 3]


def test_tirage_tombola_errors(client, headers, gala):
    url = f"{API}/gala-tombolas/gala/{gala['id']}/tirage-gagnants"

    r = client.get(url, params={"nombre_gagnants": 0}, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Le nombre de gagnants doit être supérieur à 0"

    r = client.get(url, headers=headers["president"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Aucune tombola trouvée pour ce gala"

    assert client.get(url, headers=headers["membre"]).status_code == 403


def test_galas_statistics(client, seed, headers, gala):
    client.post(f"{API}/gala-tickets/", json={"gala_id": gala["id"], "externe": "Orange", "quantite": 4}, headers=headers["president"])
    r = client.get(f"{API}/galas/statistiques", headers=headers["membre"])
    assert r.status_code == 200
    body = r.json()
    assert body["nombre_galas"] == 1
    assert body["total_tables"] == 3
    assert body["total_tickets_vendus"] == 4
