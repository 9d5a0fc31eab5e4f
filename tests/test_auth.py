"""Tests de l'authentification et de la gestion des membres."""
from app.models import UserClub

from tests.conftest import MOT_DE_PASSE, bearer, creer_utilisateur


API = "/api/v1/auth"


def test_register_member_requires_existing_club(client, seed):
    payload = {
        "email": "nouveau@rotary-dakar.org",
        "first_name": "Awa",
        "last_name": "Ndiaye",
        "password": "motdepasse",
    }
    r = client.post(f"{API}/register", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"] == "Un club valide doit être spécifié lors de l'enregistrement."

    r = client.post(f"{API}/register", json={**payload, "club_id": 999})
    assert r.status_code == 400
    assert r.json()["detail"] == "Le club spécifié n'existe pas."

    r = client.post(f"{API}/register", json={**payload, "club_id": seed["club_id"]})
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["role"] == "membre"
    assert body["club_id"] == seed["club_id"]
    assert body["access_token"]


def test_register_duplicate_email(client, seed):
    payload = {
        "email": "membre@rotary-dakar.org",
        "first_name": "Awa",
        "last_name": "Ndiaye",
        "password": "motdepasse",
        "club_id": seed["club_id"],
    }
    r = client.post(f"{API}/register", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"] == "Un utilisateur avec cet email existe déjà."


def test_login_success_and_wrong_club(client, seed, db):
    r = client.post(f"{API}/login", json={
        "email": "membre@rotary-dakar.org",
        "password": MOT_DE_PASSE,
        "club_id": seed["club_id"],
    })
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "membre@rotary-dakar.org"

    r = client.post(f"{API}/login", json={
        "email": "membre@rotary-dakar.org",
        "password": "mauvais",
        "club_id": seed["club_id"],
    })
    assert r.status_code == 401

    from app.models import Club
    autre = Club(name="Rotary Club Saint-Louis")
    db.add(autre)
    db.commit()
    r = client.post(f"{API}/login", json={
        "email": "membre@rotary-dakar.org",
        "password": MOT_DE_PASSE,
        "club_id": autre.id,
    })
    assert r.status_code == 401


def test_login_inactive_account(client, seed, db):
    membre = seed["users"]["membre"]
    membre.is_active = False
    db.commit()
    r = client.post(f"{API}/login", json={
        "email": membre.email,
        "password": MOT_DE_PASSE,
        "club_id": seed["club_id"],
    })
    assert r.status_code == 403


def test_refresh_then_revoke(client, seed):
    r = client.post(f"{API}/login", json={
        "email": "tresorier@rotary-dakar.org",
        "password": MOT_DE_PASSE,
        "club_id": seed["club_id"],
    })
    tokens = r.json()

    r = client.post(f"{API}/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200

    auth = {"Authorization": f"Bearer {tokens['access_token']}"}
    assert client.post(f"{API}/revoke-token", headers=auth).status_code == 200

    r = client.post(f"{API}/refresh-token", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 401
    assert r.json()["detail"] == "Refresh token révoqué"


def test_me_lists_clubs(client, seed, headers):
    r = client.get(f"{API}/me", headers=headers["secretaire"])
    assert r.status_code == 200
    assert [c["club_id"] for c in r.json()["clubs"]] == [seed["club_id"]]


def test_register_initial_admin_only_once(client, db):
    payload = {
        "email": "premier@rotary-dakar.org",
        "first_name": "Premier",
        "last_name": "Admin",
        "password": "motdepasse",
    }
    r = client.post(f"{API}/register-initial-admin", json=payload)
    assert r.status_code == 201
    assert r.json()["user"]["role"] == "admin"

    r = client.post(f"{API}/register-initial-admin", json={**payload, "email": "second@rotary-dakar.org"})
    assert r.status_code == 400


def test_register_admin_requires_admin(client, seed, headers):
    payload = {
        "email": "admin2@rotary-dakar.org",
        "first_name": "Second",
        "last_name": "Admin",
        "password": "motdepasse",
        "club_id": seed["club_id"],
    }
    assert client.post(f"{API}/register-admin", json=payload, headers=headers["president"]).status_code == 403
    assert client.post(f"{API}/register-admin", json=payload, headers=headers["admin"]).status_code == 201


def test_club_stats(client, seed, headers):
    r = client.get(f"{API}/club/{seed['club_id']}/stats", headers=headers["membre"])
    assert r.status_code == 200
    stats = r.json()["stats"]
    assert stats["total_members"] == 5
    assert stats["active_members"] == 5
    assert stats["recent_joins_30_days"] == 5


def test_club_access_denied_for_outsider(client, seed, db):
    externe = creer_utilisateur(db, "externe@rotary-thies.org")
    r = client.get(f"{API}/club/{seed['club_id']}/members", headers=bearer(externe))
    assert r.status_code == 403


def test_promote_to_admin_is_idempotent(client, seed, headers):
    membre_id = seed["users"]["membre"].id
    r = client.post(f"{API}/promote-to-admin/{membre_id}", headers=headers["admin"])
    assert r.status_code == 200
    assert "promu" in r.json()["message"]

    r = client.post(f"{API}/promote-to-admin/{membre_id}", headers=headers["admin"])
    assert r.status_code == 200
    assert "déjà Admin" in r.json()["message"]


def test_last_admin_cannot_be_removed(client, seed, headers, db):
    club_id = seed["club_id"]
    admin = seed["users"]["admin"]

    r = client.delete(f"{API}/club/{club_id}/member/{admin.id}", headers=headers["admin"])
    assert r.status_code == 400
    assert r.json()["detail"] == "Impossible de supprimer le dernier administrateur du club"
    assert db.query(UserClub).filter_by(club_id=club_id, user_id=admin.id).count() == 1


def test_admin_removable_when_another_admin_remains(client, seed, headers, db):
    club_id = seed["club_id"]
    creer_utilisateur(db, "admin2@rotary-dakar.org", role="admin", club=seed["club"])
    admin = seed["users"]["admin"]

    r = client.delete(f"{API}/club/{club_id}/member/{admin.id}", headers=headers["admin"])
    assert r.status_code == 200
    assert r.json()["removed_member"]["user_id"] == admin.id


def test_admin_cannot_deactivate_self(client, seed, headers):
    admin_id = seed["users"]["admin"].id
    r = client.patch(f"{API}/user/{admin_id}/deactivate", headers=headers["admin"])
    assert r.status_code == 400

    membre_id = seed["users"]["membre"].id
    r = client.patch(f"{API}/user/{membre_id}/deactivate", headers=headers["admin"])
    assert r.status_code == 200
    assert r.json()["is_active"] is False
