"""Tests de l'envoi des relevés de cotisation par email."""
import asyncio
import time

import httpx

from app.api.v1.endpoints import email_cotisations
from app.config import settings
from app.main import app
from app.schemas.email import EmailResult


API = "/api/v1/email-cotisations"


class FakeEnvoi:
    """Remplace l'envoi SMTP et garde la trace des destinataires."""

    def __init__(self, echecs=()):
        self.echecs = set(echecs)
        self.envoyes = []

    def __call__(self, request):
        destinataire = str(request.to[0])
        if destinataire in self.echecs:
            return EmailResult(success=False, error_message="Connexion refusée")
        self.envoyes.append((destinataire, request.subject))
        return EmailResult(success=True, email_id="abc123", recipients_sent=1)


def test_send_to_member(client, seed, headers, monkeypatch):
    envoi = FakeEnvoi()
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", envoi)

    membre = seed["users"]["membre"]
    r = client.post(
        f"{API}/send-to-member",
        json={"membre_id": membre.id, "club_id": seed["club_id"]},
        headers=headers["tresorier"],
    )
    assert r.status_code == 200
    assert r.json()["email_id"] == "abc123"
    assert envoi.envoyes == [(membre.email, "💳 Situation de Cotisation - Rotary Club Dakar Teranga")]


def test_send_to_member_requires_finance_role(client, seed, headers):
    r = client.post(
        f"{API}/send-to-member",
        json={"membre_id": seed["users"]["president"].id, "club_id": seed["club_id"]},
        headers=headers["membre"],
    )
    assert r.status_code == 403


def test_send_to_member_failure_returns_500(client, seed, headers, monkeypatch):
    membre = seed["users"]["membre"]
    monkeypatch.setattr(
        email_cotisations.email_service, "send_simple_email", FakeEnvoi(echecs=[membre.email]),
    )
    r = client.post(
        f"{API}/send-to-member",
        json={"membre_id": membre.id, "club_id": seed["club_id"]},
        headers=headers["tresorier"],
    )
    assert r.status_code == 500
    assert "Connexion refusée" in r.json()["detail"]


def test_send_to_multiple_members_limit(client, seed, headers, monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_MAX_RECIPIENTS", 2)
    ids = [u.id for u in seed["users"].values()][:3]
    r = client.post(
        f"{API}/send-to-multiple-members",
        json={"club_id": seed["club_id"], "membres_ids": ids},
        headers=headers["tresorier"],
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Le nombre de destinataires (3) dépasse la limite autorisée (2)"


def test_send_to_multiple_members_continues_after_failure(client, seed, headers, monkeypatch):
    users = seed["users"]
    envoi = FakeEnvoi(echecs=[users["president"].email])
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", envoi)

    r = client.post(
        f"{API}/send-to-multiple-members",
        json={"club_id": seed["club_id"], "membres_ids": [users["membre"].id, users["president"].id, 999]},
        headers=headers["tresorier"],
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["statistiques"] == {
        "total_membres": 3,
        "emails_envoyes": 1,
        "emails_echoues": 2,
        "taux_reussite": 33.33,
    }
    messages = [res["message"] for res in body["resultats"]]
    assert messages[0] == "Email envoyé avec succès"
    assert messages[1].startswith("Erreur d'envoi")
    assert messages[2] == "Membre non trouvé"


def test_send_to_all_club_members_admin_only(client, seed, headers, monkeypatch):
    envoi = FakeEnvoi()
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", envoi)
    payload = {"club_id": seed["club_id"]}

    assert client.post(f"{API}/send-to-all-club-members", json=payload, headers=headers["tresorier"]).status_code == 403

    r = client.post(f"{API}/send-to-all-club-members", json=payload, headers=headers["admin"])
    assert r.status_code == 200
    assert r.json()["statistiques"]["emails_envoyes"] == 5
    assert len(envoi.envoyes) == 5


def test_send_to_all_skips_inactive_members(client, seed, headers, db, monkeypatch):
    envoi = FakeEnvoi()
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", envoi)
    seed["users"]["membre"].is_active = False
    db.commit()

    r = client.post(f"{API}/send-to-all-club-members", json={"club_id": seed["club_id"]}, headers=headers["admin"])
    assert r.json()["statistiques"]["total_membres"] == 4

    r = client.post(
        f"{API}/send-to-all-club-members",
        json={"club_id": seed["club_id"], "include_inactive": True},
        headers=headers["admin"],
    )
    assert r.json()["statistiques"]["total_membres"] == 5


def test_test_email_without_smtp_is_simulated(client, seed, headers):
    r = client.post(f"{API}/test-email", json={"test_email": "config@rotary-dakar.org"}, headers=headers["admin"])
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["recipients_sent"] == 1


class Journal:
    """Trace dans l'ordre les envois et les pauses d'un envoi groupé."""

    def __init__(self, delai):
        self.delai = delai
        self.evenements = []
        self._sleep = asyncio.sleep

    def envoi(self, request):
        self.evenements.append(("envoi", str(request.to[0])))
        return EmailResult(success=True, email_id="abc123", recipients_sent=1)

    async def pause(self, secondes):
        if secondes == self.delai:
            self.evenements.append(("pause", secondes))
        await self._sleep(0)


def test_send_to_multiple_members_pauses_between_recipients(client, seed, headers, monkeypatch):
    journal = Journal(delai=0.25)
    monkeypatch.setattr(settings, "EMAIL_BATCH_DELAY_SECONDS", 0.25)
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", journal.envoi)
    monkeypatch.setattr(email_cotisations.asyncio, "sleep", journal.pause)

    users = seed["users"]
    membres = [users["membre"], users["president"], users["tresorier"]]
    r = client.post(
        f"{API}/send-to-multiple-members",
        json={"club_id": seed["club_id"], "membres_ids": [m.id for m in membres]},
        headers=headers["tresorier"],
    )
    assert r.status_code == 200
    assert journal.evenements == [
        ("envoi", membres[0].email),
        ("pause", 0.25),
        ("envoi", membres[1].email),
        ("pause", 0.25),
        ("envoi", membres[2].email),
    ]


def test_send_to_all_does_not_block_other_requests(client, seed, headers, monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_BATCH_DELAY_SECONDS", 0.2)
    monkeypatch.setattr(email_cotisations.email_service, "send_simple_email", FakeEnvoi())

    async def scenario():
        ecarts = []
        en_cours = True

        async def horloge():
            precedent = time.perf_counter()
            while en_cours:
                await asyncio.sleep(0.01)
                maintenant = time.perf_counter()
                ecarts.append(maintenant - precedent)
                precedent = maintenant

        tache = asyncio.create_task(horloge())
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            r = await http.post(
                f"{API}/send-to-all-club-members",
                json={"club_id": seed["club_id"]},
                headers=headers["admin"],
            )
        en_cours = False
        await tache
        return r, max(ecarts)

    r, ecart_max = asyncio.run(scenario())
    assert r.status_code == 200
    assert r.json()["statistiques"]["emails_envoyes"] == 5
    # 4 pauses de 0.2 s : aucune ne doit geler la boucle
    assert ecart_max < 0.15
