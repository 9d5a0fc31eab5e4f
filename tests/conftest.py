"""Fixtures communes : base SQLite en mémoire, club de test et tokens par rôle."""
import os
import tempfile
from datetime import date

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG"] = "false"
os.environ["EMAIL_BATCH_DELAY_SECONDS"] = "0"
os.environ["LOG_FILE"] = os.path.join(tempfile.gettempdir(), "rotaryclub-tests", "app.log")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, get_db
from app.core.security import create_access_token, get_password_hash
from app.main import app
from app.models import Club, Mandat, User, UserClub, UserRole


MOT_DE_PASSE = "secret123"
MOT_DE_PASSE_HASH = get_password_hash(MOT_DE_PASSE)

ROLES = {
    "admin": UserRole.ADMIN.value,
    "president": UserRole.PRESIDENT.value,
    "secretaire": UserRole.SECRETAIRE.value,
    "tresorier": UserRole.TRESORIER.value,
    "membre": UserRole.MEMBRE.value,
}


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def creer_utilisateur(db, email, role=UserRole.MEMBRE.value, club=None, **champs):
    champs.setdefault("first_name", email.split("@")[0].capitalize())
    champs.setdefault("last_name", "Diop")
    user = User(email=email, hashed_password=MOT_DE_PASSE_HASH, role=role, is_active=True, **champs)
    db.add(user)
    db.flush()
    if club is not None:
        db.add(UserClub(user_id=user.id, club_id=club.id))
    db.commit()
    return user


@pytest.fixture()
def seed(db):
    """Un club, son mandat actuel et un utilisateur par rôle, tous membres du club."""
    club = Club(name="Rotary Club Dakar Teranga", lieu_reunion="Hôtel Terrou-Bi")
    db.add(club)
    db.flush()

    mandat = Mandat(
        club_id=club.id,
        annee=2024,
        date_debut=date(2024, 7, 1),
        date_fin=date(2025, 6, 30),
        description="Mandat 2024-2025",
        montant_cotisation=480000,
        est_actuel=True,
    )
    db.add(mandat)
    db.commit()

    users = {
        nom: creer_utilisateur(db, f"{nom}@rotary-dakar.org", role=role, club=club)
        for nom, role in ROLES.items()
    }
    return {
        "club": club,
        "mandat": mandat,
        "users": users,
        "club_id": club.id,
        "mandat_id": mandat.id,
    }


def bearer(user, club_id=None):
    token = create_access_token(subject=user.id, role=user.role, club_id=club_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers(seed):
    """En-têtes d'authentification indexés par rôle."""
    return {nom: bearer(user, seed["club_id"]) for nom, user in seed["users"].items()}
