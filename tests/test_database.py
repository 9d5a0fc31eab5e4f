"""Tests de la session et des transactions SQLAlchemy."""
import pytest
from fastapi import HTTPException

from app import database
from app.database import transaction
from app.models import Club


def test_transaction_commits_all_writes(db):
    with transaction(db, "création des clubs"):
        db.add(Club(name="Rotary Club Saint-Louis"))
        db.add(Club(name="Rotary Club Mbour"))

    db.expire_all()
    assert db.query(Club).count() == 2


def test_transaction_rolls_back_on_http_error(db):
    with pytest.raises(HTTPException):
        with transaction(db, "création du club"):
            db.add(Club(name="Rotary Club Touba"))
            db.flush()
            raise HTTPException(status_code=400, detail="Refusé")

    assert db.query(Club).count() == 0


def test_database_exposes_request_session_and_transaction_only():
    assert "get_db" in database.__all__
    assert "transaction" in database.__all__
    assert not hasattr(database, "get_db_context")
