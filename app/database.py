"""
Configuration de la base de données avec SQLAlchemy.
Inclut la gestion des sessions, des transactions et le modèle de base.
"""

from contextlib import contextmanager
from typing import Generator
import time

from sqlalchemy import create_engine, event, text
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from app.config import settings
from app.core.logging import logger, log_database_query


def _engine_options(database_url: str) -> dict:
    """Options du moteur selon le type de base (SQLite pour les tests, PostgreSQL sinon)."""
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "poolclass": QueuePool,
        "pool_size": 10,  # Nombre de connexions permanentes
        "max_overflow": 20,  # Connexions supplémentaires temporaires
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycler les connexions après 30 minutes
        "pool_pre_ping": True,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)

# Factory de sessions
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Classe de base pour tous les modèles
Base = declarative_base()


@event.listens_for(engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Enregistre le temps de début de la requête."""
    conn.info.setdefault("query_start_time", []).append(time.time())


@event.listens_for(engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Calcule et log la durée de la requête."""
    total_time = time.time() - conn.info["query_start_time"].pop(-1)
    duration_ms = total_time * 1000

    if duration_ms > 10 or settings.DEBUG:
        log_database_query(
            query=statement,
            duration_ms=duration_ms,
            params=parameters if isinstance(parameters, dict) else None,
        )


def get_db() -> Generator[Session, None, None]:
    """
    Générateur de session de base de données pour l'injection de dépendances.

    Yields:
        Session SQLAlchemy active
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Erreur lors de l'utilisation de la session: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session, label: str = "transaction") -> Generator[Session, None, None]:
    """
    Regroupe plusieurs écritures dans une seule unité atomique.

    Toute exception (HTTPException comprise) annule l'ensemble des écritures
    effectuées dans le bloc.

    Usage:
        with transaction(db, "activation du mandat"):
            ancien.est_actuel = False
            nouveau.est_actuel = True
    """
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.warning(f"Annulation de la {label}: {e}")
        raise


def init_db() -> None:
    """
    Initialise la base de données en créant toutes les tables.
    En production, utiliser Alembic pour les migrations.
    """
    import app.models  # noqa: F401

    logger.info("Initialisation de la base de données...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables créées avec succès")


def check_db_connection() -> bool:
    """
    Vérifie que la connexion à la base de données fonctionne.

    Returns:
        True si la connexion est établie, False sinon
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Connexion à la base de données établie")
        return True
    except Exception as e:
        logger.error(f"Impossible de se connecter à la base de données: {e}")
        return False


__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_db",
    "transaction",
    "init_db",
    "check_db_connection",
]
