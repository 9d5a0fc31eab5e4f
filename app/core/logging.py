"""
Configuration du système de logging pour RotaryClubManager.
Utilise Loguru pour un logging structuré et détaillé.
"""

import sys
from pathlib import Path
from typing import Optional, Dict
from loguru import logger


def setup_logging(
    log_level: str = "INFO",
    log_file: str = "logs/rotaryclub.log",
    rotation: str = "10 MB",
    retention: str = "30 days",
) -> None:
    """
    Configure le système de logging de l'application.

    Args:
        log_level: Niveau de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Chemin du fichier de log
        rotation: Taille maximale avant rotation
        retention: Durée de rétention des logs
    """
    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>club={extra[club_id]}</magenta> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level: <8} | "
        "club={extra[club_id]} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    # Le club courant est injecté dans chaque enregistrement
    logger.configure(extra={"club_id": "-"}, patcher=_inject_tenant)

    logger.add(
        sys.stdout,
        format=log_format,
        level=log_level,
        colorize=True,
        backtrace=True,
        diagnose=True,
    )

    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=file_format,
        level=log_level,
        rotation=rotation,
        retention=retention,
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=True,
    )

    error_log = str(log_path.parent / "errors.log")
    logger.add(
        error_log,
        format=file_format,
        level="ERROR",
        rotation=rotation,
        retention=retention,
        compression="zip",
        backtrace=True,
        diagnose=True,
        enqueue=True,
    )

    logger.info("Système de logging initialisé")
    logger.debug(f"Niveau de log: {log_level}")
    logger.debug(f"Fichier de log: {log_file}")


def _inject_tenant(record) -> None:
    """Ajoute l'identifiant du club courant aux extras de l'enregistrement."""
    from app.core.tenant import get_current_tenant_id

    club_id = get_current_tenant_id()
    record["extra"]["club_id"] = club_id if club_id is not None else "-"


def log_request(
    method: str,
    url: str,
    status_code: int,
    duration_ms: float,
    user_id: Optional[str] = None,
) -> None:
    """
    Log une requête HTTP avec ses détails.

    Args:
        method: Méthode HTTP (GET, POST, etc.)
        url: URL de la requête
        status_code: Code de statut HTTP
        duration_ms: Durée de la requête en millisecondes
        user_id: ID de l'utilisateur (optionnel)
    """
    logger.bind(
        method=method,
        url=url,
        status_code=status_code,
        duration_ms=duration_ms,
        user_id=user_id,
    ).info(
        f"{method} {url} - {status_code} ({duration_ms:.2f}ms)"
    )


def log_database_query(
    query: str,
    duration_ms: float,
    params: Optional[Dict] = None,
) -> None:
    """
    Log une requête SQL avec sa durée.
    """
    logger.bind(
        query=query[:200],
        duration_ms=duration_ms,
        params=params,
    ).debug(
        f"SQL Query ({duration_ms:.2f}ms): {query[:100]}..."
    )


def log_email_sent(
    recipient: str,
    subject: str,
    success: bool,
    email_id: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    """
    Log l'envoi d'un email.

    Args:
        recipient: Adresse du destinataire
        subject: Sujet de l'email
        success: Succès de l'envoi
        email_id: Identifiant du message envoyé
        error: Message d'erreur en cas d'échec
    """
    if success:
        logger.bind(recipient=recipient, email_id=email_id).info(
            f"Email envoyé à {recipient}: {subject[:60]} (id={email_id})"
        )
    else:
        logger.bind(recipient=recipient).warning(
            f"Échec d'envoi à {recipient}: {subject[:60]} - {error}"
        )


def log_tirage(
    gala_id: int,
    nombre_demande: int,
    nombre_tickets: int,
    numeros_gagnants: list,
) -> None:
    """
    Log le tirage au sort d'une tombola.
    """
    logger.bind(
        gala_id=gala_id,
        nombre_demande=nombre_demande,
        nombre_tickets=nombre_tickets,
    ).info(
        f"Tirage tombola gala {gala_id}: {len(numeros_gagnants)} gagnant(s) "
        f"sur {nombre_tickets} ticket(s) - numéros {numeros_gagnants}"
    )


def log_transition(
    event_type: str,
    club_id: int,
    entity_id: int,
    details: Optional[Dict] = None,
) -> None:
    """
    Log un événement de passation (mandat, comité, commission).

    Args:
        event_type: Type d'événement (nouveau_mandat, activation, nomination, demission)
        club_id: Club concerné
        entity_id: Identifiant de l'entité créée ou modifiée
        details: Détails supplémentaires
    """
    logger.bind(
        event_type=event_type,
        entity_id=entity_id,
        details=details,
    ).info(
        f"Transition {event_type} club {club_id}: entité {entity_id} {details or ''}"
    )


__all__ = [
    "logger",
    "setup_logging",
    "log_request",
    "log_database_query",
    "log_email_sent",
    "log_tirage",
    "log_transition",
]
