"""
RotaryClubManager - Point d'entrée principal de l'application.
API de gestion d'un club service : membres, cotisations, réunions, galas,
comité, commissions et budget.
"""

import time
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.database import check_db_connection, init_db
from app.core.logging import setup_logging, logger, log_request
from app.core.security import decode_token_unsafe
from app.api.v1.router import api_router


# Configuration du logging au démarrage
setup_logging(
    log_level="DEBUG" if settings.DEBUG else "INFO",
    log_file=settings.LOG_FILE,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestionnaire de cycle de vie de l'application.
    Exécuté au démarrage et à l'arrêt.
    """
    logger.info("=" * 60)
    logger.info(f"Démarrage de {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environnement: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    if not check_db_connection():
        logger.error("Impossible de se connecter à la base de données!")
    elif settings.DEBUG:
        # En développement, les tables manquantes sont créées sans Alembic
        init_db()

    logger.info("Application prête à recevoir des requêtes")

    yield

    logger.info("Arrêt de l'application...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    ## RotaryClubManager - Gestion d'un club service

    ### Fonctionnalités principales:

    * **Membres** - Inscription, authentification JWT, rattachement aux clubs
    * **Cotisations** - Cotisations par mandat, paiements, situations, relances email
    * **Réunions** - Ordres du jour, présences, invités, compte rendu Word
    * **Galas** - Invités, tables, tickets, tombolas et tirage au sort
    * **Comité et commissions** - Nominations, démissions, responsables
    * **Budget** - Rubriques budgétées par mandat et réalisations

    ### Rôles:

    * **Membre** - Consulte les informations de son club
    * **Trésorier** - Gère les cotisations et le budget
    * **Président / Secrétaire** - Gèrent le club
    * **Admin** - Administration de la plateforme
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_tags=[
        {"name": "Authentification", "description": "Inscription, connexion, tokens JWT, membres"},
        {"name": "Clubs", "description": "Clubs et référentiels du club"},
        {"name": "Cotisations", "description": "Cotisations par mandat et situations"},
        {"name": "Paiements de cotisation", "description": "Versements des membres"},
        {"name": "Emails de cotisation", "description": "Envoi des situations par email"},
        {"name": "Galas", "description": "Organisation des galas"},
        {"name": "Réunions", "description": "Réunions, présences et invités"},
        {"name": "Transitions", "description": "Mandats, comité et commissions"},
        {"name": "Rubriques budgétaires", "description": "Budget par mandat"},
    ],
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def logging_middleware(request: Request, call_next: Callable) -> Response:
    """
    Middleware pour logger toutes les requêtes HTTP.
    """
    start_time = time.time()

    user_id = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        payload = decode_token_unsafe(auth_header[7:])
        if payload:
            user_id = payload.get("sub")

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    log_request(
        method=request.method,
        url=str(request.url.path),
        status_code=response.status_code,
        duration_ms=duration_ms,
        user_id=user_id,
    )

    response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Gestionnaire personnalisé pour les erreurs de validation Pydantic.
    """
    logger.warning(f"Erreur de validation sur {request.url.path}: {exc.errors()}")

    errors = [
        {
            "field": ".".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Erreur de validation des données",
            "errors": errors,
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """
    Gestionnaire pour les erreurs de base de données.
    """
    logger.error(f"Erreur SQLAlchemy: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Erreur de base de données",
            "message": "Une erreur est survenue lors de l'accès aux données",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Gestionnaire pour toutes les autres exceptions.
    """
    logger.opt(exception=exc).error(f"Erreur non gérée: {exc}")

    if settings.DEBUG:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "type": type(exc).__name__,
            },
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Une erreur interne est survenue",
        },
    )


app.include_router(api_router, prefix="/api/v1")


@app.get(
    "/health",
    tags=["Système"],
    summary="Vérification de l'état de l'application",
)
async def health_check():
    """
    Endpoint de health check pour les load balancers et monitoring.
    """
    db_status = "ok" if check_db_connection() else "error"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": db_status,
    }


@app.get("/", tags=["Système"])
async def root():
    """
    Point d'entrée racine de l'API.
    """
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "API de gestion de club : membres, cotisations, réunions, galas et budget",
        "docs": "/docs" if settings.DEBUG else "Documentation désactivée en production",
        "health": "/health",
        "api": "/api/v1",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
