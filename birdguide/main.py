import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Imports de l'application
from birdguide.core.config import settings
from birdguide.core.logging_config import configure_logging
from birdguide.api.api import api_router
from birdguide.db import base  # noqa: F401  (enregistre tous les modèles)
from birdguide.db.base_class import Base
from birdguide.db import session as db_session

# --- Configuration du logging ---
configure_logging(settings)
logger = logging.getLogger(__name__)

# --- Initialisation de l'application FastAPI ---
app = FastAPI(
    title="BirdGuide API",
    openapi_url="/api/openapi.json",
)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    return value.rstrip("/")


# --- Configuration des Middlewares ---
cors_origins = sorted({o for o in (_sanitize_origin(o) for o in settings.BACKEND_CORS_ORIGINS) if o})
logger.info("CORS origins configurés: %s", cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)


# --- Erreurs de validation ---
def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Requête invalide sur %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Invalid request",
            "message": _first_validation_message(exc),
        },
    )


app.include_router(api_router, prefix="/api")


# --- Événement de Démarrage ---
@app.on_event("startup")
def startup():
    logger.info("Vérification et création des tables de la base de données...")
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("Les tables de la base de données sont prêtes.")


# --- Route Racine ---
@app.get("/")
def read_root():
    return {"message": "Welcome to BirdGuide API!"}
