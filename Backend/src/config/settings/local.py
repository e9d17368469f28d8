from .base import *  # noqa

# --- Charger .env (Backend/.env) et ÉCRASER les variables OS si besoin -----
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

try:
    from dotenv import load_dotenv
    ENV_PATH = Path(__file__).resolve().parents[3] / ".env"  # -> dossier Backend/
    # override=True pour écraser une variable déjà définie dans la session
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH, override=True)
        logger.info(f"[settings] .env chargé depuis {ENV_PATH}")
except ImportError as e:
    # pas bloquant si python-dotenv n'est pas installé
    logger.warning(f"[settings] Impossible de charger .env: {e}")

# --- Dev local ---
DEBUG = True
ALLOWED_HOSTS = ["127.0.0.1", "localhost", "host.docker.internal"]

# Si tu utilises Vite en dev
CSRF_TRUSTED_ORIGINS = [
    "http://127.0.0.1:5173",
    "http://localhost:5173",
]

# Ne pas ré-ajouter corsheaders ici (il est déjà dans base.py)

# CORS en dev
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True

# Relire les valeurs qui peuvent venir du .env
DEFAULT_PERMISSIONS = [p.strip() for p in os.getenv("DEFAULT_PERMISSIONS", "").split(",") if p.strip()]
APP_DEFAULT_NAME = os.getenv("APP_DEFAULT_NAME", APP_DEFAULT_NAME)
