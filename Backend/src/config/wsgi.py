"""
Point d'entrée WSGI de l'API Office Nexus.
Charge Backend/.env (si present) avant de configurer Django.
"""
import os
from pathlib import Path

try:
    from dotenv import load_dotenv
    load_dotenv(Path(__file__).resolve().parents[2] / ".env")
except ImportError:
    # python-dotenv absent: on se contente des variables d'environnement
    pass

from django.core.wsgi import get_wsgi_application

os.environ.setdefault(
    "DJANGO_SETTINGS_MODULE",
    os.getenv("DJANGO_SETTINGS_MODULE", "config.settings.local"),
)

application = get_wsgi_application()
