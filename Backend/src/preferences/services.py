"""
Accès aux paramètres depuis le code (lecture, upsert, nom et thème de l'application).
"""
import logging
from typing import Optional

from django.conf import settings as django_settings

from .models import Setting

logger = logging.getLogger(__name__)

APP_NAME_KEY = "app.name"
THEME_COLOR_KEY = "theme.color"
THEME_MODE_KEY = "theme.mode"
THEME_MODES = ("light", "dark")
THEME_DEFAULTS = {THEME_COLOR_KEY: "blue", THEME_MODE_KEY: "light"}


def get_value(key: str) -> Optional[str]:
    return Setting.objects.filter(key=key).values_list("value", flat=True).first()


def upsert(key: str, value: Optional[str] = None, is_active: Optional[bool] = None) -> Setting:
    """Met à jour la clé ou la crée (valeur vide et active par défaut)."""
    setting = Setting.objects.filter(key=key).first()
    if setting is None:
        logger.info(f"Paramètre {key} absent, création")
        return Setting.objects.create(
            key=key,
            value=value or "",
            is_active=True if is_active is None else is_active,
        )
    if value is not None:
        setting.value = value
    if is_active is not None:
        setting.is_active = is_active
    setting.save()
    return setting


def app_name() -> str:
    return get_value(APP_NAME_KEY) or getattr(django_settings, "APP_DEFAULT_NAME", "Office Nexus")


def theme() -> dict:
    return {
        "color": get_value(THEME_COLOR_KEY) or THEME_DEFAULTS[THEME_COLOR_KEY],
        "mode": get_value(THEME_MODE_KEY) or THEME_DEFAULTS[THEME_MODE_KEY],
    }


def theme_default(key: str) -> str:
    """Valeur par défaut d'une clé theme.* (les clés inconnues prennent le mode)."""
    return THEME_DEFAULTS.get(key, THEME_DEFAULTS[THEME_MODE_KEY])
