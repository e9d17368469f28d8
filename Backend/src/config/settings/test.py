from .base import *

# Tests
DEBUG = True

# DB sqlite en mémoire par défaut pour rapidité
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Auth plus légère en test
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Email capturé en mémoire
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

# DRF: on garde le JWT pour tester le flux complet (401/403/refresh)
REST_FRAMEWORK.update({
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
})

DEFAULT_PERMISSIONS = ["auth:login", "auth:logout"]

LOGGING["root"]["level"] = "WARNING"
