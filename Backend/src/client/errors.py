from typing import Any, Optional


class ApiError(RuntimeError):
    """Erreur d'appel ou de réponse de l'API (status None = erreur réseau)."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload

    @property
    def code(self) -> Optional[str]:
        if isinstance(self.payload, dict):
            return (self.payload.get("error") or {}).get("code")
        return None


class Forbidden(ApiError):
    """403: authentifié mais non autorisé (jamais rejoué)."""


class SessionExpired(ApiError):
    """Refresh impossible: les jetons ont été effacés, il faut se reconnecter."""
