"""
Client HTTP de l'API (équivalent Python de la couche axios du front).

- Ajoute `Authorization: Bearer <access>` à chaque requête authentifiée
- Sur 401: un seul refresh (POST /auth/refresh) puis un seul rejeu
- Refresh impossible: jetons effacés, callback `on_logout`, SessionExpired
- 403: Forbidden sans rejeu
"""
from __future__ import annotations

import logging
import os
import threading
from typing import Any, Callable, Dict, Iterator, Optional

import requests
from requests.exceptions import RequestException

from .errors import ApiError, Forbidden, SessionExpired
from .store import MemoryTokenStore, TokenStore
from .tokens import is_expired

__all__ = ["ApiClient", "DEFAULT_API_URL"]

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api"


def _env_timeout() -> int:
    return int(os.getenv("NEXUS_TIMEOUT_SECONDS") or 30)


def _env_verify() -> bool:
    return str(os.getenv("NEXUS_VERIFY_SSL") or "1").lower() not in {"0", "false", "no"}


def _error_detail(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        detail = (payload.get("error") or {}).get("detail")
        if detail:
            return str(detail)
    return fallback


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        store: Optional[TokenStore] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[int] = None,
        verify: Optional[bool] = None,
        on_logout: Optional[Callable[[], None]] = None,
    ):
        self.base_url = (base_url or os.getenv("NEXUS_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.store = store or MemoryTokenStore()
        self.session = session or requests.Session()
        self.timeout = timeout or _env_timeout()
        self.verify = _env_verify() if verify is None else verify
        self.on_logout = on_logout
        # un seul refresh à la fois; RLock car refresh() est aussi public
        self._refresh_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method: str, path: str, bearer: Optional[str], **kwargs) -> requests.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        url = self._url(path)
        try:
            return self.session.request(
                method, url, headers=headers, timeout=self.timeout, verify=self.verify, **kwargs
            )
        except RequestException as e:
            logger.error(f"[api] Erreur réseau {method} {url}: {e}")
            raise ApiError(f"Appel {method} {url} échoué: {e}") from e

    @staticmethod
    def _payload(resp: requests.Response) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _result(self, method: str, path: str, resp: requests.Response) -> Any:
        payload = self._payload(resp)
        if resp.status_code == 403:
            raise Forbidden(_error_detail(payload, "Forbidden"), status=403, payload=payload)
        if resp.status_code >= 400:
            message = _error_detail(payload, f"HTTP {resp.status_code}")
            logger.warning(f"[api] {method} {path} -> {resp.status_code}: {message}")
            raise ApiError(message, status=resp.status_code, payload=payload)
        return payload

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def _expire_session(self, reason: str) -> SessionExpired:
        logger.warning(f"[api] Session expirée: {reason}")
        self.store.clear()
        if self.on_logout is not None:
            self.on_logout()
        return SessionExpired(reason, status=401)

    def _refresh_after_401(self, failed_bearer: Optional[str]) -> str:
        with self._refresh_lock:
            current = self.store.access_token
            # un autre appel a déjà renouvelé le jeton pendant qu'on attendait
            if current and current != failed_bearer:
                return current
            if not self.store.refresh_token:
                # jetons déjà effacés par un appel concurrent: on_logout a déjà été appelé
                if failed_bearer and current is None:
                    raise SessionExpired("Session already expired", status=401)
                raise self._expire_session("No refresh token")
            if not self.refresh():
                raise self._expire_session("Refresh token refused")
            return self.store.access_token

    def request(self, method: str, path: str, *, auth: bool = True, **kwargs) -> Any:
        """Envoie la requête et renvoie le JSON décodé (None pour une réponse vide)."""
        method = method.upper()
        bearer = self.store.access_token if auth else None
        resp = self._send(method, path, bearer, **kwargs)

        if resp.status_code == 401 and auth:
            bearer = self._refresh_after_401(bearer)
            resp = self._send(method, path, bearer, **kwargs)
            if resp.status_code == 401:
                raise self._expire_session("Request still unauthorized after refresh")

        return self._result(method, path, resp)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self.request("POST", "/auth/login", auth=False, json={"email": email, "password": password})
        self.store.set(data["access_token"], data["refresh_token"])
        logger.info(f"[api] Connecté: {email}")
        return data["user"]

    def refresh(self) -> bool:
        """Renouvelle la paire de jetons. False si le serveur refuse."""
        with self._refresh_lock:
            refresh_token = self.store.refresh_token
            if not refresh_token:
                return False
            try:
                data = self.request("POST", "/auth/refresh", auth=False, json={"refresh_token": refresh_token})
            except ApiError as e:
                logger.info(f"[api] Refresh refusé: {e}")
                return False
            self.store.set(data["access_token"], data["refresh_token"])
            return True

    def logout(self) -> None:
        """Révocation côté serveur si possible; les jetons locaux sont toujours effacés."""
        try:
            if self.store.access_token or self.store.refresh_token:
                self.request("POST", "/auth/logout")
        except ApiError as e:
            logger.warning(f"[api] Logout serveur en échec: {e}")
        finally:
            self.store.clear()

    def has_refresh_token(self) -> bool:
        return bool(self.store.refresh_token)

    def has_valid_access_token(self, leeway: int = 60) -> bool:
        return not is_expired(self.store.access_token, leeway=leeway)

    def check_and_refresh_auth(self) -> Optional[Dict[str, Any]]:
        """
        Au démarrage: profil courant si la session est récupérable, sinon None
        (et jetons effacés).
        """
        if self.has_valid_access_token():
            try:
                return self.get("/users/me")
            except ApiError as e:
                logger.info(f"[api] Profil indisponible avec le jeton courant: {e}")
        if self.has_refresh_token() and self.refresh():
            try:
                return self.get("/users/me")
            except ApiError as e:
                logger.info(f"[api] Profil indisponible après refresh: {e}")
        self.store.clear()
        return None

    # ------------------------------------------------------------------
    # Raccourcis
    # ------------------------------------------------------------------
    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self.request("PATCH", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def paginate(self, path: str, params: Optional[Dict[str, Any]] = None, limit: int = 100) -> Iterator[Any]:
        """Parcourt toutes les pages d'une liste {"data", "meta"}."""
        page = 1
        while True:
            body = self.get(path, params={**(params or {}), "page": page, "limit": limit})
            yield from body.get("data", [])
            total_pages = (body.get("meta") or {}).get("total_pages") or 0
            if page >= total_pages:
                break
            page += 1
