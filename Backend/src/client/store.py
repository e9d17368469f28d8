import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """Paire access/refresh courante. Les sous-classes décident de la persistance."""

    def __init__(self):
        self._lock = threading.Lock()
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None

    def set(self, access_token: Optional[str], refresh_token: Optional[str] = None) -> None:
        with self._lock:
            self.access_token = access_token
            if refresh_token is not None:
                self.refresh_token = refresh_token
            self._persist()

    def clear(self) -> None:
        with self._lock:
            self.access_token = None
            self.refresh_token = None
            self._persist()

    def _persist(self) -> None:
        pass


class MemoryTokenStore(TokenStore):
    """Jetons en mémoire (durée de vie du processus)."""


class FileTokenStore(TokenStore):
    """
    Jetons dans un fichier JSON {"access_token", "refresh_token"}.
    Le fichier (mode 0600) est remplacé atomiquement à chaque écriture et
    supprimé quand la paire est effacée.
    """

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning(f"Fichier de jetons illisible ({self.path}): {e}")
                data = {}
            self.access_token = data.get("access_token")
            self.refresh_token = data.get("refresh_token")

    def _persist(self) -> None:
        if self.access_token is None and self.refresh_token is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump({"access_token": self.access_token, "refresh_token": self.refresh_token}, fh)
        # un .tmp laissé par un crash garde son ancien mode
        os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)
