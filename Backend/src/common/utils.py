import re
from datetime import datetime, timezone
from typing import Any, Optional

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}
_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def parse_bool(value: Any) -> Optional[bool]:
    """'true'/'false' (query string) -> bool; absent ou illisible -> None."""
    if value is None or isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    return None


def to_snake_case(name: str) -> str:
    """createdAt -> created_at (le front envoie parfois du camelCase)."""
    return _CAMEL_RE.sub("_", name or "").lower()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
