"""Lecture des JWT côté client (sans vérification de signature)."""
import time
from typing import Any, Dict, Optional

import jwt


def decode_payload(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None
    try:
        return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return None


def is_expired(token: Optional[str], leeway: int = 60, now: Optional[float] = None) -> bool:
    """
    True si le jeton est absent, illisible, sans `exp`,
    ou s'il expire dans moins de `leeway` secondes.
    """
    payload = decode_payload(token)
    if not payload or "exp" not in payload:
        return True
    try:
        exp = float(payload["exp"])
    except (TypeError, ValueError):
        return True
    current = time.time() if now is None else now
    return exp - leeway <= current
