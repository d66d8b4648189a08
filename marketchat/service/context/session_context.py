import json
import secrets
from typing import Optional

import marketchat.config.config as configs
from marketchat.client.db.redis import redis_client


def _session_key(session_id: str) -> str:
    return f"session:{session_id}"


def get_session(session_id: str) -> Optional[dict]:
    data = redis_client.get(_session_key(session_id))
    if data is None:
        return None
    try:
        decoded = json.loads(data)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None


def create_session(user: dict, ttl_seconds: Optional[int] = None) -> str:
    session_id = secrets.token_urlsafe(32)
    redis_client.setex(
        _session_key(session_id),
        ttl_seconds or configs.SESSION_TTL_SECONDS,
        json.dumps(user),
    )
    return session_id


def destroy_session(session_id: str) -> None:
    redis_client.delete(_session_key(session_id))
