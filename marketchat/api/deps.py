import logging

from fastapi import Request
from pydantic import ValidationError

import marketchat.config.config as configs
from marketchat.model.session.session_user import SessionUser
from marketchat.service.chat.notifier import Notifier
from marketchat.service.context.session_context import get_session

logger = logging.getLogger(__name__)

notifier = Notifier()


class AuthRequired(Exception):
    def __init__(self, wants_json: bool):
        super().__init__("Auth required")
        self.wants_json = wants_json


def wants_json(request: Request) -> bool:
    if request.url.path.startswith("/api/"):
        return True
    return request.headers.get("x-requested-with", "").lower() == "xmlhttprequest"


def current_user(request: Request) -> SessionUser:
    session_id = request.cookies.get(configs.SESSION_COOKIE)
    data = get_session(session_id) if session_id else None
    if data is not None:
        try:
            return SessionUser(**data)
        except ValidationError:
            logger.warning("discarding malformed session payload")
    raise AuthRequired(wants_json(request))


def get_notifier() -> Notifier:
    return notifier
