import logging
from typing import Callable, Optional, Union

from sqlalchemy.orm import Session

from marketchat.client.db.psql import session_scope
from marketchat.db.models.message import ActionKind, Message
from marketchat.service.chat.conversation import resolve_conversation

logger = logging.getLogger(__name__)


class Notifier:
    """
    Pushes system-authored messages into the chat on behalf of other modules
    (order placement, status changes).

    notify() is best-effort: it never raises, so callers can fire it after
    their own work is committed without guarding it.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory

    def notify(
        self,
        sender_id: Optional[int],
        recipient_id: Optional[int],
        content: str,
        action_kind: Union[ActionKind, str] = ActionKind.SYSTEM,
        order_id: Optional[int] = None,
    ) -> bool:
        logger.info("notification sender=%s recipient=%s kind=%s", sender_id, recipient_id, action_kind)

        if not sender_id or not recipient_id:
            logger.error("notification skipped: invalid ids sender=%s recipient=%s", sender_id, recipient_id)
            return False

        try:
            kind = ActionKind(action_kind)
            with session_scope(self._session_factory) as db:
                conversation = resolve_conversation(db, sender_id, recipient_id, order_id)
                db.add(
                    Message(
                        conversa_id=conversation.id,
                        remetente_id=sender_id,
                        conteudo=content,
                        tipo_acao=kind.value,
                        lida=False,
                        is_system=True,
                    )
                )
            return True
        except Exception:
            logger.exception("notification failed sender=%s recipient=%s", sender_id, recipient_id)
            return False
