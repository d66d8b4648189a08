import logging
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from marketchat.client.db.psql import session_scope
from marketchat.db.models.conversation import Conversation
from marketchat.db.models.message import ActionKind, Message
from marketchat.db.models.user import User
from marketchat.model.chat.chat_response import UnreadCheckResponse
from marketchat.model.chat.message_response import MessageItem
from marketchat.service.chat.attachment import AttachmentKind

logger = logging.getLogger(__name__)

TOAST_BY_KIND = {
    ActionKind.PURCHASE.value: "📦 Novo Pedido Recebido!",
    ActionKind.IMAGE.value: "📷 Enviou uma foto",
    ActionKind.AUDIO.value: "🎤 Enviou um áudio",
    ActionKind.FILE.value: "📎 Enviou um arquivo",
}


class NotParticipant(Exception):
    pass


class StoredAttachment(BaseModel):
    url: str
    name: Optional[str] = None
    kind: AttachmentKind


def _from_others(user_id: int):
    return or_(Message.remetente_id.is_(None), Message.remetente_id != user_id)


def _involving(user_id: int):
    return or_(Conversation.participante_1 == user_id, Conversation.participante_2 == user_id)


def get_participant_conversation(db: Session, conversation_id: int, user_id: int) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if conversation is None or user_id not in (conversation.participante_1, conversation.participante_2):
        raise NotParticipant(f"user {user_id} is not part of conversation {conversation_id}")
    return conversation


def touch_conversation(db: Session, conversation_id: int) -> None:
    db.execute(update(Conversation).where(Conversation.id == conversation_id).values(updated_at=func.now()))


def list_messages(conversation_id: int, user_id: int) -> list[MessageItem]:
    """
    Messages of a conversation in chronological order.

    Viewing is what marks messages as read: everything the caller did not
    author is flagged lida before the listing is returned.
    """
    with session_scope() as db:
        try:
            get_participant_conversation(db, conversation_id, user_id)
        except NotParticipant:
            return []

        db.execute(
            update(Message)
            .where(Message.conversa_id == conversation_id, _from_others(user_id))
            .values(lida=True)
        )

        rows = db.execute(
            select(Message, User.nome, User.foto_perfil)
            .select_from(Message)
            .outerjoin(User, Message.remetente_id == User.id)
            .where(Message.conversa_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        ).all()

        return [
            MessageItem(
                id=message.id,
                conversa_id=message.conversa_id,
                remetente_id=message.remetente_id,
                conteudo=message.conteudo,
                tipo_acao=message.tipo_acao,
                anexo_url=message.anexo_url,
                anexo_tipo=message.anexo_tipo,
                anexo_nome=message.anexo_nome,
                lida=message.lida,
                is_system=message.is_system,
                created_at=message.created_at,
                nome=nome,
                foto_perfil=foto_perfil,
            )
            for message, nome, foto_perfil in rows
        ]


def send_message(
    conversation_id: int,
    sender_id: int,
    content: str,
    attachment: Optional[StoredAttachment] = None,
) -> int:
    with session_scope() as db:
        get_participant_conversation(db, conversation_id, sender_id)

        message = Message(
            conversa_id=conversation_id,
            remetente_id=sender_id,
            conteudo=content,
            tipo_acao=attachment.kind.value if attachment else ActionKind.TEXT.value,
            anexo_url=attachment.url if attachment else None,
            anexo_nome=attachment.name if attachment else None,
            anexo_tipo=attachment.kind.value if attachment else None,
            lida=False,
            is_system=False,
        )
        db.add(message)
        touch_conversation(db, conversation_id)
        db.flush()
        return message.id


def toast_preview(kind: Optional[str], content: Optional[str]) -> str:
    if kind == ActionKind.STATUS.value:
        return f"🔄 {content or ''}"
    return TOAST_BY_KIND.get(kind, content or "")


def unread_summary(user_id: int) -> UnreadCheckResponse:
    with session_scope() as db:
        unread = db.execute(
            select(func.count(Message.id))
            .select_from(Message)
            .join(Conversation, Message.conversa_id == Conversation.id)
            .where(_involving(user_id), Message.lida.is_(False), _from_others(user_id))
        ).scalar_one()

        latest = db.execute(
            select(Message.conteudo, Message.tipo_acao, Message.created_at, User.nome, User.nome_loja)
            .select_from(Message)
            .join(Conversation, Message.conversa_id == Conversation.id)
            .outerjoin(User, Message.remetente_id == User.id)
            .where(_involving(user_id), _from_others(user_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        ).first()

    summary = UnreadCheckResponse(unread=int(unread), hasNew=unread > 0)
    if latest is not None:
        summary.from_ = latest.nome_loja or latest.nome or "Notificação"
        summary.preview = toast_preview(latest.tipo_acao, latest.conteudo)
        if latest.created_at is not None:
            summary.lastId = int(latest.created_at.timestamp() * 1000)
    return summary
