import logging
from typing import Optional

from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from marketchat.client.db.psql import session_scope
from marketchat.db.models.conversation import Conversation
from marketchat.db.models.message import ActionKind, Message
from marketchat.db.models.user import User
from marketchat.model.chat.conversation_response import ConversationItem

logger = logging.getLogger(__name__)

EMPTY_PREVIEW = "Nova conversa"
PREVIEW_BY_KIND = {
    ActionKind.IMAGE.value: "📷 Imagem",
    ActionKind.AUDIO.value: "🎤 Áudio",
    ActionKind.PURCHASE.value: "🛍️ Compra",
    ActionKind.SYSTEM.value: "🔔 Notificação",
    ActionKind.STATUS.value: "🔔 Notificação",
}


def normalize_pair(user_a: int, user_b: int) -> tuple[int, int]:
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


def conversation_preview(kind: Optional[str], content: Optional[str]) -> str:
    if kind in PREVIEW_BY_KIND:
        return PREVIEW_BY_KIND[kind]
    return content or EMPTY_PREVIEW


def _insert_if_absent(db: Session, values: dict) -> bool:
    """
    INSERT ... ON CONFLICT DO NOTHING on the participant pair.
    Returns True when a new row was written.
    """
    dialect = db.get_bind().dialect.name
    if dialect in ("postgresql", "sqlite"):
        builder = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = builder(Conversation).values(**values).on_conflict_do_nothing(
            index_elements=["participante_1", "participante_2"]
        )
        return db.execute(stmt).rowcount == 1

    # Other engines: rely on the unique constraint inside a savepoint
    try:
        with db.begin_nested():
            db.execute(insert(Conversation).values(**values))
        return True
    except IntegrityError:
        return False


def resolve_conversation(db: Session, user_a: int, user_b: int, order_id: Optional[int] = None) -> Conversation:
    """
    Find the conversation between two users, creating it when missing.

    Reusing a conversation bumps updated_at, and a supplied order_id replaces
    whatever order was linked before.
    """
    first, second = normalize_pair(user_a, user_b)
    created = _insert_if_absent(
        db,
        {"participante_1": first, "participante_2": second, "pedido_id": order_id},
    )

    conversation = db.execute(
        select(Conversation).where(
            Conversation.participante_1 == first,
            Conversation.participante_2 == second,
        )
    ).scalar_one()

    if not created:
        values = {"updated_at": func.now()}
        if order_id is not None and conversation.pedido_id != order_id:
            values["pedido_id"] = order_id
        db.execute(update(Conversation).where(Conversation.id == conversation.id).values(**values))
        db.refresh(conversation)
    else:
        logger.info("conversation created id=%s participants=%s,%s", conversation.id, first, second)

    return conversation


def start_conversation(user_id: int, target_id: int, order_id: Optional[int] = None) -> int:
    with session_scope() as db:
        return resolve_conversation(db, user_id, target_id, order_id).id


def _name_matches(user, pattern: str):
    return or_(user.nome.ilike(pattern, escape="\\"), user.nome_loja.ilike(pattern, escape="\\"))


def list_conversations(user_id: int, search: str = "") -> list[ConversationItem]:
    first_user = aliased(User)
    second_user = aliased(User)

    latest = (
        select(Message)
        .where(Message.conversa_id == Conversation.id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(1)
    )
    last_content = latest.with_only_columns(Message.conteudo).scalar_subquery()
    last_kind = latest.with_only_columns(Message.tipo_acao).scalar_subquery()
    unread = (
        select(func.count(Message.id))
        .where(
            Message.conversa_id == Conversation.id,
            Message.lida.is_(False),
            or_(Message.remetente_id.is_(None), Message.remetente_id != user_id),
        )
        .scalar_subquery()
    )

    stmt = (
        select(
            Conversation,
            first_user,
            second_user,
            last_content.label("ultima_msg"),
            last_kind.label("ultimo_tipo"),
            unread.label("nao_lidas"),
        )
        .select_from(Conversation)
        .outerjoin(first_user, Conversation.participante_1 == first_user.id)
        .outerjoin(second_user, Conversation.participante_2 == second_user.id)
        .where(or_(Conversation.participante_1 == user_id, Conversation.participante_2 == user_id))
        .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
    )

    if search:
        escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        stmt = stmt.where(
            or_(
                and_(
                    Conversation.participante_1 == user_id,
                    _name_matches(second_user, pattern),
                ),
                and_(
                    Conversation.participante_2 == user_id,
                    _name_matches(first_user, pattern),
                ),
            )
        )

    items: list[ConversationItem] = []
    with session_scope() as db:
        for conversation, user_1, user_2, last_msg, last_type, unread_count in db.execute(stmt).all():
            target = user_2 if conversation.participante_1 == user_id else user_1
            items.append(
                ConversationItem(
                    id=conversation.id,
                    titulo=(target.nome_loja or target.nome) if target else None,
                    foto=target.foto_perfil if target else None,
                    target_id=conversation.other_participant(user_id),
                    pedido_id=conversation.pedido_id,
                    preview=conversation_preview(last_type, last_msg),
                    data=conversation.updated_at,
                    nao_lidas=int(unread_count or 0),
                )
            )
    return items
