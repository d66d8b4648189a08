from sqlalchemy import select

import marketchat.config.config as configs
from marketchat.client.db.psql import session_scope
from marketchat.db.models.user import User
from marketchat.model.chat.contact_response import ContactItem


def list_contacts(user_id: int) -> list[ContactItem]:
    """Vendors and admins the caller can open a chat with."""
    stmt = (
        select(User.id, User.nome, User.nome_loja, User.foto_perfil)
        .where(User.id != user_id, User.tipo.in_(configs.CHAT_CONTACT_ROLES))
        .order_by(User.nome_loja.desc().nulls_last(), User.id.asc())
        .limit(configs.CHAT_USERS_LIMIT)
    )
    with session_scope() as db:
        return [
            ContactItem(id=row.id, nome=row.nome, nome_loja=row.nome_loja, foto_perfil=row.foto_perfil)
            for row in db.execute(stmt).all()
        ]
