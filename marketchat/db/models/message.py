import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from marketchat.db.session import Base


class ActionKind(str, enum.Enum):
    TEXT = "texto"
    IMAGE = "imagem"
    AUDIO = "audio"
    FILE = "arquivo"
    PURCHASE = "compra"
    SYSTEM = "sistema"
    STATUS = "status"

    @classmethod
    def _missing_(cls, value):
        # English names ('system', 'image', ...) resolve to the stored values
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


class Message(Base):
    __tablename__ = "mensagens"

    id = Column(Integer, primary_key=True, index=True)
    # Parent conversation row
    conversa_id = Column(Integer, ForeignKey("conversas.id", ondelete="CASCADE"), nullable=False, index=True)
    remetente_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=True)
    conteudo = Column(Text, nullable=False, default="")
    # One of ActionKind values
    tipo_acao = Column(String(50), nullable=False, default=ActionKind.TEXT.value)
    # Generated filename under the chat upload dir, never a full path
    anexo_url = Column(String(255), nullable=True)
    anexo_tipo = Column(String(50), nullable=True)
    anexo_nome = Column(String(255), nullable=True)
    lida = Column(Boolean, nullable=False, default=False)
    is_system = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
