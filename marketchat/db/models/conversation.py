from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.sql import func

from marketchat.db.session import Base


class Conversation(Base):
    __tablename__ = "conversas"
    __table_args__ = (
        UniqueConstraint("participante_1", "participante_2", name="uq_conversas_participantes"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Last order discussed in this conversation; overwritten on reuse
    pedido_id = Column(Integer, nullable=True)
    # Pair is stored normalized: participante_1 <= participante_2
    participante_1 = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False)
    participante_2 = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    criado_em = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def other_participant(self, user_id: int) -> int:
        return self.participante_2 if self.participante_1 == user_id else self.participante_1
