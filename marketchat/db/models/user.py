from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from marketchat.db.session import Base


class User(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    # cliente | vendedor | admin
    tipo = Column(String(20), default="cliente", nullable=False)
    # Vendors are shown by store name when they have one
    nome_loja = Column(String(100), nullable=True)
    foto_perfil = Column(String(255), nullable=True)
    criado_em = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
