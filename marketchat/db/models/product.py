from sqlalchemy import Column, ForeignKey, Integer, Numeric, String

from marketchat.db.session import Base


class Product(Base):
    __tablename__ = "produtos"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    preco = Column(Numeric(10, 2), nullable=False)
    imagem1 = Column(String(255), nullable=True)
    vendedor_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False)
