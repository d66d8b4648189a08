import os

for _key in ("DB_HOST", "DB_USER", "DB_PWD", "DB_NAME"):
    os.environ.pop(_key, None)
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

import marketchat.config.config as configs
import marketchat.service.context.session_context as session_context
from marketchat.client.db.psql import session_scope
from marketchat.db.models import Order, OrderItem, Product, User
from marketchat.db.models.conversation import Conversation
from marketchat.db.session import Base, engine
from marketchat.main import app


class _StubRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, key):
        self.store.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def stub_redis(monkeypatch):
    stub = _StubRedis()
    monkeypatch.setattr(session_context, "redis_client", stub)
    return stub


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "chat"
    monkeypatch.setattr(configs, "CHAT_UPLOAD_DIR", target)
    return target


#scope : function < class < module < package < session
@pytest.fixture(scope="function")
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    def _make(nome: str, tipo: str = "cliente", nome_loja: str | None = None, foto: str | None = None) -> int:
        with session_scope() as db:
            user = User(
                nome=nome,
                email=f"{nome.lower().replace(' ', '.')}@kuanda.test",
                tipo=tipo,
                nome_loja=nome_loja,
                foto_perfil=foto,
            )
            db.add(user)
            db.flush()
            return user.id

    return _make


@pytest.fixture
def make_order():
    def _make(buyer_id: int, vendor_id: int, codigo: str = "PED-1", status: str = "pendente", items=()) -> int:
        with session_scope() as db:
            order = Order(codigo=codigo, usuario_id=buyer_id, vendedor_id=vendor_id, total=0, status=status)
            db.add(order)
            db.flush()
            total = 0
            for nome, quantidade, preco in items:
                product = Product(nome=nome, preco=preco, imagem1=f"{nome}.jpg", vendedor_id=vendor_id)
                db.add(product)
                db.flush()
                subtotal = quantidade * preco
                total += subtotal
                db.add(
                    OrderItem(
                        pedido_id=order.id,
                        produto_id=product.id,
                        quantidade=quantidade,
                        preco_unitario=preco,
                        subtotal=subtotal,
                    )
                )
            order.total = total
            return order.id

    return _make


@pytest.fixture
def login(client):
    def _login(user_id: int, nome: str = "user", tipo: str = "cliente") -> TestClient:
        session_id = session_context.create_session({"id": user_id, "nome": nome, "tipo": tipo})
        client.cookies.set(configs.SESSION_COOKIE, session_id)
        return client

    return _login


@pytest.fixture
def set_updated_at():
    def _set(conversation_id: int, value) -> None:
        with session_scope() as db:
            db.execute(update(Conversation).where(Conversation.id == conversation_id).values(updated_at=value))

    return _set
