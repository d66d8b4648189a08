import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from marketchat.client.db.psql import session_scope
from marketchat.db.models.message import ActionKind, Message
from marketchat.db.models.order import Order, OrderItem
from marketchat.db.models.product import Product
from marketchat.model.order.order_response import OrderDetailResponse, OrderLine, OrderSummary
from marketchat.service.chat.message import get_participant_conversation, touch_conversation
from marketchat.service.chat.notifier import Notifier

logger = logging.getLogger(__name__)


class OrderNotFound(Exception):
    pass


def status_notice(status: str) -> str:
    return f"Status atualizado: {status.upper()}"


def _set_status(db: Session, order_id: int, status: str, vendor_id: Optional[int] = None) -> Order:
    stmt = update(Order).where(Order.id == order_id).values(status=status, updated_at=func.now())
    if vendor_id is not None:
        stmt = stmt.where(Order.vendedor_id == vendor_id)
    if db.execute(stmt).rowcount == 0:
        raise OrderNotFound(f"order {order_id} not found")
    return db.get(Order, order_id)


def get_order_detail(order_id: int) -> Optional[OrderDetailResponse]:
    with session_scope() as db:
        order = db.get(Order, order_id)
        if order is None:
            return None

        rows = db.execute(
            select(OrderItem, Product.nome, Product.imagem1)
            .select_from(OrderItem)
            .outerjoin(Product, OrderItem.produto_id == Product.id)
            .where(OrderItem.pedido_id == order_id)
            .order_by(OrderItem.id.asc())
        ).all()

        return OrderDetailResponse(
            pedido=OrderSummary(
                id=order.id,
                codigo=order.codigo,
                usuario_id=order.usuario_id,
                vendedor_id=order.vendedor_id,
                total=order.total,
                status=order.status,
                metodo_pagamento=order.metodo_pagamento,
                endereco_entrega=order.endereco_entrega,
                created_at=order.created_at,
                updated_at=order.updated_at,
            ),
            itens=[
                OrderLine(
                    id=item.id,
                    pedido_id=item.pedido_id,
                    produto_id=item.produto_id,
                    quantidade=item.quantidade,
                    preco_unitario=item.preco_unitario,
                    subtotal=item.subtotal,
                    nome=nome,
                    imagem1=imagem1,
                )
                for item, nome, imagem1 in rows
            ],
        )


def update_status_in_chat(order_id: int, status: str, conversation_id: int, actor_id: int) -> int:
    """
    Change an order's status from inside a conversation.

    The status write and the system message share one transaction: either
    both land or neither does. Returns the new message id.
    """
    with session_scope() as db:
        get_participant_conversation(db, conversation_id, actor_id)
        _set_status(db, order_id, status)

        message = Message(
            conversa_id=conversation_id,
            remetente_id=actor_id,
            conteudo=status_notice(status),
            tipo_acao=ActionKind.STATUS.value,
            lida=False,
            is_system=True,
        )
        db.add(message)
        touch_conversation(db, conversation_id)
        db.flush()
        return message.id


def change_status_by_vendor(order_id: int, vendor_id: int, status: str, notifier: Notifier) -> bool:
    """
    Vendor-side status change; the buyer hears about it through the chat.

    Returns whether the notification was delivered. The status change itself
    stands regardless.
    """
    with session_scope() as db:
        buyer_id = _set_status(db, order_id, status, vendor_id=vendor_id).usuario_id

    logger.info("order status changed order=%s vendor=%s status=%s", order_id, vendor_id, status)
    return notifier.notify(vendor_id, buyer_id, status_notice(status), ActionKind.STATUS, order_id)


def notify_order_placed(notifier: Notifier, order_id: int, codigo: str, buyer_id: int, vendor_id: int) -> bool:
    """Called by checkout once an order row exists, to open the buyer/vendor thread."""
    return notifier.notify(buyer_id, vendor_id, f"Novo pedido {codigo}", ActionKind.PURCHASE, order_id)
