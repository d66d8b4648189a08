from .conversation import Conversation
from .message import ActionKind, Message
from .order import Order, OrderItem
from .product import Product
from .user import User

__all__ = ["ActionKind", "Conversation", "Message", "Order", "OrderItem", "Product", "User"]
