from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel
from typing import List, Optional


class OrderSummary(BaseModel):
    id: int
    codigo: str
    usuario_id: int
    vendedor_id: int
    total: Decimal
    status: str
    metodo_pagamento: Optional[str] = None
    endereco_entrega: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderLine(BaseModel):
    id: int
    pedido_id: int
    produto_id: Optional[int] = None
    quantidade: int
    preco_unitario: Decimal
    subtotal: Decimal
    nome: Optional[str] = None
    imagem1: Optional[str] = None


class OrderDetailResponse(BaseModel):
    pedido: OrderSummary
    itens: List[OrderLine]


class VendorStatusResponse(BaseModel):
    success: bool = True
    status: str
    notified: bool
