from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class ConversationItem(BaseModel):
    id: int
    titulo: Optional[str] = None
    foto: Optional[str] = None
    target_id: Optional[int] = None
    pedido_id: Optional[int] = None
    preview: str
    data: Optional[datetime] = None
    nao_lidas: int = 0
