from pydantic import BaseModel, Field
from typing import Optional


class StartChatRequest(BaseModel):
    target_id: int = Field(..., description="User on the other side of the conversation")
    pedido_id: Optional[int] = Field(None, description="Order the conversation is about")


class StatusUpdateRequest(BaseModel):
    pedido_id: int
    status: str = Field(..., min_length=1)
    conversa_id: int
