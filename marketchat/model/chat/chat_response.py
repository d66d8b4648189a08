from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class StartChatResponse(BaseModel):
    id: int


class SendResponse(BaseModel):
    success: bool = True


class UnreadCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unread: int = 0
    hasNew: bool = False
    preview: str = ""
    from_: str = Field("Sistema", alias="from")
    # Epoch milliseconds of the latest incoming message
    lastId: Optional[int] = None
