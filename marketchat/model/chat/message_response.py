from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class MessageItem(BaseModel):
    id: int
    conversa_id: int
    remetente_id: Optional[int] = None
    conteudo: str
    tipo_acao: str
    anexo_url: Optional[str] = None
    anexo_tipo: Optional[str] = None
    anexo_nome: Optional[str] = None
    lida: bool
    is_system: bool
    created_at: Optional[datetime] = None
    # Sender display fields
    nome: Optional[str] = None
    foto_perfil: Optional[str] = None
