from pydantic import BaseModel
from typing import Optional


class ContactItem(BaseModel):
    id: int
    nome: str
    nome_loja: Optional[str] = None
    foto_perfil: Optional[str] = None
