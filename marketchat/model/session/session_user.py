from pydantic import BaseModel


class SessionUser(BaseModel):
    id: int
    nome: str
    tipo: str = "cliente"
