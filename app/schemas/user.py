# app/schemas/user.py

from pydantic import Field
from typing import Optional, List, Literal, Annotated
from datetime import datetime

from app.schemas.base import CamelModel

AcessoGrupo = Literal["comum", "visualizador"]
Login = Annotated[str, Field(min_length=1, max_length=100)]
Senha = Annotated[str, Field(min_length=6)]

#
# Schemas de autenticação
#
class CadastroIn(CamelModel):
    login: Login
    senha: Senha
    nome: Optional[Annotated[str, Field(max_length=200)]] = None

class CadastroOut(CamelModel):
    usuario: str
    message: str

class LoginIn(CamelModel):
    login: Annotated[str, Field(min_length=1)]
    senha: Annotated[str, Field(min_length=1)]

class LoginOut(CamelModel):
    token: str
    usuario: str
    role: str
    status: str

class TrocarSenhaIn(CamelModel):
    senha_atual: Annotated[str, Field(min_length=1)]
    senha_nova: Senha

#
# Schemas de usuário
#
class GrupoAcessoOut(CamelModel):
    grupo_id: int
    acesso: AcessoGrupo

class UsuarioOut(CamelModel):
    id: int
    login: str
    nome: Optional[str] = None
    role: str
    status: str
    aprovado_em: Optional[datetime] = None
    grupos: List[GrupoAcessoOut] = Field(default_factory=list)
    criado_em: Optional[datetime] = None
