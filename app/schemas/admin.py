from pydantic import Field
from typing import Optional, List, Literal, Annotated
from datetime import datetime

from app.schemas.base import CamelModel
from app.schemas.user import AcessoGrupo, Login, Senha

Nome = Annotated[str, Field(min_length=1, max_length=200)]
Ordem = Annotated[int, Field(ge=0)]
IdPositivo = Annotated[int, Field(gt=0)]
Cor = Annotated[str, Field(max_length=20)]


class UsuarioCreate(CamelModel):
    login: Login
    senha: Senha
    nome: Optional[Annotated[str, Field(max_length=200)]] = None
    role: Literal["admin", "usuario"] = "usuario"
    status: Literal["pendente", "ativo", "bloqueado"] = "ativo"


class UsuarioUpdate(CamelModel):
    login: Optional[Login] = None
    senha: Optional[Senha] = None
    nome: Optional[Annotated[str, Field(max_length=200)]] = None


class GrupoAcessoIn(CamelModel):
    grupo_id: IdPositivo
    acesso: AcessoGrupo = "comum"


class UsuarioGruposIn(CamelModel):
    grupos: List[GrupoAcessoIn]


class GrupoIn(CamelModel):
    nome: Nome


class GrupoOut(CamelModel):
    id: int
    nome: str
    criado_em: Optional[datetime] = None


class MembroIn(CamelModel):
    usuario_id: IdPositivo
    acesso: AcessoGrupo = "comum"


class GrupoUsuariosIn(CamelModel):
    usuarios: List[MembroIn]


class GrupoEmpresasIn(CamelModel):
    empresa_ids: List[IdPositivo]


class MembroOut(CamelModel):
    id: int
    login: str
    nome: Optional[str] = None
    acesso: AcessoGrupo


class GrupoDetalheOut(GrupoOut):
    usuarios: List[MembroOut] = Field(default_factory=list)
    empresa_ids: List[int] = Field(default_factory=list)


class TipoCertidaoCreate(CamelModel):
    nome: Nome
    ordem: Ordem = 0


class TipoCertidaoUpdate(CamelModel):
    nome: Optional[Nome] = None
    ordem: Optional[Ordem] = None
    ativo: Optional[bool] = None


class TipoCertidaoOut(CamelModel):
    id: int
    nome: str
    ordem: int
    ativo: bool


class EmpresaCreate(CamelModel):
    nome: Nome
    ordem: Ordem = 0
    cor: Optional[Cor] = None


class EmpresaUpdate(CamelModel):
    slug: Optional[Nome] = None
    nome: Optional[Nome] = None
    ordem: Optional[Ordem] = None
    ativo: Optional[bool] = None
    cor: Optional[Cor] = None


class EmpresaTiposIn(CamelModel):
    tipo_ids: List[IdPositivo]


class EmpresaOut(CamelModel):
    id: int
    slug: str
    nome: str
    cor: Optional[str] = None
    ordem: int
    ativo: bool
    tipo_ids_bloqueados: List[int] = Field(default_factory=list)


class AdminStatsOut(CamelModel):
    total_usuarios: int
    usuarios_pendentes: int
    usuarios_ativos: int
    usuarios_bloqueados: int
    total_certidoes: int
    certidoes_ativas: int
    certidoes_arquivadas: int
    certidoes_lixeira: int
