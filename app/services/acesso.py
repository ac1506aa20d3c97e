# app/services/acesso.py
"""
Regras de visibilidade e edição de certidões por grupo.

Funções puras sobre um AuthContext imutável, montado uma vez por requisição
(app/utils/auth.py) ou por usuário no job de push:
  - admin vê e edita tudo;
  - certidão sem grupo (global) é visível a todos e editável só por admin;
  - certidão de grupo é visível aos membros e editável por quem tem acesso "comum".
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from sqlalchemy import or_

from app.models.certidao import Certidao
from app.services.erros import ErroProibido, ErroProibidoEdicao

ACESSO_COMUM = "comum"
ACESSO_VISUALIZADOR = "visualizador"

MSG_PROIBIDO = "Sem permissão para acessar esta certidão"
MSG_PROIBIDO_EDICAO = "Sem permissão para editar esta certidão (apenas visualização)"


@dataclass(frozen=True)
class AuthContext:
    usuario_id: Optional[int]
    is_admin: bool
    grupo_ids: frozenset = field(default_factory=frozenset)
    grupo_acesso: Mapping[int, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def montar(cls, usuario_id: Optional[int], role: str, grupos: Iterable[Tuple[int, str]]) -> "AuthContext":
        acesso = {}
        for grupo_id, nivel in grupos:
            acesso[grupo_id] = ACESSO_VISUALIZADOR if nivel == ACESSO_VISUALIZADOR else ACESSO_COMUM
        return cls(
            usuario_id=usuario_id,
            is_admin=role == "admin",
            grupo_ids=frozenset(acesso),
            grupo_acesso=MappingProxyType(acesso),
        )


def pode_ver(grupo_id: Optional[int], ctx: AuthContext) -> bool:
    if ctx.is_admin:
        return True
    if grupo_id is None:
        return True
    return grupo_id in ctx.grupo_ids


def pode_editar(grupo_id: Optional[int], ctx: AuthContext) -> bool:
    if ctx.is_admin:
        return True
    if grupo_id is None:
        return False
    return ctx.grupo_acesso.get(grupo_id) == ACESSO_COMUM


def verificar_visualizacao(grupo_id: Optional[int], ctx: AuthContext) -> None:
    if not pode_ver(grupo_id, ctx):
        raise ErroProibido(MSG_PROIBIDO)


def verificar_edicao(grupo_id: Optional[int], ctx: AuthContext) -> None:
    verificar_visualizacao(grupo_id, ctx)
    if not pode_editar(grupo_id, ctx):
        raise ErroProibidoEdicao(MSG_PROIBIDO_EDICAO)


def verificar_atribuicao_grupo(grupo_id: Optional[int], ctx: AuthContext) -> None:
    """Criação ou reatribuição: o grupo de destino precisa ser editável pelo usuário."""
    if ctx.is_admin:
        return
    if grupo_id is not None and grupo_id not in ctx.grupo_ids:
        raise ErroProibido(MSG_PROIBIDO)
    if grupo_id is not None and ctx.grupo_acesso.get(grupo_id) != ACESSO_COMUM:
        raise ErroProibidoEdicao(MSG_PROIBIDO_EDICAO)
    if grupo_id is None:
        # só admin cria/move certidão para o escopo global
        raise ErroProibidoEdicao(MSG_PROIBIDO_EDICAO)


def filtro_visibilidade(ctx: AuthContext):
    """Cláusula SQL equivalente a pode_ver; None para admin (sem filtro)."""
    if ctx.is_admin:
        return None
    return or_(Certidao.grupo_id.is_(None), Certidao.grupo_id.in_(sorted(ctx.grupo_ids)))
