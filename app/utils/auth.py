# app/utils/auth.py
"""
Dependências de autenticação das rotas.

O token vem do header Authorization (Bearer) e, na falta dele, do cookie access_token.
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.models.blacklist import TokenBlacklist
from app.models.user import Usuario
from app.services.acesso import AuthContext
from app.services.auth import mensagem_status_inativo
from app.services.erros import ErroNaoAutenticado, ErroProibido
from app.utils.jwt_handler import decode_token

BEARER_PREFIX = "Bearer "


def extrair_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if header and header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX):].strip() or None
    return request.cookies.get("access_token")


def get_token_payload(request: Request, db: Session = Depends(get_db)) -> dict:
    token = extrair_token(request)
    if not token:
        raise ErroNaoAutenticado("Token não informado")

    payload = decode_token(token)
    jti = payload.get("jti")
    if not jti:
        raise ErroNaoAutenticado("Token sem identificador único (jti)")
    if db.get(TokenBlacklist, jti):
        raise ErroNaoAutenticado("Token expirado ou inválido")
    return payload


def get_usuario_atual(
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
) -> Usuario:
    usuario_id = payload.get("id")
    if not isinstance(usuario_id, int):
        raise ErroNaoAutenticado("Token inválido")

    usuario = db.get(Usuario, usuario_id)
    if not usuario:
        raise ErroNaoAutenticado("Usuário não encontrado")
    if usuario.status != "ativo":
        raise ErroProibido(mensagem_status_inativo(usuario.status))
    return usuario


def get_auth_context(usuario: Usuario = Depends(get_usuario_atual)) -> AuthContext:
    return AuthContext.montar(
        usuario.id, usuario.role, [(g.grupo_id, g.acesso) for g in usuario.grupos]
    )


def exigir_admin(usuario: Usuario = Depends(get_usuario_atual)) -> Usuario:
    if usuario.role != "admin":
        raise ErroProibido("Acesso restrito a administradores")
    return usuario
