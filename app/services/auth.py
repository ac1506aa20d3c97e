# app/services/auth.py
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.blacklist import TokenBlacklist
from app.models.user import Usuario
from app.schemas.user import CadastroIn, CadastroOut, LoginIn, LoginOut, TrocarSenhaIn
from app.services.erros import ErroConflito, ErroNaoAutenticado, ErroProibido
from app.utils.jwt_handler import criar_token
from app.utils.password import gerar_hash_senha, verificar_senha

logger = logging.getLogger(__name__)

MSG_CREDENCIAIS_INVALIDAS = "Login ou senha inválidos"
MSG_CONTA_PENDENTE = "Conta aguardando aprovação do administrador."
MSG_CONTA_BLOQUEADA = "Conta bloqueada."
MSG_LOGIN_EM_USO = "Login já em uso"


def mensagem_status_inativo(status: str) -> str:
    return MSG_CONTA_PENDENTE if status == "pendente" else MSG_CONTA_BLOQUEADA


def login_em_uso(db: Session, login: str) -> bool:
    return db.query(Usuario).filter(Usuario.login == login).first() is not None


def cadastrar(db: Session, body: CadastroIn) -> CadastroOut:
    if login_em_uso(db, body.login):
        raise ErroConflito(MSG_LOGIN_EM_USO)

    usuario = Usuario(
        login=body.login,
        senha_hash=gerar_hash_senha(body.senha),
        nome=body.nome,
        role="usuario",
        status="pendente",
    )
    db.add(usuario)
    try:
        db.commit()
    except IntegrityError:
        # outro cadastro com o mesmo login entrou entre a checagem e o commit
        db.rollback()
        raise ErroConflito(MSG_LOGIN_EM_USO)
    logger.info("Novo cadastro pendente: %s", usuario.login)
    return CadastroOut(usuario=usuario.login, message="Conta criada. Aguarde aprovação do administrador.")


def gerar_token(usuario: Usuario) -> str:
    return criar_token({"id": usuario.id, "sub": usuario.login, "tipo": "access"})


def login(db: Session, body: LoginIn) -> LoginOut:
    usuario = db.query(Usuario).filter(Usuario.login == body.login).first()
    if not usuario or not verificar_senha(body.senha, usuario.senha_hash):
        raise ErroNaoAutenticado(MSG_CREDENCIAIS_INVALIDAS)
    if usuario.status != "ativo":
        raise ErroProibido(mensagem_status_inativo(usuario.status))

    return LoginOut(
        token=gerar_token(usuario),
        usuario=usuario.login,
        role=usuario.role,
        status=usuario.status,
    )


def trocar_senha(db: Session, usuario: Usuario, body: TrocarSenhaIn) -> None:
    if not verificar_senha(body.senha_atual, usuario.senha_hash):
        raise ErroNaoAutenticado("Senha atual incorreta")
    usuario.senha_hash = gerar_hash_senha(body.senha_nova)
    db.commit()


def logout(db: Session, payload: dict) -> None:
    """Coloca o jti do token na blacklist até a expiração dele."""
    jti = payload.get("jti")
    if not jti or db.get(TokenBlacklist, jti):
        return
    expira_em = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    db.add(TokenBlacklist(jti=jti, expira_em=expira_em))
    db.commit()


def limpar_blacklist(db: Session) -> int:
    """Remove da blacklist os tokens que já expiraram por conta própria."""
    removidos = (
        db.query(TokenBlacklist)
        .filter(TokenBlacklist.expira_em < datetime.now(timezone.utc))
        .delete(synchronize_session=False)
    )
    db.commit()
    return removidos
