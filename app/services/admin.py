# app/services/admin.py
"""
Operações de administração: usuários, grupos, tipos de certidão e empresas.

Trocas de membros/empresas/tipos bloqueados apagam o conjunto atual e inserem o novo
na mesma transação.
"""
import logging
import re
import unicodedata
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.certidao import Certidao, TipoCertidao
from app.models.empresa import Empresa, EmpresaTipoBloqueado
from app.models.grupo import Grupo, GrupoEmpresa
from app.models.user import Usuario, UsuarioGrupo
from app.schemas.admin import (
    AdminStatsOut,
    EmpresaCreate,
    EmpresaOut,
    EmpresaUpdate,
    GrupoDetalheOut,
    GrupoIn,
    GrupoAcessoIn,
    MembroIn,
    MembroOut,
    TipoCertidaoCreate,
    TipoCertidaoUpdate,
    UsuarioCreate,
    UsuarioUpdate,
)
from app.schemas.user import UsuarioOut
from app.services.auth import MSG_LOGIN_EM_USO, login_em_uso
from app.services.erros import ErroConflito, ErroNaoEncontrado, ErroProibido, ErroValidacao
from app.utils.password import gerar_hash_senha

logger = logging.getLogger(__name__)

MSG_TIPO_DUPLICADO = "Já existe um tipo de certidão com esse nome"
MSG_SLUG_EM_USO = "Slug já em uso por outra empresa"


def _agora() -> datetime:
    return datetime.now(timezone.utc)


def _commit_ou_conflito(db: Session, mensagem: str) -> None:
    """Commit que traduz violação de chave única (corrida entre checagem e escrita) em 409."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ErroConflito(mensagem)


#
# Estatísticas
#
def estatisticas(db: Session) -> AdminStatsOut:
    usuarios = dict(db.query(Usuario.status, func.count(Usuario.id)).group_by(Usuario.status).all())
    certidoes = dict(db.query(Certidao.status, func.count(Certidao.id)).group_by(Certidao.status).all())
    return AdminStatsOut(
        total_usuarios=sum(usuarios.values()),
        usuarios_pendentes=usuarios.get("pendente", 0),
        usuarios_ativos=usuarios.get("ativo", 0),
        usuarios_bloqueados=usuarios.get("bloqueado", 0),
        total_certidoes=sum(certidoes.values()),
        certidoes_ativas=certidoes.get("ativa", 0),
        certidoes_arquivadas=certidoes.get("arquivada", 0),
        certidoes_lixeira=certidoes.get("lixeira", 0),
    )


#
# Usuários
#
def usuario_para_saida(usuario: Usuario) -> UsuarioOut:
    return UsuarioOut.model_validate(usuario)


def _buscar_usuario(db: Session, usuario_id: int) -> Usuario:
    usuario = db.get(Usuario, usuario_id)
    if not usuario:
        raise ErroNaoEncontrado("Usuário não encontrado")
    return usuario


def listar_usuarios(db: Session) -> List[Usuario]:
    return db.query(Usuario).order_by(Usuario.criado_em.desc(), Usuario.id.desc()).all()


def criar_usuario(db: Session, body: UsuarioCreate) -> Usuario:
    if login_em_uso(db, body.login):
        raise ErroConflito(MSG_LOGIN_EM_USO)
    usuario = Usuario(
        login=body.login,
        senha_hash=gerar_hash_senha(body.senha),
        nome=body.nome,
        role=body.role,
        status=body.status,
    )
    db.add(usuario)
    _commit_ou_conflito(db, MSG_LOGIN_EM_USO)
    db.refresh(usuario)
    return usuario


def atualizar_usuario(db: Session, usuario_id: int, body: UsuarioUpdate) -> Usuario:
    usuario = _buscar_usuario(db, usuario_id)
    enviados = body.model_fields_set

    if "nome" in enviados:
        usuario.nome = body.nome
    if body.login is not None and body.login != usuario.login:
        outro = db.query(Usuario).filter(Usuario.login == body.login).first()
        if outro and outro.id != usuario_id:
            raise ErroConflito(MSG_LOGIN_EM_USO)
        usuario.login = body.login
    if body.senha is not None:
        usuario.senha_hash = gerar_hash_senha(body.senha)

    _commit_ou_conflito(db, MSG_LOGIN_EM_USO)
    db.refresh(usuario)
    return usuario


def _mudar_status_usuario(db: Session, usuario_id: int, status: str, admin_id: Optional[int] = None) -> Usuario:
    usuario = _buscar_usuario(db, usuario_id)
    usuario.status = status
    if admin_id is not None:
        usuario.aprovado_em = _agora()
        usuario.aprovado_por = admin_id
    db.commit()
    db.refresh(usuario)
    logger.info("Usuário %s -> %s (admin=%s)", usuario.login, status, admin_id)
    return usuario


def aprovar_usuario(db: Session, usuario_id: int, admin_id: int) -> Usuario:
    return _mudar_status_usuario(db, usuario_id, "ativo", admin_id)


def bloquear_usuario(db: Session, usuario_id: int) -> Usuario:
    return _mudar_status_usuario(db, usuario_id, "bloqueado")


def reativar_usuario(db: Session, usuario_id: int, admin_id: int) -> Usuario:
    return _mudar_status_usuario(db, usuario_id, "ativo", admin_id)


def _ids_existentes(db: Session, modelo, ids: Iterable[int]) -> set:
    ids = set(ids)
    if not ids:
        return set()
    return {row[0] for row in db.query(modelo.id).filter(modelo.id.in_(ids)).all()}


def _substituir(db: Session, atuais: list, novos: Iterable) -> None:
    for item in atuais:
        db.delete(item)
    # remoções vão ao banco antes das inserções por causa das chaves únicas
    db.flush()
    db.add_all(list(novos))
    db.commit()


def definir_grupos_usuario(db: Session, usuario_id: int, grupos: List[GrupoAcessoIn]) -> Usuario:
    usuario = _buscar_usuario(db, usuario_id)
    # mesmo grupo repetido: vale o último
    acessos: Dict[int, str] = {g.grupo_id: g.acesso for g in grupos}
    faltando = set(acessos) - _ids_existentes(db, Grupo, acessos)
    if faltando:
        raise ErroValidacao(f"Grupo(s) não encontrado(s): {sorted(faltando)}", campo="grupos")

    _substituir(
        db,
        db.query(UsuarioGrupo).filter(UsuarioGrupo.usuario_id == usuario_id).all(),
        (
            UsuarioGrupo(usuario_id=usuario_id, grupo_id=grupo_id, acesso=acesso)
            for grupo_id, acesso in acessos.items()
        ),
    )
    db.refresh(usuario)
    return usuario


def excluir_usuario(db: Session, usuario_id: int) -> None:
    usuario = _buscar_usuario(db, usuario_id)
    if usuario.role == "admin":
        raise ErroProibido("Não é permitido excluir administradores")
    db.delete(usuario)
    db.commit()
    logger.info("Usuário %s excluído", usuario.login)


#
# Grupos
#
def _buscar_grupo(db: Session, grupo_id: int) -> Grupo:
    grupo = db.get(Grupo, grupo_id)
    if not grupo:
        raise ErroNaoEncontrado("Grupo não encontrado")
    return grupo


def listar_grupos(db: Session) -> List[Grupo]:
    return db.query(Grupo).order_by(Grupo.nome.asc(), Grupo.id.asc()).all()


def detalhar_grupo(db: Session, grupo_id: int) -> GrupoDetalheOut:
    grupo = _buscar_grupo(db, grupo_id)
    usuarios = [
        MembroOut(id=m.usuario.id, login=m.usuario.login, nome=m.usuario.nome, acesso=m.acesso)
        for m in sorted(grupo.membros, key=lambda m: m.usuario_id)
    ]
    return GrupoDetalheOut(
        id=grupo.id,
        nome=grupo.nome,
        criado_em=grupo.criado_em,
        usuarios=usuarios,
        empresa_ids=sorted(e.empresa_id for e in grupo.empresas),
    )


def criar_grupo(db: Session, body: GrupoIn) -> Grupo:
    grupo = Grupo(nome=body.nome)
    db.add(grupo)
    db.commit()
    db.refresh(grupo)
    return grupo


def atualizar_grupo(db: Session, grupo_id: int, body: GrupoIn) -> Grupo:
    grupo = _buscar_grupo(db, grupo_id)
    grupo.nome = body.nome
    db.commit()
    db.refresh(grupo)
    return grupo


def excluir_grupo(db: Session, grupo_id: int) -> None:
    grupo = _buscar_grupo(db, grupo_id)
    em_uso = db.query(func.count(Certidao.id)).filter(Certidao.grupo_id == grupo_id).scalar()
    if em_uso:
        raise ErroConflito(f"Grupo possui {em_uso} certidão(ões); mova-as antes de excluir")
    db.delete(grupo)
    db.commit()


def definir_usuarios_grupo(db: Session, grupo_id: int, usuarios: List[MembroIn]) -> GrupoDetalheOut:
    _buscar_grupo(db, grupo_id)
    acessos: Dict[int, str] = {u.usuario_id: u.acesso for u in usuarios}
    faltando = set(acessos) - _ids_existentes(db, Usuario, acessos)
    if faltando:
        raise ErroValidacao(f"Usuário(s) não encontrado(s): {sorted(faltando)}", campo="usuarios")

    _substituir(
        db,
        db.query(UsuarioGrupo).filter(UsuarioGrupo.grupo_id == grupo_id).all(),
        (
            UsuarioGrupo(usuario_id=usuario_id, grupo_id=grupo_id, acesso=acesso)
            for usuario_id, acesso in acessos.items()
        ),
    )
    return detalhar_grupo(db, grupo_id)


def definir_empresas_grupo(db: Session, grupo_id: int, empresa_ids: List[int]) -> GrupoDetalheOut:
    _buscar_grupo(db, grupo_id)
    ids = set(empresa_ids)
    faltando = ids - _ids_existentes(db, Empresa, ids)
    if faltando:
        raise ErroValidacao(f"Empresa(s) não encontrada(s): {sorted(faltando)}", campo="empresaIds")

    _substituir(
        db,
        db.query(GrupoEmpresa).filter(GrupoEmpresa.grupo_id == grupo_id).all(),
        (GrupoEmpresa(grupo_id=grupo_id, empresa_id=empresa_id) for empresa_id in sorted(ids)),
    )
    return detalhar_grupo(db, grupo_id)


#
# Tipos de certidão
#
def _buscar_tipo(db: Session, tipo_id: int) -> TipoCertidao:
    tipo = db.get(TipoCertidao, tipo_id)
    if not tipo:
        raise ErroNaoEncontrado("Tipo de certidão não encontrado")
    return tipo


def listar_tipos(db: Session, apenas_ativos: bool = False) -> List[TipoCertidao]:
    query = db.query(TipoCertidao)
    if apenas_ativos:
        query = query.filter(TipoCertidao.ativo.is_(True))
    return query.order_by(TipoCertidao.ordem.asc(), TipoCertidao.id.asc()).all()


def _verificar_nome_tipo(db: Session, nome: str, ignorar_id: Optional[int] = None) -> None:
    outro = db.query(TipoCertidao).filter(TipoCertidao.nome == nome).first()
    if outro and outro.id != ignorar_id:
        raise ErroConflito(MSG_TIPO_DUPLICADO)


def criar_tipo(db: Session, body: TipoCertidaoCreate) -> TipoCertidao:
    _verificar_nome_tipo(db, body.nome)
    tipo = TipoCertidao(nome=body.nome, ordem=body.ordem, ativo=True)
    db.add(tipo)
    _commit_ou_conflito(db, MSG_TIPO_DUPLICADO)
    db.refresh(tipo)
    return tipo


def atualizar_tipo(db: Session, tipo_id: int, body: TipoCertidaoUpdate) -> TipoCertidao:
    tipo = _buscar_tipo(db, tipo_id)
    if body.nome is not None:
        _verificar_nome_tipo(db, body.nome, ignorar_id=tipo_id)
        tipo.nome = body.nome
    if body.ordem is not None:
        tipo.ordem = body.ordem
    if body.ativo is not None:
        tipo.ativo = body.ativo
    _commit_ou_conflito(db, MSG_TIPO_DUPLICADO)
    db.refresh(tipo)
    return tipo


def excluir_tipo(db: Session, tipo_id: int) -> None:
    db.delete(_buscar_tipo(db, tipo_id))
    db.commit()


#
# Empresas
#
def gerar_slug(texto: str) -> str:
    """'Água Branca S/A' -> 'agua-branca-sa'."""
    s = unicodedata.normalize("NFD", texto.lower())
    s = "".join(c for c in s if not unicodedata.combining(c))
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"[^a-z0-9-]", "", s)
    s = re.sub(r"-+", "-", s).strip("-")
    return s or "empresa"


def _slug_disponivel(db: Session, base: str) -> str:
    if not db.query(Empresa).filter(Empresa.slug == base).first():
        return base
    n = 1
    while db.query(Empresa).filter(Empresa.slug == f"{base}-{n}").first():
        n += 1
    return f"{base}-{n}"


def empresa_para_saida(empresa: Empresa) -> EmpresaOut:
    return EmpresaOut(
        id=empresa.id,
        slug=empresa.slug,
        nome=empresa.nome,
        cor=empresa.cor,
        ordem=empresa.ordem,
        ativo=empresa.ativo,
        tipo_ids_bloqueados=sorted(b.tipo_certidao_id for b in empresa.tipos_bloqueados),
    )


def _buscar_empresa(db: Session, empresa_id: int) -> Empresa:
    empresa = db.get(Empresa, empresa_id)
    if not empresa:
        raise ErroNaoEncontrado("Empresa não encontrada")
    return empresa


def listar_empresas(db: Session, apenas_ativas: bool = False) -> List[Empresa]:
    query = db.query(Empresa)
    if apenas_ativas:
        query = query.filter(Empresa.ativo.is_(True))
    return query.order_by(Empresa.ordem.asc(), Empresa.id.asc()).all()


def obter_empresa(db: Session, empresa_id: int) -> Empresa:
    return _buscar_empresa(db, empresa_id)


def criar_empresa(db: Session, body: EmpresaCreate) -> Empresa:
    empresa = Empresa(
        slug=_slug_disponivel(db, gerar_slug(body.nome)),
        nome=body.nome,
        ordem=body.ordem,
        cor=body.cor,
        ativo=True,
    )
    db.add(empresa)
    _commit_ou_conflito(db, MSG_SLUG_EM_USO)
    db.refresh(empresa)
    logger.info("Empresa criada: %s", empresa.slug)
    return empresa


def atualizar_empresa(db: Session, empresa_id: int, body: EmpresaUpdate) -> Empresa:
    empresa = _buscar_empresa(db, empresa_id)
    if body.slug is not None:
        slug = gerar_slug(body.slug)
        outra = db.query(Empresa).filter(Empresa.slug == slug).first()
        if outra and outra.id != empresa_id:
            raise ErroConflito(MSG_SLUG_EM_USO)
        empresa.slug = slug
    if body.nome is not None:
        empresa.nome = body.nome
    if body.ordem is not None:
        empresa.ordem = body.ordem
    if body.ativo is not None:
        empresa.ativo = body.ativo
    if "cor" in body.model_fields_set:
        empresa.cor = body.cor
    _commit_ou_conflito(db, MSG_SLUG_EM_USO)
    db.refresh(empresa)
    return empresa


def excluir_empresa(db: Session, empresa_id: int) -> None:
    db.delete(_buscar_empresa(db, empresa_id))
    db.commit()


def definir_tipos_bloqueados(db: Session, empresa_id: int, tipo_ids: List[int]) -> Empresa:
    empresa = _buscar_empresa(db, empresa_id)
    ids = set(tipo_ids)
    faltando = ids - _ids_existentes(db, TipoCertidao, ids)
    if faltando:
        raise ErroValidacao(f"Tipo(s) de certidão não encontrado(s): {sorted(faltando)}", campo="tipoIds")

    _substituir(
        db,
        db.query(EmpresaTipoBloqueado).filter(EmpresaTipoBloqueado.empresa_id == empresa_id).all(),
        (EmpresaTipoBloqueado(empresa_id=empresa_id, tipo_certidao_id=tipo_id) for tipo_id in sorted(ids)),
    )
    db.refresh(empresa)
    return empresa


def empresas_do_usuario(db: Session, ctx, apenas_ativas: bool = True) -> List[Empresa]:
    """Admin ou usuário sem grupo vê todas; com grupos, a união das empresas dos seus grupos."""
    if ctx.is_admin or not ctx.grupo_ids:
        return listar_empresas(db, apenas_ativas)
    query = (
        db.query(Empresa)
        .join(GrupoEmpresa, GrupoEmpresa.empresa_id == Empresa.id)
        .filter(GrupoEmpresa.grupo_id.in_(sorted(ctx.grupo_ids)))
        .distinct()
    )
    if apenas_ativas:
        query = query.filter(Empresa.ativo.is_(True))
    return query.order_by(Empresa.ordem.asc(), Empresa.id.asc()).all()


def grupos_do_usuario(db: Session, ctx) -> List[Grupo]:
    if ctx.is_admin:
        return listar_grupos(db)
    if not ctx.grupo_ids:
        return []
    return (
        db.query(Grupo)
        .filter(Grupo.id.in_(sorted(ctx.grupo_ids)))
        .order_by(Grupo.nome.asc(), Grupo.id.asc())
        .all()
    )
