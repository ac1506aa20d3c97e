# app/services/certidao.py
"""
Ciclo de vida das certidões: criar, atualizar, arquivar, restaurar,
enviar para a lixeira, excluir e duplicar.

Toda operação segue a mesma ordem de checagem, sem escrita parcial:
existência -> visualização -> edição -> (re)atribuição de grupo -> validação de campos.
"""
import copy
import logging
from dataclasses import dataclass, fields
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.certidao import Certidao, TipoCertidao
from app.models.empresa import Empresa, EmpresaTipoBloqueado
from app.models.grupo import Grupo
from app.schemas.certidao import CertidaoCreate, CertidaoOut, CertidaoUpdate
from app.services import acesso
from app.services.acesso import AuthContext
from app.services.erros import ErroNaoEncontrado, ErroValidacao

logger = logging.getLogger(__name__)

STATUS_ATIVA = "ativa"
STATUS_ARQUIVADA = "arquivada"
STATUS_LIXEIRA = "lixeira"

MSG_NAO_ENCONTRADA = "Certidão não encontrada"

_CAMPOS_LISTA = ("pendencias", "documentos_adicionais", "notas")


class _Ausente:
    """Marca um campo que não veio no corpo do PUT (diferente de null explícito)."""

    _instancia = None

    def __new__(cls):
        if cls._instancia is None:
            cls._instancia = super().__new__(cls)
        return cls._instancia

    def __bool__(self):
        return False

    def __repr__(self):
        return "AUSENTE"


AUSENTE = _Ausente()


@dataclass
class CertidaoPatch:
    """Cada campo é AUSENTE (preserva), None (limpa) ou um valor (substitui)."""

    empresa: Any = AUSENTE
    tipo: Any = AUSENTE
    nome: Any = AUSENTE
    descricao: Any = AUSENTE
    data_emissao: Any = AUSENTE
    data_validade: Any = AUSENTE
    tipo_documento: Any = AUSENTE
    url_documento: Any = AUSENTE
    alerta_ativo: Any = AUSENTE
    notificar_dias_antes: Any = AUSENTE
    observacoes: Any = AUSENTE
    pendencias: Any = AUSENTE
    documentos_adicionais: Any = AUSENTE
    notas: Any = AUSENTE
    status: Any = AUSENTE
    data_exclusao: Any = AUSENTE
    grupo_id: Any = AUSENTE

    @classmethod
    def do_corpo(cls, body: CertidaoUpdate) -> "CertidaoPatch":
        valores = {}
        for campo in body.model_fields_set:
            valor = getattr(body, campo)
            if campo in _CAMPOS_LISTA and valor is not None:
                valor = _itens_para_json(valor)
            valores[campo] = valor
        return cls(**valores)

    def definidos(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not AUSENTE
        }

    def valor_ou(self, campo: str, atual: Any) -> Any:
        valor = getattr(self, campo)
        return atual if valor is AUSENTE else valor


def aplicar_patch(cert: Certidao, patch: CertidaoPatch) -> None:
    for campo, valor in patch.definidos().items():
        setattr(cert, campo, valor)


def _agora() -> datetime:
    return datetime.now(timezone.utc)


def _itens_para_json(itens) -> List[dict]:
    return [item.model_dump(by_alias=True, exclude_none=True) for item in itens]


def _sincronizar_exclusao(cert: Certidao) -> None:
    # data_exclusao só existe enquanto a certidão está na lixeira
    if cert.status == STATUS_LIXEIRA:
        if cert.data_exclusao is None:
            cert.data_exclusao = _agora()
    else:
        cert.data_exclusao = None


def _buscar(db: Session, certidao_id: str) -> Certidao:
    cert = db.query(Certidao).filter(Certidao.id == certidao_id).first()
    if not cert:
        raise ErroNaoEncontrado(MSG_NAO_ENCONTRADA)
    return cert


def _validar_datas(data_emissao: date, data_validade: date) -> None:
    if data_validade < data_emissao:
        raise ErroValidacao(
            "Data de validade deve ser posterior ou igual à emissão.", campo="dataValidade"
        )


def _validar_grupo(db: Session, grupo_id: Optional[int]) -> None:
    if grupo_id is not None and db.get(Grupo, grupo_id) is None:
        raise ErroValidacao("Grupo não encontrado", campo="grupoId")


def _validar_empresa_tipo(db: Session, slug: str, tipo: str) -> None:
    empresa = db.query(Empresa).filter(Empresa.slug == slug).first()
    if not empresa:
        raise ErroValidacao("Empresa não encontrada", campo="empresa")
    bloqueado = (
        db.query(EmpresaTipoBloqueado)
        .join(TipoCertidao, TipoCertidao.id == EmpresaTipoBloqueado.tipo_certidao_id)
        .filter(EmpresaTipoBloqueado.empresa_id == empresa.id, TipoCertidao.nome == tipo)
        .first()
    )
    if bloqueado:
        raise ErroValidacao("Tipo de certidão não permitido para esta empresa", campo="tipo")


def para_saida(cert: Certidao, ctx: AuthContext) -> CertidaoOut:
    saida = CertidaoOut.model_validate(cert)
    saida.pode_editar = acesso.pode_editar(cert.grupo_id, ctx)
    return saida


def listar(db: Session, ctx: AuthContext, status: Optional[str] = None) -> List[Certidao]:
    query = db.query(Certidao)
    if status is not None:
        query = query.filter(Certidao.status == status)
    filtro = acesso.filtro_visibilidade(ctx)
    if filtro is not None:
        query = query.filter(filtro)
    return query.order_by(Certidao.data_validade.asc(), Certidao.id.asc()).all()


def obter(db: Session, certidao_id: str, ctx: AuthContext) -> Certidao:
    cert = _buscar(db, certidao_id)
    acesso.verificar_visualizacao(cert.grupo_id, ctx)
    return cert


def criar(db: Session, body: CertidaoCreate, ctx: AuthContext) -> Certidao:
    acesso.verificar_atribuicao_grupo(body.grupo_id, ctx)
    _validar_grupo(db, body.grupo_id)
    _validar_datas(body.data_emissao, body.data_validade)
    _validar_empresa_tipo(db, body.empresa, body.tipo)

    cert = Certidao(
        empresa=body.empresa,
        tipo=body.tipo,
        nome=body.nome,
        descricao=body.descricao,
        data_emissao=body.data_emissao,
        data_validade=body.data_validade,
        tipo_documento=body.tipo_documento,
        url_documento=body.url_documento,
        alerta_ativo=body.alerta_ativo,
        notificar_dias_antes=body.notificar_dias_antes,
        observacoes=body.observacoes,
        pendencias=_itens_para_json(body.pendencias),
        documentos_adicionais=_itens_para_json(body.documentos_adicionais),
        notas=_itens_para_json(body.notas),
        status=STATUS_ATIVA,
        grupo_id=body.grupo_id,
    )
    db.add(cert)
    db.commit()
    db.refresh(cert)
    logger.info("Certidão %s criada (grupo=%s, usuario=%s)", cert.id, cert.grupo_id, ctx.usuario_id)
    return cert


def atualizar(db: Session, certidao_id: str, body: CertidaoUpdate, ctx: AuthContext) -> Certidao:
    cert = _buscar(db, certidao_id)
    acesso.verificar_edicao(cert.grupo_id, ctx)

    patch = CertidaoPatch.do_corpo(body)
    if patch.grupo_id is not AUSENTE and patch.grupo_id != cert.grupo_id:
        acesso.verificar_atribuicao_grupo(patch.grupo_id, ctx)
        _validar_grupo(db, patch.grupo_id)

    _validar_datas(
        patch.valor_ou("data_emissao", cert.data_emissao),
        patch.valor_ou("data_validade", cert.data_validade),
    )
    if patch.empresa is not AUSENTE or patch.tipo is not AUSENTE:
        _validar_empresa_tipo(db, patch.valor_ou("empresa", cert.empresa), patch.valor_ou("tipo", cert.tipo))

    aplicar_patch(cert, patch)
    _sincronizar_exclusao(cert)
    db.commit()
    db.refresh(cert)
    return cert


def _mudar_status(db: Session, certidao_id: str, ctx: AuthContext, status: str) -> Certidao:
    cert = _buscar(db, certidao_id)
    acesso.verificar_edicao(cert.grupo_id, ctx)
    cert.status = status
    cert.data_exclusao = _agora() if status == STATUS_LIXEIRA else None
    db.commit()
    db.refresh(cert)
    logger.info("Certidão %s -> %s (usuario=%s)", cert.id, status, ctx.usuario_id)
    return cert


def arquivar(db: Session, certidao_id: str, ctx: AuthContext) -> Certidao:
    return _mudar_status(db, certidao_id, ctx, STATUS_ARQUIVADA)


def restaurar(db: Session, certidao_id: str, ctx: AuthContext) -> Certidao:
    return _mudar_status(db, certidao_id, ctx, STATUS_ATIVA)


def enviar_para_lixeira(db: Session, certidao_id: str, ctx: AuthContext) -> Certidao:
    return _mudar_status(db, certidao_id, ctx, STATUS_LIXEIRA)


def excluir(db: Session, certidao_id: str, ctx: AuthContext) -> None:
    """Exclusão definitiva (remove a linha); a lixeira é enviar_para_lixeira."""
    cert = _buscar(db, certidao_id)
    acesso.verificar_edicao(cert.grupo_id, ctx)
    db.delete(cert)
    db.commit()
    logger.info("Certidão %s excluída definitivamente (usuario=%s)", certidao_id, ctx.usuario_id)


def duplicar(db: Session, certidao_id: str, ctx: AuthContext) -> Certidao:
    origem = _buscar(db, certidao_id)
    acesso.verificar_edicao(origem.grupo_id, ctx)

    copia = Certidao(
        empresa=origem.empresa,
        tipo=origem.tipo,
        nome=origem.nome,
        descricao=origem.descricao,
        data_emissao=origem.data_emissao,
        data_validade=origem.data_validade,
        tipo_documento=origem.tipo_documento,
        url_documento=origem.url_documento,
        alerta_ativo=origem.alerta_ativo,
        notificar_dias_antes=origem.notificar_dias_antes,
        observacoes=origem.observacoes,
        pendencias=copy.deepcopy(origem.pendencias or []),
        documentos_adicionais=copy.deepcopy(origem.documentos_adicionais or []),
        notas=copy.deepcopy(origem.notas or []),
        status=STATUS_ATIVA,
        grupo_id=origem.grupo_id,
    )
    db.add(copia)
    db.commit()
    db.refresh(copia)
    return copia
