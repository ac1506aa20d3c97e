from pydantic import Field, StringConstraints, model_validator
from typing import Optional, List, Literal, Annotated
from datetime import date, datetime

from app.schemas.base import CamelModel

TipoDocumento = Literal["PDF", "Link", "Documento"]
StatusCertidao = Literal["ativa", "arquivada", "lixeira"]

TextoObrigatorio = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
DiasAntes = Annotated[int, Field(ge=1, le=365)]
GrupoId = Annotated[int, Field(gt=0)]


class Pendencia(CamelModel):
    id: str
    titulo: str
    descricao: Optional[str] = None
    prazo: Optional[str] = None
    concluida: bool


class DocumentoAdicional(CamelModel):
    id: str
    nome: str
    url: str
    tipo: TipoDocumento
    data_adicao: str


class Nota(CamelModel):
    id: str
    texto: str
    data_hora: str


class CertidaoCreate(CamelModel):
    empresa: TextoObrigatorio
    tipo: TextoObrigatorio
    nome: Optional[str] = None
    descricao: Optional[str] = None
    data_emissao: date
    data_validade: date
    tipo_documento: TipoDocumento
    url_documento: Optional[str] = None
    alerta_ativo: bool = True
    notificar_dias_antes: Optional[DiasAntes] = None
    observacoes: Optional[str] = None
    pendencias: List[Pendencia] = Field(default_factory=list)
    documentos_adicionais: List[DocumentoAdicional] = Field(default_factory=list)
    notas: List[Nota] = Field(default_factory=list)
    grupo_id: Optional[GrupoId] = None


# Campos que aceitam omissão mas não aceitam null explícito no PUT
CAMPOS_NAO_ANULAVEIS = {
    "empresa": "empresa",
    "tipo": "tipo",
    "dataEmissao": "data_emissao",
    "dataValidade": "data_validade",
    "tipoDocumento": "tipo_documento",
    "alertaAtivo": "alerta_ativo",
    "pendencias": "pendencias",
    "documentosAdicionais": "documentos_adicionais",
    "notas": "notas",
    "status": "status",
}


class CertidaoUpdate(CamelModel):
    """Atualização parcial: só os campos presentes no corpo são aplicados."""

    empresa: Optional[TextoObrigatorio] = None
    tipo: Optional[TextoObrigatorio] = None
    nome: Optional[str] = None
    descricao: Optional[str] = None
    data_emissao: Optional[date] = None
    data_validade: Optional[date] = None
    tipo_documento: Optional[TipoDocumento] = None
    url_documento: Optional[str] = None
    alerta_ativo: Optional[bool] = None
    notificar_dias_antes: Optional[DiasAntes] = None
    observacoes: Optional[str] = None
    pendencias: Optional[List[Pendencia]] = None
    documentos_adicionais: Optional[List[DocumentoAdicional]] = None
    notas: Optional[List[Nota]] = None
    status: Optional[StatusCertidao] = None
    data_exclusao: Optional[datetime] = None
    grupo_id: Optional[GrupoId] = None

    @model_validator(mode="before")
    @classmethod
    def _rejeita_null_em_obrigatorios(cls, data):
        if isinstance(data, dict):
            for alias, campo in CAMPOS_NAO_ANULAVEIS.items():
                for chave in (alias, campo):
                    if chave in data and data[chave] is None:
                        raise ValueError(f"{alias} não pode ser nulo")
        return data


class CertidaoOut(CamelModel):
    id: str
    empresa: str
    tipo: str
    nome: Optional[str] = None
    descricao: Optional[str] = None
    data_emissao: date
    data_validade: date
    tipo_documento: str
    url_documento: Optional[str] = None
    alerta_ativo: bool
    notificar_dias_antes: Optional[int] = None
    observacoes: Optional[str] = None
    pendencias: List[Pendencia] = Field(default_factory=list)
    documentos_adicionais: List[DocumentoAdicional] = Field(default_factory=list)
    notas: List[Nota] = Field(default_factory=list)
    status: str
    data_exclusao: Optional[datetime] = None
    grupo_id: Optional[int] = None
    pode_editar: bool = False
