from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, JSON, ForeignKey, func, text
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.database.connection import Base


class TipoCertidao(Base):
    __tablename__ = "tb_tipo_certidao"

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False, unique=True)
    ordem = Column(Integer, nullable=False, default=0)
    ativo = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    bloqueios = relationship("EmpresaTipoBloqueado", back_populates="tipo_certidao", cascade="all, delete-orphan")


class Certidao(Base):
    __tablename__ = "tb_certidao"

    id                    = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    empresa               = Column(String(120), nullable=False, index=True)   # slug da empresa
    tipo                  = Column(String(200), nullable=False)
    nome                  = Column(String(200), nullable=True)
    descricao             = Column(Text, nullable=True)
    data_emissao          = Column(Date, nullable=False)
    data_validade         = Column(Date, nullable=False, index=True)
    tipo_documento        = Column(String(20), nullable=False)                # PDF | Link | Documento
    url_documento         = Column(Text, nullable=True)
    alerta_ativo          = Column(Boolean, nullable=False, default=True)
    notificar_dias_antes  = Column(Integer, nullable=True)
    observacoes           = Column(Text, nullable=True)
    pendencias            = Column(JSON, nullable=False, default=list)
    documentos_adicionais = Column(JSON, nullable=False, default=list)
    notas                 = Column(JSON, nullable=False, default=list)
    status                = Column(String(20), nullable=False, default="ativa", index=True)  # ativa | arquivada | lixeira
    data_exclusao         = Column(DateTime(timezone=True), nullable=True)
    grupo_id              = Column(Integer, ForeignKey("tb_grupo.id"), nullable=True, index=True)
    criado_em             = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    atualizado_em         = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())

    grupo = relationship("Grupo")
