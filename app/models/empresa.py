from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint, text
from sqlalchemy.orm import relationship
from app.database.connection import Base


class Empresa(Base):
    __tablename__ = "tb_empresa"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    nome = Column(String(200), nullable=False)
    ordem = Column(Integer, nullable=False, default=0)
    ativo = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    cor = Column(String(20), nullable=True)

    grupos = relationship("GrupoEmpresa", back_populates="empresa", cascade="all, delete-orphan")
    tipos_bloqueados = relationship(
        "EmpresaTipoBloqueado", back_populates="empresa", cascade="all, delete-orphan"
    )


class EmpresaTipoBloqueado(Base):
    __tablename__ = "tb_empresa_tipo_bloqueado"
    __table_args__ = (UniqueConstraint("empresa_id", "tipo_certidao_id", name="uq_empresa_tipo"),)

    id = Column(Integer, primary_key=True, index=True)
    empresa_id = Column(Integer, ForeignKey("tb_empresa.id", ondelete="CASCADE"), nullable=False, index=True)
    tipo_certidao_id = Column(
        Integer, ForeignKey("tb_tipo_certidao.id", ondelete="CASCADE"), nullable=False, index=True
    )

    empresa = relationship("Empresa", back_populates="tipos_bloqueados")
    tipo_certidao = relationship("TipoCertidao", back_populates="bloqueios")
