from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database.connection import Base


class Grupo(Base):
    __tablename__ = 'tb_grupo'

    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String(200), nullable=False)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    membros = relationship("UsuarioGrupo", back_populates="grupo", cascade="all, delete-orphan")
    empresas = relationship("GrupoEmpresa", back_populates="grupo", cascade="all, delete-orphan")


class GrupoEmpresa(Base):
    __tablename__ = 'tb_grupo_empresa'
    __table_args__ = (UniqueConstraint('grupo_id', 'empresa_id', name='uq_grupo_empresa'),)

    id = Column(Integer, primary_key=True, index=True)
    grupo_id = Column(Integer, ForeignKey('tb_grupo.id', ondelete="CASCADE"), nullable=False, index=True)
    empresa_id = Column(Integer, ForeignKey('tb_empresa.id', ondelete="CASCADE"), nullable=False, index=True)

    grupo = relationship("Grupo", back_populates="empresas")
    empresa = relationship("Empresa", back_populates="grupos")
