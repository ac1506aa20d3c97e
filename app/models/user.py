from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database.connection import Base


class Usuario(Base):
    __tablename__ = 'tb_usuario'

    id = Column(Integer, primary_key=True, index=True)
    login = Column(String(100), unique=True, nullable=False, index=True)
    senha_hash = Column(String, nullable=False)
    nome = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default='usuario')          # admin | usuario
    status = Column(String(20), nullable=False, default='pendente')       # pendente | ativo | bloqueado
    aprovado_em = Column(DateTime(timezone=True), nullable=True)
    aprovado_por = Column(Integer, nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    grupos = relationship("UsuarioGrupo", back_populates="usuario", cascade="all, delete-orphan")
    config_notificacao = relationship(
        "ConfigNotificacao", back_populates="usuario", uselist=False, cascade="all, delete-orphan"
    )
    push_subscriptions = relationship(
        "PushSubscription", back_populates="usuario", cascade="all, delete-orphan"
    )


class UsuarioGrupo(Base):
    __tablename__ = 'tb_usuario_grupo'
    __table_args__ = (UniqueConstraint('usuario_id', 'grupo_id', name='uq_usuario_grupo'),)

    id = Column(Integer, primary_key=True, index=True)
    usuario_id = Column(Integer, ForeignKey('tb_usuario.id', ondelete="CASCADE"), nullable=False, index=True)
    grupo_id = Column(Integer, ForeignKey('tb_grupo.id', ondelete="CASCADE"), nullable=False, index=True)
    acesso = Column(String(20), nullable=False, default='comum')          # comum | visualizador

    usuario = relationship("Usuario", back_populates="grupos")
    grupo = relationship("Grupo", back_populates="membros")
