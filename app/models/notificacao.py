from sqlalchemy import Column, Integer, String, Boolean, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.database.connection import Base


class ConfigNotificacao(Base):
    __tablename__ = "tb_config_notificacao"

    id = Column(Integer, primary_key=True, index=True)
    usuario_id = Column(Integer, ForeignKey("tb_usuario.id", ondelete="CASCADE"), nullable=False, unique=True)
    notificacoes_ligado = Column(Boolean, nullable=False, default=True)
    dias_antes = Column(Integer, nullable=False, default=30)
    frequencia = Column(String(10), nullable=False, default="diaria")   # diaria | semanal
    horario = Column(String(5), nullable=False, default="09:00")        # HH:MM
    enviar_para_google_calendar = Column(Boolean, nullable=False, default=False)

    usuario = relationship("Usuario", back_populates="config_notificacao")


class PushSubscription(Base):
    __tablename__ = "tb_push_subscription"
    __table_args__ = (UniqueConstraint("usuario_id", "endpoint", name="uq_push_usuario_endpoint"),)

    id = Column(Integer, primary_key=True, index=True)
    usuario_id = Column(Integer, ForeignKey("tb_usuario.id", ondelete="CASCADE"), nullable=False, index=True)
    endpoint = Column(String(500), nullable=False)
    p256dh = Column(Text, nullable=False)
    auth = Column(Text, nullable=False)
    user_agent = Column(String(255), nullable=True)
    criado_em = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    usuario = relationship("Usuario", back_populates="push_subscriptions")

    def to_dict(self):
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }
