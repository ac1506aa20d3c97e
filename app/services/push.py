# app/services/push.py
"""
Envio de Web Push (VAPID) via pywebpush.

As credenciais são lidas uma única vez na subida (ConfigVapid.from_settings).
Sem elas, todo envio falha com PushNaoConfigurado e o job de vencimentos não é iniciado.
"""
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from pywebpush import webpush, WebPushException
from sqlalchemy.orm import Session

from app.models.notificacao import PushSubscription
from app.services.erros import PushNaoConfigurado
from config.settings import settings

logger = logging.getLogger(__name__)

TTL_SEGUNDOS = 60 * 60 * 24
# códigos do serviço de push para inscrição que não existe mais
STATUS_INSCRICAO_EXPIRADA = (404, 410)

MSG_NAO_CONFIGURADO = "Push não configurado (VAPID_PUBLIC_KEY e VAPID_PRIVATE_KEY)"


@dataclass(frozen=True)
class ConfigVapid:
    chave_publica: str
    chave_privada: str
    contato: str

    @classmethod
    def from_settings(cls, cfg=settings) -> Optional["ConfigVapid"]:
        if not cfg.VAPID_PUBLIC_KEY or not cfg.VAPID_PRIVATE_KEY:
            return None
        return cls(
            chave_publica=cfg.VAPID_PUBLIC_KEY,
            chave_privada=cfg.VAPID_PRIVATE_KEY,
            contato=cfg.VAPID_CONTACT,
        )


class FalhaEntrega(Exception):
    """O serviço de push recusou a mensagem; status_code é None em falha de rede."""

    def __init__(self, status_code: Optional[int], mensagem: str):
        super().__init__(mensagem)
        self.status_code = status_code

    @property
    def inscricao_expirada(self) -> bool:
        return self.status_code in STATUS_INSCRICAO_EXPIRADA


class EntregadorPush:
    def __init__(self, config: Optional[ConfigVapid]):
        self.config = config

    def chave_publica(self) -> str:
        if self.config is None:
            raise PushNaoConfigurado(MSG_NAO_CONFIGURADO)
        return self.config.chave_publica

    def enviar(self, subscription: dict, payload: dict) -> None:
        """Envia um payload a uma inscrição ({"endpoint", "keys": {"p256dh", "auth"}})."""
        if self.config is None:
            raise PushNaoConfigurado(MSG_NAO_CONFIGURADO)
        try:
            webpush(
                subscription_info=subscription,
                data=json.dumps(payload, ensure_ascii=False),
                vapid_private_key=self.config.chave_privada,
                # pywebpush altera o dict de claims (aud/exp); cada envio recebe o seu
                vapid_claims={"sub": self.config.contato},
                ttl=TTL_SEGUNDOS,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise FalhaEntrega(status_code, str(e)) from e

    async def enviar_para_usuario(
        self,
        session_factory: Callable[[], Session],
        usuario_id: int,
        subscriptions: List[dict],
        payload: dict,
    ) -> int:
        """
        Envia para todas as inscrições do usuário em paralelo e retorna quantas receberam.
        A falha de uma inscrição não afeta as demais; 404/410 removem a inscrição.
        """
        resultados = await asyncio.gather(
            *(
                asyncio.to_thread(self._enviar_isolado, session_factory, usuario_id, sub, payload)
                for sub in subscriptions
            ),
            return_exceptions=True,
        )
        entregues = 0
        for sub, resultado in zip(subscriptions, resultados):
            if isinstance(resultado, Exception):
                logger.error(
                    "Erro inesperado no push do usuário %s (%s): %s",
                    usuario_id, sub.get("endpoint"), resultado,
                )
            elif resultado:
                entregues += 1
        return entregues

    def _enviar_isolado(self, session_factory, usuario_id: int, sub: dict, payload: dict) -> bool:
        try:
            self.enviar(sub, payload)
        except FalhaEntrega as e:
            if e.inscricao_expirada:
                logger.warning(
                    "Inscrição push expirada para o usuário %s (HTTP %s). Removendo: %s",
                    usuario_id, e.status_code, sub["endpoint"],
                )
                remover_inscricao(session_factory, usuario_id, sub["endpoint"])
            else:
                logger.error(
                    "Falha ao enviar push para o usuário %s (%s): %s",
                    usuario_id, sub["endpoint"], e,
                )
            return False
        logger.info("Push enviado para o usuário %s (%s)", usuario_id, sub["endpoint"])
        return True


def remover_inscricao(session_factory, usuario_id: int, endpoint: str) -> bool:
    db = session_factory()
    try:
        removidas = (
            db.query(PushSubscription)
            .filter(PushSubscription.usuario_id == usuario_id, PushSubscription.endpoint == endpoint)
            .delete(synchronize_session=False)
        )
        db.commit()
        return removidas > 0
    finally:
        db.close()
