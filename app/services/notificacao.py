# app/services/notificacao.py
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.notificacao import ConfigNotificacao, PushSubscription
from app.schemas.notificacao import (
    CONFIG_NOTIFICACOES_PADRAO,
    ConfigNotificacoes,
    PushSubscribeIn,
    UnsubscribeOut,
)


def _buscar_config(db: Session, usuario_id: int) -> Optional[ConfigNotificacao]:
    return db.query(ConfigNotificacao).filter(ConfigNotificacao.usuario_id == usuario_id).first()


def obter_config(db: Session, usuario_id: int) -> ConfigNotificacoes:
    config = _buscar_config(db, usuario_id)
    if not config:
        return CONFIG_NOTIFICACOES_PADRAO.model_copy()
    return ConfigNotificacoes.model_validate(config)


def _gravar_config(db: Session, usuario_id: int, body: ConfigNotificacoes) -> ConfigNotificacao:
    config = _buscar_config(db, usuario_id)
    if not config:
        config = ConfigNotificacao(usuario_id=usuario_id)
        db.add(config)

    config.notificacoes_ligado = body.notificacoes_ligado
    config.dias_antes = body.dias_antes
    config.frequencia = body.frequencia
    config.horario = body.horario
    config.enviar_para_google_calendar = body.enviar_para_google_calendar
    db.commit()
    return config


def salvar_config(db: Session, usuario_id: int, body: ConfigNotificacoes) -> ConfigNotificacoes:
    try:
        config = _gravar_config(db, usuario_id, body)
    except IntegrityError:
        db.rollback()
        config = _gravar_config(db, usuario_id, body)
    db.refresh(config)
    return ConfigNotificacoes.model_validate(config)


def _buscar_inscricao(db: Session, usuario_id: int, endpoint: str) -> Optional[PushSubscription]:
    return (
        db.query(PushSubscription)
        .filter(PushSubscription.usuario_id == usuario_id, PushSubscription.endpoint == endpoint)
        .first()
    )


def _gravar_inscricao(db: Session, usuario_id: int, body: PushSubscribeIn) -> None:
    sub = _buscar_inscricao(db, usuario_id, body.endpoint)
    if not sub:
        sub = PushSubscription(usuario_id=usuario_id, endpoint=body.endpoint)
        db.add(sub)
    sub.p256dh = body.keys.p256dh
    sub.auth = body.keys.auth
    sub.user_agent = body.user_agent
    db.commit()


def inscrever(db: Session, usuario_id: int, body: PushSubscribeIn) -> None:
    """Cria ou atualiza a inscrição (usuário, endpoint)."""
    try:
        _gravar_inscricao(db, usuario_id, body)
    except IntegrityError:
        # a mesma inscrição foi criada em paralelo; agora ela existe e é atualizada
        db.rollback()
        _gravar_inscricao(db, usuario_id, body)


def desinscrever(db: Session, usuario_id: int, endpoint: str) -> UnsubscribeOut:
    removidas = (
        db.query(PushSubscription)
        .filter(PushSubscription.usuario_id == usuario_id, PushSubscription.endpoint == endpoint)
        .delete(synchronize_session=False)
    )
    db.commit()
    return UnsubscribeOut(ok=True, deleted=removidas > 0)
