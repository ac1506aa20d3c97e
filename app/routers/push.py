from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.models.user import Usuario
from app.schemas.notificacao import PushSubscribeIn, UnsubscribeIn, UnsubscribeOut, VapidKeyOut
from app.services import notificacao as notificacao_service
from app.services.push import EntregadorPush
from app.utils.auth import get_usuario_atual

router = APIRouter(prefix="/api/push", tags=["push"])


def get_entregador(request: Request) -> EntregadorPush:
    # criado uma vez em main.py
    return request.app.state.entregador_push


@router.get("/vapid-key", response_model=VapidKeyOut)
def vapid_key(entregador: EntregadorPush = Depends(get_entregador)):
    return VapidKeyOut(public_key=entregador.chave_publica())


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe(
    payload: PushSubscribeIn,
    usuario: Usuario = Depends(get_usuario_atual),
    db: Session = Depends(get_db),
):
    notificacao_service.inscrever(db, usuario.id, payload)
    return {"ok": True}


@router.post("/unsubscribe", response_model=UnsubscribeOut)
def unsubscribe(
    payload: UnsubscribeIn,
    usuario: Usuario = Depends(get_usuario_atual),
    db: Session = Depends(get_db),
):
    return notificacao_service.desinscrever(db, usuario.id, payload.endpoint)
