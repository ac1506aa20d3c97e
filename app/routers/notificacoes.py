from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.models.user import Usuario
from app.schemas.notificacao import ConfigNotificacoes
from app.services import notificacao as notificacao_service
from app.utils.auth import get_usuario_atual

router = APIRouter(prefix="/api/notificacoes", tags=["notificacoes"])


@router.get("/config", response_model=ConfigNotificacoes)
def obter_config(usuario: Usuario = Depends(get_usuario_atual), db: Session = Depends(get_db)):
    return notificacao_service.obter_config(db, usuario.id)


@router.put("/config", response_model=ConfigNotificacoes)
def salvar_config(
    payload: ConfigNotificacoes,
    usuario: Usuario = Depends(get_usuario_atual),
    db: Session = Depends(get_db),
):
    return notificacao_service.salvar_config(db, usuario.id, payload)
