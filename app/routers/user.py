from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.models.user import Usuario
from app.schemas.user import CadastroIn, CadastroOut, LoginIn, LoginOut, TrocarSenhaIn, UsuarioOut
from app.services import auth as auth_service
from app.utils.auth import get_token_payload, get_usuario_atual
from config.settings import settings

router = APIRouter(prefix="/api/auth", tags=["auth"])

is_prod = settings.ENVIRONMENT == "prod"

cookie_env = {
    "secure": is_prod,
    "samesite": "Strict" if is_prod else "Lax"
}


@router.post("/cadastro", response_model=CadastroOut, status_code=status.HTTP_201_CREATED)
def cadastro(payload: CadastroIn, db: Session = Depends(get_db)):
    return auth_service.cadastrar(db, payload)


@router.post("/login", response_model=LoginOut)
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    resultado = auth_service.login(db, payload)
    # o frontend usa o Bearer; o cookie atende quem navega direto na API
    response.set_cookie(
        "access_token", resultado.token,
        httponly=True, max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60, path="/", **cookie_env
    )
    return resultado


@router.post("/trocar-senha")
def trocar_senha(
    payload: TrocarSenhaIn,
    usuario: Usuario = Depends(get_usuario_atual),
    db: Session = Depends(get_db),
):
    auth_service.trocar_senha(db, usuario, payload)
    return {"message": "Senha alterada com sucesso"}


@router.get("/me", response_model=UsuarioOut)
def get_me(usuario: Usuario = Depends(get_usuario_atual)):
    return UsuarioOut.model_validate(usuario)


@router.post("/logout")
def logout(
    response: Response,
    payload: dict = Depends(get_token_payload),
    db: Session = Depends(get_db),
):
    auth_service.logout(db, payload)
    response.delete_cookie("access_token", path="/")
    return {"message": "Logout realizado com sucesso"}
