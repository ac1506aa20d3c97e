from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from jose import jwt, JWTError

from app.services.erros import ErroNaoAutenticado
from config.settings import settings


def criar_token(data: dict, expires_in: Optional[int] = None) -> str:
    """Assina um JWT com exp e jti (o jti é o que vai para a blacklist no logout)."""
    minutos = settings.ACCESS_TOKEN_EXPIRE_MINUTES if expires_in is None else expires_in
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutos)
    to_encode.update({"exp": expire, "jti": str(uuid4())})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verificar_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def decode_token(token: str) -> dict:
    payload = verificar_token(token)
    if payload is None:
        raise ErroNaoAutenticado("Token inválido ou expirado")
    return payload
