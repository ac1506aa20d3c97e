from pydantic import ConfigDict, Field, field_validator
from typing import Optional, Literal, Annotated
from urllib.parse import urlparse
import re

from app.schemas.base import CamelModel


class ConfigNotificacoes(CamelModel):
    notificacoes_ligado: bool
    dias_antes: Annotated[int, Field(ge=0, le=365)]
    frequencia: Literal["diaria", "semanal"]
    horario: str
    enviar_para_google_calendar: bool

    @field_validator("horario")
    @classmethod
    def _normaliza_horario(cls, v: str) -> str:
        """Aceita H:MM ou HH:MM e guarda sempre como HH:MM (comparado com o relógio do job)."""
        m = re.fullmatch(r"(\d{1,2}):(\d{2})", (v or "").strip())
        if not m:
            raise ValueError("Horário deve ser HH:mm")
        hora, minuto = int(m.group(1)), int(m.group(2))
        if hora > 23 or minuto > 59:
            raise ValueError("Horário deve ser HH:mm")
        return f"{hora:02d}:{minuto:02d}"


CONFIG_NOTIFICACOES_PADRAO = ConfigNotificacoes(
    notificacoes_ligado=True,
    dias_antes=30,
    frequencia="diaria",
    horario="09:00",
    enviar_para_google_calendar=False,
)


class PushKeys(CamelModel):
    p256dh: Annotated[str, Field(min_length=1)]
    auth: Annotated[str, Field(min_length=1)]


class PushSubscribeIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    endpoint: str
    keys: PushKeys
    user_agent: Optional[Annotated[str, Field(max_length=255)]] = None

    @field_validator("endpoint")
    @classmethod
    def _valida_endpoint(cls, v: str) -> str:
        url = urlparse(v or "")
        if url.scheme not in ("http", "https") or not url.netloc:
            raise ValueError("endpoint deve ser uma URL válida")
        return v


class UnsubscribeIn(CamelModel):
    endpoint: Annotated[str, Field(min_length=1)]


class UnsubscribeOut(CamelModel):
    ok: bool
    deleted: bool


class VapidKeyOut(CamelModel):
    public_key: str
