# app/services/erros.py
from fastapi import status


class ErroServico(Exception):
    """Erro de regra de negócio; main.py converte em resposta {"detail", "codigo"}."""

    status_code = status.HTTP_400_BAD_REQUEST
    codigo = "VALIDATION"

    def __init__(self, mensagem: str):
        super().__init__(mensagem)
        self.mensagem = mensagem


class ErroValidacao(ErroServico):
    status_code = status.HTTP_400_BAD_REQUEST
    codigo = "VALIDATION"

    def __init__(self, mensagem: str, campo: str | None = None):
        super().__init__(mensagem)
        self.campo = campo


class ErroNaoAutenticado(ErroServico):
    status_code = status.HTTP_401_UNAUTHORIZED
    codigo = "UNAUTHORIZED"


class ErroProibido(ErroServico):
    status_code = status.HTTP_403_FORBIDDEN
    codigo = "FORBIDDEN"


class ErroProibidoEdicao(ErroProibido):
    codigo = "FORBIDDEN_EDIT"


class ErroNaoEncontrado(ErroServico):
    status_code = status.HTTP_404_NOT_FOUND
    codigo = "NOT_FOUND"


class ErroConflito(ErroServico):
    status_code = status.HTTP_409_CONFLICT
    codigo = "CONFLICT"


class PushNaoConfigurado(ErroServico):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    codigo = "CONFIGURATION"
