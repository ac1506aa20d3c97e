from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.certidao import CertidaoCreate, CertidaoOut, CertidaoUpdate, StatusCertidao
from app.services import certidao as certidao_service
from app.services.acesso import AuthContext
from app.utils.auth import get_auth_context

router = APIRouter(prefix="/api/certidoes", tags=["certidoes"])


@router.get("", response_model=List[CertidaoOut])
def listar_certidoes(
    status_filtro: Optional[StatusCertidao] = Query(None, alias="status"),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    certidoes = certidao_service.listar(db, ctx, status_filtro)
    return [certidao_service.para_saida(c, ctx) for c in certidoes]


@router.post("", response_model=CertidaoOut, status_code=status.HTTP_201_CREATED)
def criar_certidao(
    payload: CertidaoCreate,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    cert = certidao_service.criar(db, payload, ctx)
    return certidao_service.para_saida(cert, ctx)


@router.get("/{certidao_id}", response_model=CertidaoOut)
def obter_certidao(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return certidao_service.para_saida(certidao_service.obter(db, certidao_id, ctx), ctx)


@router.put("/{certidao_id}", response_model=CertidaoOut)
def atualizar_certidao(
    certidao_id: str,
    payload: CertidaoUpdate,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    cert = certidao_service.atualizar(db, certidao_id, payload, ctx)
    return certidao_service.para_saida(cert, ctx)


@router.delete("/{certidao_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_certidao(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    certidao_service.excluir(db, certidao_id, ctx)


@router.patch("/{certidao_id}/arquivar", response_model=CertidaoOut)
def arquivar_certidao(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return certidao_service.para_saida(certidao_service.arquivar(db, certidao_id, ctx), ctx)


@router.patch("/{certidao_id}/restaurar", response_model=CertidaoOut)
def restaurar_certidao(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return certidao_service.para_saida(certidao_service.restaurar(db, certidao_id, ctx), ctx)


@router.patch("/{certidao_id}/lixeira", response_model=CertidaoOut)
def enviar_para_lixeira(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return certidao_service.para_saida(certidao_service.enviar_para_lixeira(db, certidao_id, ctx), ctx)


@router.post("/{certidao_id}/duplicar", response_model=CertidaoOut, status_code=status.HTTP_201_CREATED)
def duplicar_certidao(
    certidao_id: str,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return certidao_service.para_saida(certidao_service.duplicar(db, certidao_id, ctx), ctx)
