from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.admin import EmpresaOut, GrupoOut, TipoCertidaoOut
from app.services import admin as admin_service
from app.services.acesso import AuthContext
from app.utils.auth import get_auth_context

router = APIRouter(prefix="/api", tags=["catalogo"])


@router.get("/tipos-certidao", response_model=List[TipoCertidaoOut])
def listar_tipos_certidao(db: Session = Depends(get_db)):
    return admin_service.listar_tipos(db, apenas_ativos=True)


@router.get("/empresas", response_model=List[EmpresaOut])
def listar_empresas(
    ativos: bool = Query(True),
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    empresas = admin_service.empresas_do_usuario(db, ctx, apenas_ativas=ativos)
    return [admin_service.empresa_para_saida(e) for e in empresas]


@router.get("/grupos", response_model=List[GrupoOut])
def listar_grupos(ctx: AuthContext = Depends(get_auth_context), db: Session = Depends(get_db)):
    return admin_service.grupos_do_usuario(db, ctx)
