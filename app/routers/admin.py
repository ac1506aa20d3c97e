from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.models.user import Usuario
from app.schemas.admin import (
    AdminStatsOut,
    EmpresaCreate,
    EmpresaOut,
    EmpresaTiposIn,
    EmpresaUpdate,
    GrupoDetalheOut,
    GrupoEmpresasIn,
    GrupoIn,
    GrupoOut,
    GrupoUsuariosIn,
    TipoCertidaoCreate,
    TipoCertidaoOut,
    TipoCertidaoUpdate,
    UsuarioCreate,
    UsuarioGruposIn,
    UsuarioUpdate,
)
from app.schemas.user import UsuarioOut
from app.services import admin as admin_service
from app.utils.auth import exigir_admin

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(exigir_admin)])


@router.get("/stats", response_model=AdminStatsOut)
def stats(db: Session = Depends(get_db)):
    return admin_service.estatisticas(db)


# ---------- usuários ----------
@router.get("/users", response_model=List[UsuarioOut])
def listar_usuarios(db: Session = Depends(get_db)):
    return [admin_service.usuario_para_saida(u) for u in admin_service.listar_usuarios(db)]


@router.post("/users", response_model=UsuarioOut, status_code=status.HTTP_201_CREATED)
def criar_usuario(payload: UsuarioCreate, db: Session = Depends(get_db)):
    return admin_service.usuario_para_saida(admin_service.criar_usuario(db, payload))


@router.put("/users/{usuario_id}", response_model=UsuarioOut)
def atualizar_usuario(usuario_id: int, payload: UsuarioUpdate, db: Session = Depends(get_db)):
    return admin_service.usuario_para_saida(admin_service.atualizar_usuario(db, usuario_id, payload))


@router.patch("/users/{usuario_id}/aprovar", response_model=UsuarioOut)
def aprovar_usuario(
    usuario_id: int,
    admin: Usuario = Depends(exigir_admin),
    db: Session = Depends(get_db),
):
    return admin_service.usuario_para_saida(admin_service.aprovar_usuario(db, usuario_id, admin.id))


@router.patch("/users/{usuario_id}/bloquear", response_model=UsuarioOut)
def bloquear_usuario(usuario_id: int, db: Session = Depends(get_db)):
    return admin_service.usuario_para_saida(admin_service.bloquear_usuario(db, usuario_id))


@router.patch("/users/{usuario_id}/reativar", response_model=UsuarioOut)
def reativar_usuario(
    usuario_id: int,
    admin: Usuario = Depends(exigir_admin),
    db: Session = Depends(get_db),
):
    return admin_service.usuario_para_saida(admin_service.reativar_usuario(db, usuario_id, admin.id))


@router.put("/users/{usuario_id}/grupos", response_model=UsuarioOut)
def definir_grupos_usuario(usuario_id: int, payload: UsuarioGruposIn, db: Session = Depends(get_db)):
    usuario = admin_service.definir_grupos_usuario(db, usuario_id, payload.grupos)
    return admin_service.usuario_para_saida(usuario)


@router.delete("/users/{usuario_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_usuario(usuario_id: int, db: Session = Depends(get_db)):
    admin_service.excluir_usuario(db, usuario_id)


# ---------- grupos ----------
@router.get("/grupos", response_model=List[GrupoOut])
def listar_grupos(db: Session = Depends(get_db)):
    return admin_service.listar_grupos(db)


@router.get("/grupos/{grupo_id}", response_model=GrupoDetalheOut)
def detalhar_grupo(grupo_id: int, db: Session = Depends(get_db)):
    return admin_service.detalhar_grupo(db, grupo_id)


@router.post("/grupos", response_model=GrupoOut, status_code=status.HTTP_201_CREATED)
def criar_grupo(payload: GrupoIn, db: Session = Depends(get_db)):
    return admin_service.criar_grupo(db, payload)


@router.put("/grupos/{grupo_id}", response_model=GrupoOut)
def atualizar_grupo(grupo_id: int, payload: GrupoIn, db: Session = Depends(get_db)):
    return admin_service.atualizar_grupo(db, grupo_id, payload)


@router.delete("/grupos/{grupo_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_grupo(grupo_id: int, db: Session = Depends(get_db)):
    admin_service.excluir_grupo(db, grupo_id)


@router.put("/grupos/{grupo_id}/usuarios", response_model=GrupoDetalheOut)
def definir_usuarios_grupo(grupo_id: int, payload: GrupoUsuariosIn, db: Session = Depends(get_db)):
    return admin_service.definir_usuarios_grupo(db, grupo_id, payload.usuarios)


@router.put("/grupos/{grupo_id}/empresas", response_model=GrupoDetalheOut)
def definir_empresas_grupo(grupo_id: int, payload: GrupoEmpresasIn, db: Session = Depends(get_db)):
    return admin_service.definir_empresas_grupo(db, grupo_id, payload.empresa_ids)


# ---------- tipos de certidão ----------
@router.get("/tipos-certidao", response_model=List[TipoCertidaoOut])
def listar_tipos(db: Session = Depends(get_db)):
    return admin_service.listar_tipos(db)


@router.post("/tipos-certidao", response_model=TipoCertidaoOut, status_code=status.HTTP_201_CREATED)
def criar_tipo(payload: TipoCertidaoCreate, db: Session = Depends(get_db)):
    return admin_service.criar_tipo(db, payload)


@router.put("/tipos-certidao/{tipo_id}", response_model=TipoCertidaoOut)
def atualizar_tipo(tipo_id: int, payload: TipoCertidaoUpdate, db: Session = Depends(get_db)):
    return admin_service.atualizar_tipo(db, tipo_id, payload)


@router.delete("/tipos-certidao/{tipo_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_tipo(tipo_id: int, db: Session = Depends(get_db)):
    admin_service.excluir_tipo(db, tipo_id)


# ---------- empresas ----------
@router.get("/empresas", response_model=List[EmpresaOut])
def listar_empresas(ativos: bool = Query(False), db: Session = Depends(get_db)):
    return [admin_service.empresa_para_saida(e) for e in admin_service.listar_empresas(db, ativos)]


@router.get("/empresas/{empresa_id}", response_model=EmpresaOut)
def obter_empresa(empresa_id: int, db: Session = Depends(get_db)):
    return admin_service.empresa_para_saida(admin_service.obter_empresa(db, empresa_id))


@router.post("/empresas", response_model=EmpresaOut, status_code=status.HTTP_201_CREATED)
def criar_empresa(payload: EmpresaCreate, db: Session = Depends(get_db)):
    return admin_service.empresa_para_saida(admin_service.criar_empresa(db, payload))


@router.put("/empresas/{empresa_id}", response_model=EmpresaOut)
def atualizar_empresa(empresa_id: int, payload: EmpresaUpdate, db: Session = Depends(get_db)):
    return admin_service.empresa_para_saida(admin_service.atualizar_empresa(db, empresa_id, payload))


@router.put("/empresas/{empresa_id}/tipos-bloqueados", response_model=EmpresaOut)
def definir_tipos_bloqueados(empresa_id: int, payload: EmpresaTiposIn, db: Session = Depends(get_db)):
    empresa = admin_service.definir_tipos_bloqueados(db, empresa_id, payload.tipo_ids)
    return admin_service.empresa_para_saida(empresa)


@router.delete("/empresas/{empresa_id}", status_code=status.HTTP_204_NO_CONTENT)
def excluir_empresa(empresa_id: int, db: Session = Depends(get_db)):
    admin_service.excluir_empresa(db, empresa_id)
