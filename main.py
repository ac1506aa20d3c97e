import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.database.connection import Base, SessionLocal, engine
# importa os módulos de modelos para registrar as tabelas no Base
from app.models import blacklist, certidao, empresa, grupo, notificacao, user  # noqa: F401
from app.jobs.push_vencimentos import JobVencimentos
from app.routers import admin as admin_router
from app.routers import catalogo as catalogo_router
from app.routers import certidao as certidao_router
from app.routers import notificacoes as notificacoes_router
from app.routers import push as push_router
from app.routers import user as usuario_router
from app.services.auth import limpar_blacklist
from app.services.erros import ErroServico
from app.services.push import ConfigVapid, EntregadorPush
from config.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# cria as tabelas a partir dos modelos importados acima
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        removidos = limpar_blacklist(db)
        if removidos:
            logger.info("Blacklist: %s token(s) expirado(s) removido(s)", removidos)
    finally:
        db.close()

    tarefa = None
    entregador = app.state.entregador_push
    if entregador.config is None:
        logger.warning("VAPID_PUBLIC_KEY/VAPID_PRIVATE_KEY ausentes: job de push desativado")
    else:
        job = JobVencimentos(SessionLocal, entregador, intervalo=settings.PUSH_JOB_INTERVAL_SECONDS)
        tarefa = asyncio.create_task(job.executar())

    yield

    if tarefa is not None:
        tarefa.cancel()
        with suppress(asyncio.CancelledError):
            await tarefa


app = FastAPI(title="Siscert API", lifespan=lifespan)
app.state.entregador_push = EntregadorPush(ConfigVapid.from_settings())

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ErroServico)
async def erro_servico_handler(request: Request, exc: ErroServico):
    content = {"detail": exc.mensagem, "codigo": exc.codigo}
    if getattr(exc, "campo", None):
        content["campo"] = exc.campo
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def erro_inesperado_handler(request: Request, exc: Exception):
    logger.exception("Erro inesperado em %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Erro interno", "codigo": "UNEXPECTED"})


# rotas
app.include_router(usuario_router.router)
app.include_router(certidao_router.router)
app.include_router(catalogo_router.router)
app.include_router(notificacoes_router.router)
app.include_router(push_router.router)
app.include_router(admin_router.router)


@app.get("/")
def root():
    return {"msg": "API ok"}
