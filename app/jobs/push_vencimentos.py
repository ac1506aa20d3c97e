# app/jobs/push_vencimentos.py
"""
Job de push para certidões próximas do vencimento.

Roda a cada minuto no mesmo event loop da API. Em cada tick:
  1. carrega os usuários com notificações ligadas, config salva e ao menos uma inscrição;
  2. sai cedo se ninguém tem o horário (HH:MM) do tick ou se nenhuma frequência vale hoje;
  3. para cada usuário devido, busca as certidões ativas com alerta ligado que vencem
     em [hoje, hoje + diasAntes], filtradas pela mesma regra de visibilidade da API;
  4. envia um único push com o resumo (até 10 itens) para todas as inscrições do usuário.
Um mesmo minuto (data e HH:MM) nunca é avaliado duas vezes, mesmo que o relógio volte.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.models.certidao import Certidao
from app.models.notificacao import ConfigNotificacao
from app.models.user import Usuario
from app.services import acesso
from app.services.acesso import AuthContext
from app.services.push import EntregadorPush

logger = logging.getLogger(__name__)

FREQUENCIA_DIARIA = "diaria"
FREQUENCIA_SEMANAL = "semanal"
SEGUNDA_FEIRA = 0

MAX_CERTIDOES_PAYLOAD = 10
TITULO_PUSH = "Siscert: certidões próximas do vencimento"


@dataclass(frozen=True)
class UsuarioElegivel:
    usuario_id: int
    role: str
    dias_antes: int
    frequencia: str
    horario: str
    grupos: Tuple[Tuple[int, str], ...]
    subscriptions: Tuple[dict, ...]


def frequencia_vale_hoje(frequencia: str, hoje: date) -> bool:
    if frequencia == FREQUENCIA_DIARIA:
        return True
    if frequencia == FREQUENCIA_SEMANAL:
        return hoje.weekday() == SEGUNDA_FEIRA
    return False


def montar_payload(certidoes: List[Certidao]) -> dict:
    resumo = []
    for c in certidoes[:MAX_CERTIDOES_PAYLOAD]:
        item = {"id": c.id, "dataValidade": c.data_validade.isoformat(), "empresa": c.empresa}
        if c.nome is not None:
            item["nome"] = c.nome
        resumo.append(item)
    return {
        "title": TITULO_PUSH,
        "body": f"{len(certidoes)} certidão(ões) próxima(s) de vencer.",
        "url": "/",
        "certidoes": resumo,
    }


class JobVencimentos:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        entregador: EntregadorPush,
        relogio: Callable[[], datetime] = datetime.now,
        intervalo: int = 60,
    ):
        self.session_factory = session_factory
        self.entregador = entregador
        self.relogio = relogio
        self.intervalo = intervalo
        self._em_execucao = False
        self._ultimo_minuto: Optional[str] = None
        self._tarefas = set()

    async def executar(self) -> None:
        """Dispara um tick no início de cada intervalo do relógio, até ser cancelado."""
        logger.info("Job de push (vencimentos) iniciado - verifica a cada %ss", self.intervalo)
        while True:
            espera = self.intervalo - (self.relogio().timestamp() % self.intervalo)
            await asyncio.sleep(espera)
            # um tick lento não atrasa o próximo; a sobreposição é barrada em tick()
            tarefa = asyncio.create_task(self.tick())
            self._tarefas.add(tarefa)
            tarefa.add_done_callback(self._tarefas.discard)

    async def tick(self, agora: Optional[datetime] = None) -> int:
        """Avalia um tick e retorna quantos usuários receberam push."""
        if self._em_execucao:
            logger.warning("Tick anterior do job de vencimentos ainda em execução; pulando")
            return 0
        agora = agora or self.relogio()
        # relógio ajustado para trás pode repetir um HH:MM já avaliado
        minuto = agora.strftime("%Y-%m-%d %H:%M")
        if minuto == self._ultimo_minuto:
            logger.warning("Minuto %s já avaliado pelo job de vencimentos; pulando", minuto)
            return 0
        self._ultimo_minuto = minuto
        self._em_execucao = True
        try:
            return await self._avaliar(agora)
        except Exception:
            logger.exception("Erro no job de push vencimentos")
            return 0
        finally:
            self._em_execucao = False

    async def _avaliar(self, agora: datetime) -> int:
        horario = agora.strftime("%H:%M")
        hoje = agora.date()

        elegiveis = await asyncio.to_thread(self.carregar_elegiveis)
        no_horario = [u for u in elegiveis if u.horario == horario]
        if not no_horario:
            return 0
        devidos = [u for u in no_horario if frequencia_vale_hoje(u.frequencia, hoje)]
        if not devidos:
            return 0

        logger.info("Job de vencimentos %s: %s usuário(s) no horário", horario, len(devidos))
        resultados = await asyncio.gather(
            *(self._notificar(u, hoje) for u in devidos), return_exceptions=True
        )
        notificados = 0
        for usuario, resultado in zip(devidos, resultados):
            if isinstance(resultado, Exception):
                logger.error("Falha ao processar push do usuário %s: %s", usuario.usuario_id, resultado)
            elif resultado:
                notificados += 1
        return notificados

    async def _notificar(self, usuario: UsuarioElegivel, hoje: date) -> bool:
        certidoes = await asyncio.to_thread(self.buscar_vencendo, usuario, hoje)
        if not certidoes:
            return False
        payload = montar_payload(certidoes)
        entregues = await self.entregador.enviar_para_usuario(
            self.session_factory, usuario.usuario_id, list(usuario.subscriptions), payload
        )
        logger.info(
            "Push de vencimentos: usuário %s, %s certidão(ões), %s/%s inscrição(ões)",
            usuario.usuario_id, len(certidoes), entregues, len(usuario.subscriptions),
        )
        return entregues > 0

    def carregar_elegiveis(self) -> List[UsuarioElegivel]:
        db = self.session_factory()
        try:
            usuarios = (
                db.query(Usuario)
                .join(ConfigNotificacao, ConfigNotificacao.usuario_id == Usuario.id)
                .filter(ConfigNotificacao.notificacoes_ligado.is_(True))
                .filter(Usuario.push_subscriptions.any())
                .all()
            )
            return [
                UsuarioElegivel(
                    usuario_id=u.id,
                    role=u.role,
                    dias_antes=u.config_notificacao.dias_antes,
                    frequencia=u.config_notificacao.frequencia,
                    horario=u.config_notificacao.horario,
                    grupos=tuple((g.grupo_id, g.acesso) for g in u.grupos),
                    subscriptions=tuple(s.to_dict() for s in u.push_subscriptions),
                )
                for u in usuarios
            ]
        finally:
            db.close()

    def buscar_vencendo(self, usuario: UsuarioElegivel, hoje: date) -> List[Certidao]:
        ctx = AuthContext.montar(usuario.usuario_id, usuario.role, usuario.grupos)
        db = self.session_factory()
        try:
            query = db.query(Certidao).filter(
                Certidao.status == "ativa",
                Certidao.alerta_ativo.is_(True),
                Certidao.data_validade >= hoje,
                Certidao.data_validade <= hoje + timedelta(days=usuario.dias_antes),
            )
            filtro = acesso.filtro_visibilidade(ctx)
            if filtro is not None:
                query = query.filter(filtro)
            return query.order_by(Certidao.data_validade.asc(), Certidao.id.asc()).all()
        finally:
            db.close()
