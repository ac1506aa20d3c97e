"""
Configuração compartilhada para testes pytest.
"""
import os
import tempfile
from datetime import date

import pytest

# Configurar variáveis de ambiente antes de importar a aplicação
_TMP_DIR = tempfile.mkdtemp(prefix="siscert-tests-")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'siscert.db')}"
os.environ["VAPID_PUBLIC_KEY"] = ""
os.environ["VAPID_PRIVATE_KEY"] = ""


class Fabrica:
    """Cria registros direto no banco para montar cenários."""

    def __init__(self, db):
        self.db = db

    def usuario(self, login, senha="segredo123", role="usuario", status="ativo", grupos=()):
        from app.models.user import Usuario, UsuarioGrupo
        from app.utils.password import gerar_hash_senha

        usuario = Usuario(
            login=login,
            senha_hash=gerar_hash_senha(senha),
            nome=login.title(),
            role=role,
            status=status,
        )
        self.db.add(usuario)
        self.db.flush()
        for grupo_id, acesso in grupos:
            self.db.add(UsuarioGrupo(usuario_id=usuario.id, grupo_id=grupo_id, acesso=acesso))
        self.db.commit()
        self.db.refresh(usuario)
        return usuario

    def grupo(self, nome="Financeiro"):
        from app.models.grupo import Grupo

        grupo = Grupo(nome=nome)
        self.db.add(grupo)
        self.db.commit()
        self.db.refresh(grupo)
        return grupo

    def empresa(self, slug="acme", nome="ACME", ativo=True):
        from app.models.empresa import Empresa

        empresa = Empresa(slug=slug, nome=nome, ativo=ativo)
        self.db.add(empresa)
        self.db.commit()
        self.db.refresh(empresa)
        return empresa

    def tipo(self, nome="FGTS", ativo=True):
        from app.models.certidao import TipoCertidao

        tipo = TipoCertidao(nome=nome, ativo=ativo)
        self.db.add(tipo)
        self.db.commit()
        self.db.refresh(tipo)
        return tipo

    def certidao(self, **campos):
        from app.models.certidao import Certidao

        dados = {
            "empresa": "acme",
            "tipo": "FGTS",
            "nome": "Certidão FGTS",
            "data_emissao": date(2025, 1, 1),
            "data_validade": date(2025, 12, 31),
            "tipo_documento": "PDF",
            "alerta_ativo": True,
            "status": "ativa",
            "pendencias": [],
            "documentos_adicionais": [],
            "notas": [],
            "grupo_id": None,
        }
        dados.update(campos)
        cert = Certidao(**dados)
        self.db.add(cert)
        self.db.commit()
        self.db.refresh(cert)
        return cert

    def config_notificacao(self, usuario_id, **campos):
        from app.models.notificacao import ConfigNotificacao

        dados = {
            "notificacoes_ligado": True,
            "dias_antes": 30,
            "frequencia": "diaria",
            "horario": "09:00",
            "enviar_para_google_calendar": False,
        }
        dados.update(campos)
        config = ConfigNotificacao(usuario_id=usuario_id, **dados)
        self.db.add(config)
        self.db.commit()
        return config

    def inscricao(self, usuario_id, endpoint):
        from app.models.notificacao import PushSubscription

        sub = PushSubscription(usuario_id=usuario_id, endpoint=endpoint, p256dh="chave-p256dh", auth="chave-auth")
        self.db.add(sub)
        self.db.commit()
        return sub

    def headers(self, usuario):
        from app.services.auth import gerar_token

        return {"Authorization": f"Bearer {gerar_token(usuario)}"}


@pytest.fixture(autouse=True)
def banco():
    """Recria as tabelas a cada teste."""
    import main  # noqa: F401  registra todos os modelos
    from app.database.connection import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    engine.dispose()


@pytest.fixture
def db():
    """Sessão de banco de dados para os testes."""
    from app.database.connection import SessionLocal

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def fabrica(db):
    return Fabrica(db)


@pytest.fixture
def client():
    """Cliente HTTP sem lifespan (o job de push não sobe nos testes)."""
    from fastapi.testclient import TestClient

    from main import app

    return TestClient(app)
