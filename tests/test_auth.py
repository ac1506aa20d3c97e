"""
Testes para rotas de autenticação.
"""
from datetime import datetime, timedelta, timezone

from app.models.blacklist import TokenBlacklist
from app.services import auth as auth_service
from app.services.auth import limpar_blacklist
from app.utils.jwt_handler import criar_token, verificar_token


class TestCadastro:
    """Testes para cadastro."""

    def test_cadastro_fica_pendente(self, client, db):
        response = client.post("/api/auth/cadastro", json={"login": "novo", "senha": "segredo123", "nome": "Novo"})
        assert response.status_code == 201
        assert response.json()["usuario"] == "novo"

        response = client.post("/api/auth/login", json={"login": "novo", "senha": "segredo123"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Conta aguardando aprovação do administrador."

    def test_login_duplicado(self, client, fabrica):
        fabrica.usuario("maria")
        response = client.post("/api/auth/cadastro", json={"login": "maria", "senha": "segredo123"})
        assert response.status_code == 409
        assert response.json()["codigo"] == "CONFLICT"

    def test_login_gravado_entre_checagem_e_commit(self, client, fabrica, monkeypatch):
        fabrica.usuario("maria")
        # a checagem não vê o login, como num cadastro concorrente
        monkeypatch.setattr(auth_service, "login_em_uso", lambda db, login: False)

        response = client.post("/api/auth/cadastro", json={"login": "maria", "senha": "segredo123"})
        assert response.status_code == 409
        assert response.json()["detail"] == "Login já em uso"

    def test_senha_curta(self, client):
        response = client.post("/api/auth/cadastro", json={"login": "x", "senha": "123"})
        assert response.status_code == 422


class TestLogin:
    """Testes para login."""

    def test_login_sucesso(self, client, fabrica):
        fabrica.usuario("maria", senha="segredo123", role="admin")
        response = client.post("/api/auth/login", json={"login": "maria", "senha": "segredo123"})
        assert response.status_code == 200
        body = response.json()
        assert body["usuario"] == "maria"
        assert body["role"] == "admin"
        assert body["status"] == "ativo"

        payload = verificar_token(body["token"])
        assert payload["sub"] == "maria"
        assert payload["jti"]

    def test_senha_errada(self, client, fabrica):
        fabrica.usuario("maria", senha="segredo123")
        response = client.post("/api/auth/login", json={"login": "maria", "senha": "errada"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Login ou senha inválidos"

    def test_usuario_inexistente(self, client):
        response = client.post("/api/auth/login", json={"login": "ninguem", "senha": "qualquer"})
        assert response.status_code == 401

    def test_conta_bloqueada(self, client, fabrica):
        fabrica.usuario("maria", senha="segredo123", status="bloqueado")
        response = client.post("/api/auth/login", json={"login": "maria", "senha": "segredo123"})
        assert response.status_code == 403
        assert response.json()["detail"] == "Conta bloqueada."


class TestSessao:
    """Testes para me, cookie, troca de senha e logout."""

    def test_me(self, client, fabrica):
        grupo = fabrica.grupo()
        usuario = fabrica.usuario("maria", grupos=[(grupo.id, "visualizador")])
        response = client.get("/api/auth/me", headers=fabrica.headers(usuario))
        assert response.status_code == 200
        body = response.json()
        assert body["login"] == "maria"
        assert body["grupos"] == [{"grupoId": grupo.id, "acesso": "visualizador"}]

    def test_cookie_como_alternativa(self, client, fabrica):
        fabrica.usuario("maria", senha="segredo123")
        client.post("/api/auth/login", json={"login": "maria", "senha": "segredo123"})
        response = client.get("/api/auth/me")
        assert response.status_code == 200

    def test_usuario_bloqueado_depois_do_login(self, client, fabrica, db):
        usuario = fabrica.usuario("maria")
        headers = fabrica.headers(usuario)
        usuario.status = "bloqueado"
        db.commit()
        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 403

    def test_token_expirado(self, client, fabrica):
        usuario = fabrica.usuario("maria")
        token = criar_token({"id": usuario.id, "sub": usuario.login}, expires_in=-1)
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_trocar_senha(self, client, fabrica):
        usuario = fabrica.usuario("maria", senha="segredo123")
        headers = fabrica.headers(usuario)

        response = client.post(
            "/api/auth/trocar-senha", json={"senhaAtual": "errada", "senhaNova": "novasenha"}, headers=headers
        )
        assert response.status_code == 401

        response = client.post(
            "/api/auth/trocar-senha", json={"senhaAtual": "segredo123", "senhaNova": "novasenha"}, headers=headers
        )
        assert response.status_code == 200
        assert client.post("/api/auth/login", json={"login": "maria", "senha": "novasenha"}).status_code == 200

    def test_logout_invalida_token(self, client, fabrica, db):
        usuario = fabrica.usuario("maria")
        headers = fabrica.headers(usuario)

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert db.query(TokenBlacklist).count() == 1

        response = client.get("/api/auth/me", headers=headers)
        assert response.status_code == 401


class TestBlacklist:
    """Limpeza de tokens expirados."""

    def test_remove_so_expirados(self, db):
        agora = datetime.now(timezone.utc)
        db.add(TokenBlacklist(jti="velho", expira_em=agora - timedelta(days=1)))
        db.add(TokenBlacklist(jti="novo", expira_em=agora + timedelta(days=1)))
        db.commit()

        assert limpar_blacklist(db) == 1
        assert [t.jti for t in db.query(TokenBlacklist).all()] == ["novo"]
