"""
Testes para as rotas de certidões.
"""
import pytest

CORPO = {
    "empresa": "acme",
    "tipo": "FGTS",
    "nome": "FGTS matriz",
    "dataEmissao": "2025-01-01",
    "dataValidade": "2025-06-30",
    "tipoDocumento": "PDF",
    "pendencias": [{"id": "p1", "titulo": "Renovar", "concluida": False}],
}


@pytest.fixture
def cenario(fabrica):
    fabrica.empresa()
    grupo = fabrica.grupo("Fiscal")
    return {
        "grupo": grupo,
        "admin": fabrica.usuario("admin", role="admin"),
        "comum": fabrica.usuario("comum", grupos=[(grupo.id, "comum")]),
        "visualizador": fabrica.usuario("leitor", grupos=[(grupo.id, "visualizador")]),
    }


class TestAutenticacao:
    """Rotas de certidões exigem token."""

    def test_sem_token(self, client):
        response = client.get("/api/certidoes")
        assert response.status_code == 401
        assert response.json()["codigo"] == "UNAUTHORIZED"

    def test_token_invalido(self, client):
        response = client.get("/api/certidoes", headers={"Authorization": "Bearer nao-e-um-jwt"})
        assert response.status_code == 401


class TestVisualizador:
    """Membro com acesso de visualização."""

    def test_ve_mas_nao_edita(self, client, fabrica, cenario):
        cert = fabrica.certidao(grupo_id=cenario["grupo"].id)
        headers = fabrica.headers(cenario["visualizador"])

        response = client.get(f"/api/certidoes/{cert.id}", headers=headers)
        assert response.status_code == 200
        assert response.json()["podeEditar"] is False

        response = client.put(f"/api/certidoes/{cert.id}", json={"nome": "novo"}, headers=headers)
        assert response.status_code == 403
        assert response.json()["codigo"] == "FORBIDDEN_EDIT"

    def test_nao_arquiva_nem_exclui(self, client, fabrica, cenario):
        cert = fabrica.certidao(grupo_id=cenario["grupo"].id)
        headers = fabrica.headers(cenario["visualizador"])

        assert client.patch(f"/api/certidoes/{cert.id}/arquivar", headers=headers).status_code == 403
        assert client.delete(f"/api/certidoes/{cert.id}", headers=headers).status_code == 403


class TestCrud:
    """Fluxo completo via HTTP."""

    def test_nao_admin_sem_grupo_recebe_forbidden_edit(self, client, fabrica, cenario):
        response = client.post("/api/certidoes", json=CORPO, headers=fabrica.headers(cenario["comum"]))
        assert response.status_code == 403
        assert response.json()["codigo"] == "FORBIDDEN_EDIT"

    def test_criar_obter_listar(self, client, fabrica, cenario):
        headers = fabrica.headers(cenario["comum"])
        corpo = {**CORPO, "grupoId": cenario["grupo"].id}

        response = client.post("/api/certidoes", json=corpo, headers=headers)
        assert response.status_code == 201
        criada = response.json()
        assert criada["status"] == "ativa"
        assert criada["podeEditar"] is True
        assert criada["dataExclusao"] is None
        assert criada["pendencias"][0]["titulo"] == "Renovar"

        response = client.get("/api/certidoes", headers=headers)
        assert [c["id"] for c in response.json()] == [criada["id"]]

        response = client.get("/api/certidoes", params={"status": "arquivada"}, headers=headers)
        assert response.json() == []

    def test_ida_e_volta_com_todos_os_campos(self, client, fabrica, cenario):
        headers = fabrica.headers(cenario["comum"])
        corpo = {
            "empresa": "acme",
            "tipo": "FGTS",
            "nome": "FGTS matriz",
            "descricao": "Regularidade do FGTS",
            "dataEmissao": "2025-01-01",
            "dataValidade": "2025-06-30",
            "tipoDocumento": "Link",
            "urlDocumento": "https://exemplo.gov.br/fgts",
            "alertaAtivo": False,
            "notificarDiasAntes": 15,
            "observacoes": "Emitida no portal da Caixa",
            "pendencias": [
                {"id": "p1", "titulo": "Renovar", "descricao": None, "prazo": None, "concluida": False},
                {"id": "p2", "titulo": "Assinar", "descricao": "Diretoria", "prazo": "2025-05-01", "concluida": True},
            ],
            "documentosAdicionais": [
                {"id": "d1", "nome": "Comprovante", "url": "https://x/c.pdf", "tipo": "PDF", "dataAdicao": "2025-01-02"},
            ],
            "notas": [{"id": "n1", "texto": "Conferida", "dataHora": "2025-01-02T10:00:00"}],
            "grupoId": cenario["grupo"].id,
        }

        criada = client.post("/api/certidoes", json=corpo, headers=headers).json()
        lida = client.get(f"/api/certidoes/{criada['id']}", headers=headers).json()

        extras = ("id", "podeEditar", "status", "dataExclusao")
        assert {k: v for k, v in lida.items() if k not in extras} == corpo
        assert (lida["status"], lida["dataExclusao"]) == ("ativa", None)
        assert lida == criada

        copia = client.post(f"/api/certidoes/{criada['id']}/duplicar", headers=headers).json()
        assert copia["id"] != lida["id"]
        assert {k: v for k, v in copia.items() if k != "id"} == {k: v for k, v in lida.items() if k != "id"}

    def test_datas_invalidas(self, client, fabrica, cenario):
        corpo = {**CORPO, "dataValidade": "2024-01-01"}
        response = client.post("/api/certidoes", json=corpo, headers=fabrica.headers(cenario["admin"]))
        assert response.status_code == 400
        assert response.json()["codigo"] == "VALIDATION"
        assert response.json()["campo"] == "dataValidade"

    def test_corpo_malformado_e_422(self, client, fabrica, cenario):
        corpo = {**CORPO, "tipoDocumento": "Planilha"}
        response = client.post("/api/certidoes", json=corpo, headers=fabrica.headers(cenario["admin"]))
        assert response.status_code == 422

    def test_put_parcial(self, client, fabrica, cenario):
        cert = fabrica.certidao(nome="Antigo", observacoes="manter")
        headers = fabrica.headers(cenario["admin"])

        response = client.put(f"/api/certidoes/{cert.id}", json={"nome": None, "descricao": "x"}, headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["nome"] is None
        assert body["descricao"] == "x"
        assert body["observacoes"] == "manter"

    def test_put_null_em_obrigatorio(self, client, fabrica, cenario):
        cert = fabrica.certidao()
        response = client.put(
            f"/api/certidoes/{cert.id}", json={"empresa": None}, headers=fabrica.headers(cenario["admin"])
        )
        assert response.status_code == 422

    def test_inexistente(self, client, fabrica, cenario):
        response = client.get("/api/certidoes/nao-existe", headers=fabrica.headers(cenario["comum"]))
        assert response.status_code == 404
        assert response.json()["codigo"] == "NOT_FOUND"

    def test_transicoes(self, client, fabrica, cenario):
        cert = fabrica.certidao(grupo_id=cenario["grupo"].id)
        headers = fabrica.headers(cenario["comum"])

        body = client.patch(f"/api/certidoes/{cert.id}/lixeira", headers=headers).json()
        assert body["status"] == "lixeira"
        assert body["dataExclusao"] is not None

        body = client.patch(f"/api/certidoes/{cert.id}/restaurar", headers=headers).json()
        assert body["status"] == "ativa"
        assert body["dataExclusao"] is None

        body = client.patch(f"/api/certidoes/{cert.id}/arquivar", headers=headers).json()
        assert body["status"] == "arquivada"

        response = client.post(f"/api/certidoes/{cert.id}/duplicar", headers=headers)
        assert response.status_code == 201
        assert response.json()["id"] != cert.id
        assert response.json()["status"] == "ativa"

        assert client.delete(f"/api/certidoes/{cert.id}", headers=headers).status_code == 204
        assert client.get(f"/api/certidoes/{cert.id}", headers=headers).status_code == 404
