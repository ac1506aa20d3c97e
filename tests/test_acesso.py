"""
Testes para as regras de visibilidade e edição por grupo.
"""
import pytest

from app.models.certidao import Certidao
from app.services import acesso
from app.services.acesso import AuthContext
from app.services.erros import ErroProibido, ErroProibidoEdicao

ADMIN = AuthContext.montar(1, "admin", [])
SEM_GRUPO = AuthContext.montar(2, "usuario", [])
COMUM_G1 = AuthContext.montar(3, "usuario", [(1, "comum")])
VISUALIZADOR_G1 = AuthContext.montar(4, "usuario", [(1, "visualizador")])
MISTO = AuthContext.montar(5, "usuario", [(1, "visualizador"), (2, "comum")])


class TestPodeVer:
    """Testes para pode_ver."""

    @pytest.mark.parametrize("grupo_id", [None, 1, 2, 99])
    def test_admin_ve_tudo(self, grupo_id):
        assert acesso.pode_ver(grupo_id, ADMIN) is True

    @pytest.mark.parametrize("ctx", [SEM_GRUPO, COMUM_G1, VISUALIZADOR_G1, MISTO])
    def test_certidao_global_visivel_a_todos(self, ctx):
        assert acesso.pode_ver(None, ctx) is True

    @pytest.mark.parametrize(
        "ctx,grupo_id,esperado",
        [
            (SEM_GRUPO, 1, False),
            (COMUM_G1, 1, True),
            (COMUM_G1, 2, False),
            (VISUALIZADOR_G1, 1, True),
            (MISTO, 1, True),
            (MISTO, 2, True),
            (MISTO, 3, False),
        ],
    )
    def test_certidao_de_grupo_visivel_aos_membros(self, ctx, grupo_id, esperado):
        assert acesso.pode_ver(grupo_id, ctx) is esperado


class TestPodeEditar:
    """Testes para pode_editar."""

    @pytest.mark.parametrize("grupo_id", [None, 1, 99])
    def test_admin_edita_tudo(self, grupo_id):
        assert acesso.pode_editar(grupo_id, ADMIN) is True

    @pytest.mark.parametrize("ctx", [SEM_GRUPO, COMUM_G1, VISUALIZADOR_G1, MISTO])
    def test_global_so_admin_edita(self, ctx):
        assert acesso.pode_editar(None, ctx) is False

    @pytest.mark.parametrize(
        "ctx,grupo_id,esperado",
        [
            (COMUM_G1, 1, True),
            (VISUALIZADOR_G1, 1, False),
            (MISTO, 1, False),
            (MISTO, 2, True),
            (COMUM_G1, 2, False),
        ],
    )
    def test_edicao_depende_do_nivel(self, ctx, grupo_id, esperado):
        assert acesso.pode_editar(grupo_id, ctx) is esperado

    @pytest.mark.parametrize("ctx", [ADMIN, SEM_GRUPO, COMUM_G1, VISUALIZADOR_G1, MISTO])
    @pytest.mark.parametrize("grupo_id", [None, 1, 2, 3])
    def test_quem_edita_tambem_ve(self, ctx, grupo_id):
        if acesso.pode_editar(grupo_id, ctx):
            assert acesso.pode_ver(grupo_id, ctx)


class TestVerificacoes:
    """Testes para as verificações que levantam erro."""

    def test_edicao_sem_visibilidade_e_forbidden(self):
        with pytest.raises(ErroProibido) as exc:
            acesso.verificar_edicao(2, COMUM_G1)
        assert exc.value.codigo == "FORBIDDEN"

    def test_edicao_como_visualizador_e_forbidden_edit(self):
        with pytest.raises(ErroProibidoEdicao) as exc:
            acesso.verificar_edicao(1, VISUALIZADOR_G1)
        assert exc.value.codigo == "FORBIDDEN_EDIT"
        assert exc.value.status_code == 403

    def test_visualizacao_negada(self):
        with pytest.raises(ErroProibido):
            acesso.verificar_visualizacao(1, SEM_GRUPO)

    def test_atribuicao_global_por_nao_admin(self):
        with pytest.raises(ErroProibidoEdicao):
            acesso.verificar_atribuicao_grupo(None, COMUM_G1)

    def test_atribuicao_a_grupo_alheio(self):
        with pytest.raises(ErroProibido) as exc:
            acesso.verificar_atribuicao_grupo(7, COMUM_G1)
        assert exc.value.codigo == "FORBIDDEN"

    def test_atribuicao_como_visualizador(self):
        with pytest.raises(ErroProibidoEdicao):
            acesso.verificar_atribuicao_grupo(1, VISUALIZADOR_G1)

    def test_atribuicao_permitida(self):
        acesso.verificar_atribuicao_grupo(1, COMUM_G1)
        acesso.verificar_atribuicao_grupo(None, ADMIN)
        acesso.verificar_atribuicao_grupo(42, ADMIN)


class TestAuthContext:
    """Testes para a montagem do contexto."""

    def test_nivel_desconhecido_vira_comum(self):
        ctx = AuthContext.montar(9, "usuario", [(3, "qualquer")])
        assert ctx.grupo_acesso[3] == "comum"

    def test_contexto_imutavel(self):
        with pytest.raises(TypeError):
            COMUM_G1.grupo_acesso[5] = "comum"


class TestFiltroVisibilidade:
    """O filtro SQL precisa concordar com pode_ver."""

    def test_admin_sem_filtro(self):
        assert acesso.filtro_visibilidade(ADMIN) is None

    @pytest.mark.parametrize("ctx", [SEM_GRUPO, COMUM_G1, VISUALIZADOR_G1, MISTO])
    def test_filtro_igual_a_pode_ver(self, ctx, db, fabrica):
        g1 = fabrica.grupo("G1")
        g2 = fabrica.grupo("G2")
        g3 = fabrica.grupo("G3")
        assert (g1.id, g2.id, g3.id) == (1, 2, 3)
        for grupo_id in (None, 1, 2, 3):
            fabrica.certidao(grupo_id=grupo_id)

        visiveis = {c.grupo_id for c in db.query(Certidao).filter(acesso.filtro_visibilidade(ctx)).all()}
        esperado = {g for g in (None, 1, 2, 3) if acesso.pode_ver(g, ctx)}
        assert visiveis == esperado
