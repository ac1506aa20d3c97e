"""
Seed: contas de administrador, empresas e tipos de certidão padrão.

Uso (na raiz do projeto, com o .env configurado): python -m scripts.seed
Rodar de novo é seguro: usuários existentes têm a senha redefinida, o resto é atualizado.
"""
import os

from app.database.connection import Base, SessionLocal, engine
from app.models import blacklist, certidao, empresa, grupo, notificacao, user  # noqa: F401
from app.models.certidao import TipoCertidao
from app.models.empresa import Empresa
from app.models.user import Usuario
from app.utils.password import gerar_hash_senha

USUARIOS_SEED = [
    {"login": "admin", "senha": os.getenv("SEED_ADMIN_SENHA", "1234"), "nome": "Administrador"},
    {"login": "superadmin", "senha": os.getenv("SEED_SUPERADMIN_SENHA", "12345678"), "nome": "Super Administrador"},
]

EMPRESAS_PADRAO = [
    {"slug": "salviam", "nome": "Sallvian", "ordem": 0, "cor": "#3b82f6"},
    {"slug": "jacaranda", "nome": "Jacaranda", "ordem": 1, "cor": "#22c55e"},
]

TIPOS_CERTIDAO_PADRAO = [
    "Receita Federal",
    "SEFAZ",
    "Prefeitura",
    "Trabalhista",
    "Falência e Concordata",
    "FGTS",
    "CGU",
]


def seed(db):
    for u in USUARIOS_SEED:
        existente = db.query(Usuario).filter(Usuario.login == u["login"]).first()
        if existente:
            existente.senha_hash = gerar_hash_senha(u["senha"])
            existente.nome = u["nome"]
            existente.role = "admin"
            existente.status = "ativo"
            print(f'Usuário "{u["login"]}" atualizado (senha redefinida).')
        else:
            db.add(Usuario(
                login=u["login"],
                senha_hash=gerar_hash_senha(u["senha"]),
                nome=u["nome"],
                role="admin",
                status="ativo",
            ))
            print(f'Usuário "{u["login"]}" criado.')

    for emp in EMPRESAS_PADRAO:
        existente = db.query(Empresa).filter(Empresa.slug == emp["slug"]).first()
        if existente:
            existente.nome = emp["nome"]
            existente.ordem = emp["ordem"]
            existente.cor = emp["cor"]
        else:
            db.add(Empresa(ativo=True, **emp))
    print(f"{len(EMPRESAS_PADRAO)} empresas configuradas.")

    for ordem, nome in enumerate(TIPOS_CERTIDAO_PADRAO):
        if not db.query(TipoCertidao).filter(TipoCertidao.nome == nome).first():
            db.add(TipoCertidao(nome=nome, ordem=ordem, ativo=True))
    print(f"{len(TIPOS_CERTIDAO_PADRAO)} tipos de certidão configurados.")

    db.commit()


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()
