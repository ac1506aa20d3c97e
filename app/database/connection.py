# app/database/connection.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

from config.settings import settings

# Carrega as variáveis de ambiente do arquivo .env
load_dotenv()

DB_URL = settings.database_url

# SQLite (dev/testes) precisa liberar o uso da conexão fora da thread que a abriu,
# já que o job de push consulta o banco em threads de trabalho
connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}

# Cria o engine de conexão com o banco
engine = create_engine(DB_URL, connect_args=connect_args, pool_pre_ping=True)

# Cria a fábrica de sessões para o SQLAlchemy
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base para os modelos usarem como herança
Base = declarative_base()

# Função que retorna uma sessão de banco para ser usada como dependência no FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
