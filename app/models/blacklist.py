from sqlalchemy import Column, String, DateTime
from app.database.connection import Base

class TokenBlacklist(Base):
    __tablename__ = "tb_token_blacklist"

    jti = Column(String, primary_key=True, index=True)
    expira_em = Column(DateTime(timezone=True), nullable=False)
