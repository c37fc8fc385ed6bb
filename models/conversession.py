from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.sql import func
from database import Base


class Conversession(Base):
    __tablename__ = 'conversessions'

    id = Column(Integer, primary_key=True)
    user_id = Column(String(255), nullable=False)  # Derived from the request origin at write time
    session_id = Column(String(128), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    response = Column(Text, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())

    __table_args__ = (
        Index('idx_conversessions_session_id_timestamp', 'session_id', 'timestamp'),
    )
