from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from sqlalchemy.sql import func, expression
from database import Base


class Application(Base):
    __tablename__ = 'applications'

    id = Column(Integer, primary_key=True)
    description = Column(Text, nullable=False)
    email = Column(String(255), nullable=False)
    hr_name = Column(String(255), nullable=False)
    organization = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    role = Column(String(255), nullable=False)
    salary = Column(String(100), nullable=False, default="", server_default="")
    seen = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    respond = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    seen_time = Column(DateTime(timezone=True), nullable=True)
    respond_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now(), onupdate=func.now())
