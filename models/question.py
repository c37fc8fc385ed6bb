from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func
from database import Base

QUESTION_STATUSES = ('NOT_ATTEMPTED', 'ANSWERED', 'NOT_ANSWERED', 'REVIEW')


class Question(Base):
    __tablename__ = 'questions'

    id = Column(Integer, primary_key=True)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # List of answer strings
    correct_answer = Column(String(512), nullable=False)
    status = Column(String(20), nullable=False, default='NOT_ATTEMPTED', server_default='NOT_ATTEMPTED')
    selected_answers = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=func.now(), server_default=func.now(), onupdate=func.now())
