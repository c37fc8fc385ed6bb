from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime

QuestionStatus = Literal['NOT_ATTEMPTED', 'ANSWERED', 'NOT_ANSWERED', 'REVIEW']


class QuestionCreate(BaseModel):
    question: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None
    status: Optional[QuestionStatus] = None
    selected_answers: Optional[str] = None


class QuestionRead(BaseModel):
    id: int
    question: str
    options: List[str]
    correct_answer: str
    status: QuestionStatus
    selected_answers: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmittedAnswer(BaseModel):
    id: int
    status: QuestionStatus
    selected_answers: Optional[str] = None


class SubmitTestRequest(BaseModel):
    questions: List[SubmittedAnswer]
