from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List

from database import get_db
from models.question import Question
from schemas.question import QuestionCreate, QuestionRead, SubmitTestRequest
from utils.logger_factory import new_logger

router = APIRouter()


@router.get("/questions", response_model=List[QuestionRead])
def list_questions(db: Session = Depends(get_db)):
    log = new_logger("list_questions")
    try:
        return db.query(Question).order_by(Question.id).all()
    except SQLAlchemyError as e:
        log.error(f"Error fetching questions: {str(e)}")
        raise HTTPException(status_code=500, detail="Error fetching questions")


@router.post("/questions", response_model=QuestionRead, status_code=status.HTTP_201_CREATED)
def add_question(payload: QuestionCreate, db: Session = Depends(get_db)):
    log = new_logger("add_question")

    if not payload.question or not payload.options or not payload.correct_answer:
        log.error("Question, options, and correct_answer are required")
        raise HTTPException(status_code=400, detail="Question, options, and correct_answer are required")

    question = Question(
        question=payload.question,
        options=payload.options,
        correct_answer=payload.correct_answer,
        status=payload.status or 'NOT_ATTEMPTED',
        selected_answers=payload.selected_answers,
    )
    try:
        db.add(question)
        db.commit()
        db.refresh(question)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Error adding question: {str(e)}")
        raise HTTPException(status_code=500, detail="Error adding question")

    log.info(f"Question added successfully: {question.id}")
    return question


@router.post("/submit-test")
def submit_test(payload: SubmitTestRequest, db: Session = Depends(get_db)):
    """Save the status and chosen answer for each submitted question."""
    log = new_logger("submit_test")
    updated = 0
    try:
        for answer in payload.questions:
            question = db.query(Question).filter(Question.id == answer.id).first()
            if not question:
                log.warning(f"Skipping unknown question {answer.id}")
                continue
            question.status = answer.status
            question.selected_answers = answer.selected_answers
            updated += 1
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Error saving test results: {str(e)}")
        raise HTTPException(status_code=500, detail="Error saving test results")

    log.info(f"Saved results for {updated} of {len(payload.questions)} questions")
    return {"message": "Test results saved successfully", "updated": updated}


@router.delete("/questions")
def delete_questions(db: Session = Depends(get_db)):
    log = new_logger("delete_questions")
    try:
        deleted = db.query(Question).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Error deleting questions: {str(e)}")
        raise HTTPException(status_code=500, detail="Error deleting questions")

    log.info(f"Deleted {deleted} questions")
    return {"message": "All questions deleted successfully"}
