import logging
from typing import Any, Dict, List, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, selectinload

from formclone.models.form import Form, Question, QuestionType
from formclone.models.submission import FormSubmission, SubmissionAnswer
from formclone.utils.helpers import format_datetime

logger = logging.getLogger(__name__)


def store_submission_db(form_id: int, responses: Dict[int, Union[List[str], str]], db: Session) -> int:
    """
    Store one respondent's answers to a form

    Parameters:
    - form_id: ID of the form being answered
    - responses: question ID -> answer. A list stores one row per element,
      any other value stores a single row.
    - db: Database session

    Returns:
    - The ID of the new submission
    """
    form = db.query(Form.id).filter(Form.id == form_id).first()
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")

    try:
        submission = FormSubmission(form_id=form_id)
        db.add(submission)
        db.flush()

        question_texts = dict(
            db.query(Question.id, Question.question_text).filter(Question.id.in_(list(responses)))
        )

        answer_count = 0
        for question_id, answer in responses.items():
            values = answer if isinstance(answer, list) else [answer]
            for value in values:
                db.add(SubmissionAnswer(
                    submission_id=submission.id,
                    question_id=question_id,
                    question_text=question_texts.get(question_id),
                    answer=value,
                ))
                answer_count += 1

        submission_id = submission.id
        db.commit()
        logger.info(f"Stored submission {submission_id} for form {form_id} with {answer_count} answers")
        return submission_id
    except Exception as e:
        db.rollback()
        logger.error(f"Error submitting form {form_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to submit form")

def get_form_submissions_db(form_id: int, user_id: int, db: Session) -> List[Dict[str, Any]]:
    """
    List the submissions of a form owned by user_id, newest first

    Checkbox answers are grouped back into lists. Any other question maps to
    its single answer, or to a list if more than one row was stored for it.
    Answers to questions that were since replaced are listed under
    retiredAnswers with the question text they were given for.
    """
    form = db.query(Form).filter(Form.id == form_id, Form.user_id == user_id).first()
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")

    checkbox_ids = {
        question_id
        for (question_id,) in db.query(Question.id).filter(
            Question.form_id == form_id,
            Question.question_type == QuestionType.CHECKBOX
        )
    }

    submissions = (
        db.query(FormSubmission)
        .options(selectinload(FormSubmission.answers))
        .filter(FormSubmission.form_id == form_id)
        .order_by(FormSubmission.submitted_at.desc(), FormSubmission.id.desc())
        .all()
    )

    result = []
    for submission in submissions:
        grouped: Dict[int, List[str]] = {}
        retired = []
        for answer in submission.answers:
            if answer.question_id is None:
                retired.append({"question": answer.question_text, "answer": answer.answer})
                continue
            grouped.setdefault(answer.question_id, []).append(answer.answer)

        answers = {}
        for question_id, values in grouped.items():
            if question_id in checkbox_ids or len(values) > 1:
                answers[str(question_id)] = values
            else:
                answers[str(question_id)] = values[0]

        result.append({
            "id": submission.id,
            "submitted_at": format_datetime(submission.submitted_at),
            "answers": answers,
            "retiredAnswers": retired,
        })
    return result
