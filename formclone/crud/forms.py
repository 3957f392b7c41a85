import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from formclone.models.form import CHOICE_TYPES, Form, Option, Question, QuestionType
from formclone.models.submission import FormSubmission
from formclone.schemas.form import FormCreateRequest, FormUpdateRequest
from formclone.utils.helpers import format_datetime

logger = logging.getLogger(__name__)


def _build_question(form_id: int, text: str, question_type: QuestionType, order: int,
                    option_texts: Optional[List[str]] = None, skip_blank_options: bool = False) -> Question:
    question = Question(
        form_id=form_id,
        question_text=text,
        question_type=question_type,
        question_order=order,
    )
    for index, option_text in enumerate(option_texts or []):
        if skip_blank_options and not option_text:
            continue
        # Skipped options leave a gap so the rest keep their input position
        question.options.append(Option(option_text=option_text, option_order=index))
    return question

def _delete_question_tree(db: Session, form_id: int) -> None:
    question_ids = select(Question.id).where(Question.form_id == form_id)
    db.query(Option).filter(Option.question_id.in_(question_ids)).delete(synchronize_session=False)
    db.query(Question).filter(Question.form_id == form_id).delete(synchronize_session=False)

def validate_question_entries(entries: List[Any]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Split raw question entries into accepted and rejected ones

    Parameters:
    - entries: question entries exactly as they arrived in the request body

    Returns:
    - (accepted, rejected). Accepted entries are normalized dicts with the
      keys index, question, type, options and order. Rejected entries carry
      their index and a reason.
    """
    accepted = []
    rejected = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            rejected.append({"index": index, "reason": "Question entry must be an object"})
            continue

        text = entry.get("question")
        if not isinstance(text, str) or not text.strip():
            rejected.append({"index": index, "reason": "Missing question text"})
            continue

        raw_type = entry.get("type")
        if not raw_type:
            rejected.append({"index": index, "reason": "Missing question type"})
            continue
        try:
            question_type = QuestionType(raw_type)
        except ValueError:
            rejected.append({"index": index, "reason": f"Unknown question type: {raw_type}"})
            continue

        options = entry.get("options")
        if not isinstance(options, list):
            options = []
        # Non-string options become blanks so they are dropped without shifting the others
        options = [option if isinstance(option, str) else "" for option in options]

        order = entry.get("order")
        if not isinstance(order, int) or isinstance(order, bool):
            order = index

        accepted.append({
            "index": index,
            "question": text,
            "type": question_type,
            "options": options,
            "order": order,
        })
    return accepted, rejected

def create_form_db(form_data: FormCreateRequest, user_id: int, db: Session) -> int:
    """
    Create a form together with its questions and options

    Parameters:
    - form_data: FormCreateRequest object
    - user_id: owner of the new form
    - db: Database session

    Returns:
    - The generated form ID
    """
    try:
        new_form = Form(
            user_id=user_id,
            title=form_data.title,
            description=form_data.description or "",
        )
        db.add(new_form)
        db.flush()

        for index, question in enumerate(form_data.questions):
            order = question.order if question.order is not None else index
            db.add(_build_question(new_form.id, question.question, question.type, order, question.options))

        form_id = new_form.id
        db.commit()
        logger.info(f"Created form {form_id} with {len(form_data.questions)} questions for user {user_id}")
        return form_id
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating form: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create form")

def update_form_db(form_id: int, form_data: FormUpdateRequest, user_id: int, db: Session) -> Dict[str, Any]:
    """
    Replace a form's title, description and whole question tree

    Malformed question entries are skipped rather than failing the update.
    Stored answers to the old questions stay with their submissions, detached
    from any question but keeping the question text.
    The form must belong to user_id, otherwise nothing changes and a 404 is
    raised.

    Returns:
    - Dictionary with the number of stored questions and the skipped entries
    """
    accepted, rejected = validate_question_entries(form_data.questions)
    for entry in rejected:
        logger.warning(f"Skipping invalid question {entry['index']} on form {form_id}: {entry['reason']}")

    try:
        form = db.query(Form).filter(Form.id == form_id, Form.user_id == user_id).first()
        if not form:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")

        form.title = form_data.title
        form.description = form_data.description or ""

        _delete_question_tree(db, form_id)
        for entry in accepted:
            db.add(_build_question(
                form_id,
                entry["question"],
                entry["type"],
                entry["order"],
                entry["options"],
                skip_blank_options=True,
            ))

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating form {form_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update form")

    return {
        "form_id": form_id,
        "question_count": len(accepted),
        "skipped": rejected,
    }

def delete_form_db(form_id: int, user_id: int, db: Session) -> None:
    """Delete a form and everything under it, if user_id owns it"""
    try:
        _delete_question_tree(db, form_id)
        deleted = db.query(Form).filter(
            Form.id == form_id,
            Form.user_id == user_id
        ).delete(synchronize_session=False)

        if deleted == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Form not found or not owned by user"
            )

        db.commit()
        logger.info(f"Deleted form {form_id} for user {user_id}")
    except HTTPException:
        # Undo the child cleanup too, the caller did not own this form
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting form {form_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete form")

def get_form_db(form_id: int, db: Session, user_id: Optional[int] = None) -> Dict[str, Any]:
    """
    Retrieve a form with its ordered questions

    Parameters:
    - form_id: The ID of the form to retrieve
    - db: Database session
    - user_id: when given, only a form owned by this user is returned

    Returns:
    - Dictionary with form details. Radio and checkbox questions carry an
      ordered "options" list, other question types have no such key.
    """
    query = db.query(Form).filter(Form.id == form_id)
    if user_id is not None:
        query = query.filter(Form.user_id == user_id)
    form = query.first()
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")

    questions = (
        db.query(Question)
        .filter(Question.form_id == form.id)
        .order_by(Question.question_order, Question.id)
        .all()
    )

    choice_ids = [question.id for question in questions if question.question_type in CHOICE_TYPES]
    options_by_question = {question_id: [] for question_id in choice_ids}
    if choice_ids:
        option_rows = (
            db.query(Option.question_id, Option.option_text)
            .filter(Option.question_id.in_(choice_ids))
            .order_by(Option.question_id, Option.option_order, Option.id)
            .all()
        )
        for question_id, option_text in option_rows:
            options_by_question[question_id].append(option_text)

    question_data = []
    for question in questions:
        item = {
            "id": question.id,
            "question_text": question.question_text,
            "question_type": question.question_type.value,
            "question_order": question.question_order,
        }
        if question.id in options_by_question:
            item["options"] = options_by_question[question.id]
        question_data.append(item)

    return {
        "id": form.id,
        "title": form.title,
        "description": form.description,
        "created_at": format_datetime(form.created_at),
        "questions": question_data,
    }

def get_user_forms_db(user_id: int, db: Session) -> List[Dict[str, Any]]:
    """List a user's forms, newest first, with their submission counts"""
    rows = (
        db.query(Form, func.count(FormSubmission.id).label("response_count"))
        .outerjoin(FormSubmission, FormSubmission.form_id == Form.id)
        .filter(Form.user_id == user_id)
        .group_by(Form.id)
        .order_by(Form.created_at.desc(), Form.id.desc())
        .all()
    )

    return [
        {
            "id": form.id,
            "title": form.title,
            "description": form.description,
            "created_at": format_datetime(form.created_at),
            "responseCount": response_count,
        }
        for form, response_count in rows
    ]
