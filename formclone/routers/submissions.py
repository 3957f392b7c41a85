from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formclone.core.security.auth import get_current_user
from formclone.crud.submissions import get_form_submissions_db, store_submission_db
from formclone.db.session import get_db
from formclone.models.user import User
from formclone.schemas.form import FormSubmitRequest
from formclone.utils.helpers import paginate_results

router = APIRouter(prefix="/forms", tags=["submissions"])

@router.post("/{form_id}/submit")
async def api_submit_form(form_id: int, form_response: FormSubmitRequest, db: Session = Depends(get_db)):
    """Submit a respondent's answers. No authentication, respondents are anonymous."""
    submission_id = store_submission_db(form_id, form_response.responses, db)
    return {"message": "Form submitted successfully", "submissionId": submission_id}

@router.get("/{form_id}/submissions")
async def api_get_submissions(
    form_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    submissions = get_form_submissions_db(form_id, current_user.id, db)
    return paginate_results(submissions, page, page_size)
