from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from formclone.core.security.auth import get_current_user
from formclone.crud.forms import (
    create_form_db, delete_form_db, get_form_db, get_user_forms_db, update_form_db
)
from formclone.db.session import get_db
from formclone.models.user import User
from formclone.schemas.form import FormCreateRequest, FormUpdateRequest

router = APIRouter(prefix="/forms", tags=["forms"])


@router.get("")
async def api_list_forms(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """List the current user's forms with their response counts"""
    return {"forms": get_user_forms_db(current_user.id, db)}

@router.post("")
async def api_create_form(
    form_data: FormCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a new form"""
    form_id = create_form_db(form_data, current_user.id, db)
    return JSONResponse(
        status_code=201,
        content={"message": "Form created successfully", "formId": form_id}
    )

@router.get("/{form_id}")
async def api_get_form(form_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get one of the current user's forms for editing"""
    return {"form": get_form_db(form_id, db, user_id=current_user.id)}

@router.get("/{form_id}/public")
async def api_get_public_form(form_id: int, db: Session = Depends(get_db)):
    """Get a form for a respondent to fill out"""
    return {"form": get_form_db(form_id, db)}

@router.put("/{form_id}")
async def api_update_form(
    form_id: int,
    form_data: FormUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace a form's title, description and questions"""
    result = update_form_db(form_id, form_data, current_user.id, db)
    return {
        "message": "Form updated successfully",
        "questionCount": result["question_count"],
        "skipped": result["skipped"],
    }

@router.delete("/{form_id}")
async def api_delete_form(form_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    delete_form_db(form_id, current_user.id, db)
    return {"message": "Form deleted successfully"}
