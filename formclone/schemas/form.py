from pydantic import BaseModel, validator
from typing import Any, Dict, List, Optional, Union
from formclone.models.form import QuestionType

class QuestionCreate(BaseModel):
    question: str
    type: QuestionType
    options: Optional[List[str]] = None
    order: Optional[int] = None

    @validator('question')
    def validate_question(cls, v):
        if not v.strip():
            raise ValueError('Question text is required')
        return v

class FormCreateRequest(BaseModel):
    title: str
    description: Optional[str] = ""
    questions: List[QuestionCreate] = []

    @validator('title')
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title is required')
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Feedback",
                "description": "Tell us how we did",
                "questions": [
                    {"question": "Name?", "type": "text"},
                    {"question": "Pick one", "type": "radio", "options": ["A", "B"]},
                ]
            }
        }

class FormUpdateRequest(BaseModel):
    title: str
    description: Optional[str] = ""
    # Entries are checked one by one so a bad entry is skipped, not fatal
    questions: List[Any]

    @validator('title')
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title is required')
        return v

class FormSubmitRequest(BaseModel):
    responses: Dict[int, Union[List[str], str]]

    class Config:
        json_schema_extra = {
            "example": {"responses": {"4": "Ada", "5": ["A", "C"]}}
        }
