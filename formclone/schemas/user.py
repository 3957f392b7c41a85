from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, EmailStr, validator

class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    @validator('name', 'password')
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('Field must not be empty')
        return v

class LoginRequest(BaseModel):
    # Plain str so malformed emails fail like unknown ones
    email: str
    password: str

    @validator('email')
    def normalize_email(cls, v):
        # Stored emails went through EmailStr, so look them up in the same form
        try:
            return validate_email(v, check_deliverability=False).normalized
        except EmailNotValidError:
            return v
