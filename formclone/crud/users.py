import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from formclone.core.security.auth import create_hashed_password, pwd_context, verify_password
from formclone.models.user import User
from formclone.schemas.user import RegisterRequest

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()

def create_user_db(request: RegisterRequest, db: Session) -> User:
    if get_user_by_email(db, request.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        name=request.name,
        email=request.email,
        hashed_password=create_hashed_password(request.password),
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"Registration error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )
    return user

def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials, None otherwise"""
    user = get_user_by_email(db, email)
    if not user:
        # Hash anyway so unknown emails take as long as wrong passwords
        pwd_context.dummy_verify()
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
