import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from formclone.core.security.auth import create_access_token
from formclone.crud.users import authenticate_user, create_user_db
from formclone.db.session import get_db
from formclone.schemas.user import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

@router.post("/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    user = create_user_db(request, db)
    logger.info(f"Registered user {user.id}")
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "User registered successfully"}
    )

@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = authenticate_user(db, request.email, request.password)

        # Same answer for unknown email and wrong password
        if not user:
            logger.info("Failed login attempt")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        token = create_access_token(user)

        return {
            "message": "Login successful",
            "token": token,
            "token_type": "bearer",
        }
    except HTTPException as he:
        raise he
    except Exception as e:
        logger.error(f"Login error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )
