from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from app.database import get_db
from app.users import schemas
from app.users.auth import authenticate_user, create_access_token, get_current_user
from app.users.models import User

router = APIRouter()


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginSchema, db: Session = Depends(get_db)):
    user = authenticate_user(db, credentials.company_id, credentials.username, credentials.password)
    if not user:
        logger.warning(
            f"Authentication denied for {credentials.username}@{credentials.company_id}"
        )
        raise HTTPException(status_code=401, detail="Invalid credentials")

    access_token = create_access_token(user)
    logger.info(f"User authenticated: {user.username}@{user.company.code}")

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user,
    }


@router.get("/me", response_model=schemas.UserWithCompanySchema)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
