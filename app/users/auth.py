from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from loguru import logger
from sqlalchemy.orm import Session

from app.clock import utcnow
from app.companies.models import Company
from app.config import settings
from app.database import get_db
from app.security.passwords import verify_password
from app.users.models import User
from app.users.schemas import TokenData


# auto_error=False so a missing header is a 401, not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def authenticate_user(db: Session, company_code: str, username: str, password: str) -> Optional[User]:
    company = db.query(Company).filter(Company.code == company_code.strip()).first()
    if not company:
        return None

    user = (
        db.query(User)
        .filter(
            User.company_id == company.id,
            User.username == username.strip().lower()
        )
        .first()
    )
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(user.id),
        "company_id": user.company_id,
        "role": user.role.value,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[TokenData]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return TokenData(
            user_id=int(payload.get("sub")),
            company_id=payload.get("company_id"),
            role=payload.get("role"),
        )
    except (JWTError, TypeError, ValueError):
        return None


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    token_data = decode_token(credentials.credentials)
    if token_data is None:
        logger.warning("Rejected request with invalid token")
        raise credentials_exception

    user = (
        db.query(User)
        .filter(
            User.id == token_data.user_id,
            User.company_id == token_data.company_id
        )
        .first()
    )

    if user is None or not user.is_active:
        raise credentials_exception

    return user
