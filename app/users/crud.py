from sqlalchemy.orm import Session
from app.users.models import User
from app.users import schemas as user_schema
from app.security.passwords import hash_password


def create_user(db: Session, company_id: int, user: user_schema.UserCreateSchema):
    new_user = User(
        company_id=company_id,
        username=user.username.strip().lower(),
        hashed_password=hash_password(user.password),
        full_name=user.full_name.strip(),
        role=user.role,
        is_active=True,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


def get_user_by_username(db: Session, company_id: int, username: str):
    return (
        db.query(User)
        .filter(User.company_id == company_id, User.username == username)
        .first()
    )


def get_user(db: Session, company_id: int, user_id: int):
    return (
        db.query(User)
        .filter(User.company_id == company_id, User.id == user_id)
        .first()
    )


def get_all_users(db: Session, company_id: int, skip: int = 0, limit: int = 100):
    return (
        db.query(User)
        .filter(User.company_id == company_id)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_user(db: Session, user: User, updated_user: user_schema.UserUpdateSchema):
    if updated_user.password:
        user.hashed_password = hash_password(updated_user.password)
    if updated_user.full_name is not None:
        user.full_name = updated_user.full_name.strip()
    if updated_user.role is not None:
        user.role = updated_user.role
    if updated_user.is_active is not None:
        user.is_active = updated_user.is_active

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User):
    db.delete(user)
    db.commit()
    return True
