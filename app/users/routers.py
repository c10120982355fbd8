from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from loguru import logger

from app.database import get_db
from app.users import crud as user_crud, schemas
from app.users.models import User
from app.users.permissions import admin_required

router = APIRouter()


@router.get("/", response_model=list[schemas.UserDisplaySchema])
def list_all_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return user_crud.get_all_users(db, current_user.company_id, skip, limit)


@router.post("/", response_model=schemas.UserDisplaySchema, status_code=status.HTTP_201_CREATED)
def create_user(
    user: schemas.UserCreateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    existing_user = user_crud.get_user_by_username(
        db, current_user.company_id, user.username.strip().lower()
    )
    if existing_user:
        raise HTTPException(status_code=400, detail="Username already exists")

    new_user = user_crud.create_user(db, current_user.company_id, user)
    logger.info(f"User {new_user.username} created by {current_user.username}")
    return new_user


@router.put("/{user_id}", response_model=schemas.UserDisplaySchema)
def update_user(
    user_id: int,
    updated_user: schemas.UserUpdateSchema,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = user_crud.get_user(db, current_user.company_id, user_id)
    if not user:
        logger.warning(f"User not found: {user_id}")
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == current_user.id and updated_user.is_active is False:
        raise HTTPException(status_code=400, detail="You cannot deactivate yourself.")

    user = user_crud.update_user(db, user, updated_user)
    logger.info(f"User {user.username} updated successfully")
    return user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    # Prevent self-deletion
    if user_id == current_user.id:
        logger.warning(f"Admin {current_user.username} attempted to delete themselves.")
        raise HTTPException(status_code=400, detail="You cannot delete yourself.")

    user = user_crud.get_user(db, current_user.company_id, user_id)
    if not user:
        logger.warning(f"User not found: {user_id}")
        raise HTTPException(status_code=404, detail="User not found")

    username = user.username
    user_crud.delete_user(db, user)
    logger.info(f"User {username} deleted successfully")
    return {"message": f"User {username} deleted successfully"}
