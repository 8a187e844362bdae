from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.auth import end_session, get_current_user, start_session
from app.api.deps import to_http_exception
from app.crud import user as crud_user
from app.database import get_db
from app.models.user import User
from app.schemas.user import PasswordChange, UserCreate, UserResponse, UserSignupResponse, UserUpdate
from app.services.errors import ServiceError

router = APIRouter(prefix="/users", tags=["users"])


def _to_response(user: User) -> UserResponse:
    response = UserResponse.model_validate(user)
    response.has_profile = user.profile is not None
    return response


# Signup also signs the walker in
@router.post("/signup", response_model=UserSignupResponse, status_code=status.HTTP_201_CREATED)
def signup(response: Response, payload: UserCreate, db: Session = Depends(get_db)):
    try:
        user = crud_user.create_user(db, payload)
    except ServiceError as e:
        raise to_http_exception(e)
    return {**start_session(response, user), "user": _to_response(user)}


@router.get("/me", response_model=UserResponse)
def read_me(current_user: User = Depends(get_current_user)):
    return _to_response(current_user)


@router.put("/me", response_model=UserResponse)
def update_me(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _to_response(crud_user.update_user(db, current_user, user_update))
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/me/password")
def change_my_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        crud_user.change_password(db, current_user, payload.old_password, payload.new_password)
    except ServiceError as e:
        raise to_http_exception(e)
    return {"message": "Password updated"}


@router.delete("/me")
def delete_me(
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    crud_user.delete_user(db, current_user)
    end_session(response)
    return {"message": "Account and walking data deleted"}
