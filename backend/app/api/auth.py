from fastapi import Depends, HTTPException, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.utils.utils import create_access_token, read_token_subject
from config import ACCESS_TOKEN_EXPIRE_MINUTES

AUTH_COOKIE = "access_token"

cookie_scheme = APIKeyCookie(name=AUTH_COOKIE)


def get_current_user(token: str = Depends(cookie_scheme), db: Session = Depends(get_db)) -> User:
    user_id = read_token_subject(token)
    user = db.get(User, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please re-login.",
        )
    return user


def start_session(response: Response, user: User) -> dict:
    """Issues a token for `user` and stores it in the auth cookie."""
    access_token = create_access_token(user.id)
    response.set_cookie(
        key=AUTH_COOKIE,
        value=access_token,
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
    )
    return {"access_token": access_token, "token_type": "bearer", "user_id": user.id}


def end_session(response: Response):
    response.delete_cookie(AUTH_COOKIE)
