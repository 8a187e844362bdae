import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api.auth import end_session, start_session
from app.crud import user as crud_user
from app.database import get_db
from app.schemas.user import UserLogin, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/login", tags=["login"])


def _login(response: Response, db: Session, email: str, password: str) -> dict:
    user = crud_user.authenticate_user(db, email, password)
    if user is None:
        logger.info(f"Failed login for {email.lower()}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    return start_session(response, user)


# Form login for the interactive docs; the username field carries the email
@router.post("", response_model=TokenResponse)
def login_form(response: Response, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return _login(response, db, form_data.username, form_data.password)


@router.post("/json", response_model=TokenResponse)
def login_json(response: Response, credentials: UserLogin, db: Session = Depends(get_db)):
    return _login(response, db, credentials.email, credentials.password)


@router.post("/logout")
def logout(response: Response):
    end_session(response)
    return {"message": "Logged out successfully"}
