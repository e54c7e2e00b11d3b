import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.core.exceptions import AuthenticationError, InvalidInputError
from eventhub.core.security import create_access_token, get_current_user
from eventhub.crud.users import authenticate_user, create_user, get_user_by_email, update_user_jti
from eventhub.database.db import get_db
from eventhub.models.users import User
from eventhub.schemas.registrations import MessageOut
from eventhub.schemas.users import LoginRequest, SignupRequest, TokenOut, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_token(db: Session, user: User) -> dict:
    # Logins share the current session id; only logout rotates it
    jti = user.token_jti or update_user_jti(db, user)
    token = create_access_token(data={"sub": str(user.id)}, jti=jti)
    return {"access_token": token, "token_type": "bearer", "user": user}


@router.post("/signup", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise InvalidInputError("User already exists")
    try:
        user = create_user(db, payload.name, payload.email, payload.password)
    except IntegrityError:
        db.rollback()
        raise InvalidInputError("User already exists")
    logger.info("User %s signed up", user.id)
    return _issue_token(db, user)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, payload.email, payload.password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    return _issue_token(db, user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/logout", response_model=MessageOut)
def logout(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    update_user_jti(db, current_user)
    return {"message": "Logged out"}
