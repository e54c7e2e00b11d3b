import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from eventhub.core.security import hash_password, verify_password
from eventhub.models.users import User


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(func.lower(User.email) == email.strip().lower()))


def create_user(db: Session, name: str, email: str, password: str) -> User:
    user = User(
        name=name.strip(),
        email=email.strip().lower(),
        password_hash=hash_password(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def update_user_jti(db: Session, user: User) -> str:
    """Issue a new session id for ``user``; tokens carrying the old one stop verifying."""
    user.token_jti = uuid.uuid4().hex
    db.commit()
    db.refresh(user)
    return user.token_jti
