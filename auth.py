"""Session-cookie authentication backing the ``current_user_id`` dependency."""
import logging
import secrets
from typing import Mapping, Optional

from fastapi import Cookie, Depends
from passlib.context import CryptContext
from sqlalchemy.orm import Session

import models
from config import Config
from database import get_db
from errors import Unauthorized, ValidationError
from validation import validate_registration

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=Config.PASSWORD_SCHEMES, deprecated="auto")


def register_user(db: Session, data: Mapping[str, str]) -> models.User:
    payload = validate_registration(data).unwrap()

    existing_user = db.query(models.User).filter(models.User.email == payload.email).first()
    if existing_user:
        raise ValidationError({"email": ["This email has already been taken."]})

    user = models.User(
        name=payload.name,
        email=payload.email,
        hashed_password=pwd_context.hash(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    user = db.query(models.User).filter(models.User.email == (email or "").strip().lower()).first()
    if not user or not pwd_context.verify(password or "", user.hashed_password):
        raise Unauthorized("Invalid email or password")
    return user


def start_session(db: Session, user: models.User) -> str:
    token = secrets.token_hex(32)
    db.add(models.AuthSession(token=token, user_id=user.id))
    db.commit()
    return token


def end_session(db: Session, token: Optional[str]) -> None:
    if not token:
        return
    db.query(models.AuthSession).filter(models.AuthSession.token == token).delete(synchronize_session=False)
    db.commit()


def resolve_user_id(db: Session, token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    session = db.get(models.AuthSession, token)
    return session.user_id if session else None


def current_user_id(
    session_token: Optional[str] = Cookie(None, alias=Config.SESSION_COOKIE_NAME),
    db: Session = Depends(get_db),
) -> Optional[int]:
    return resolve_user_id(db, session_token)


def require_user(user_id: Optional[int]) -> int:
    if user_id is None:
        raise Unauthorized()
    return user_id
