"""Annuaire utilisateurs - résolution de l'email d'un user_id"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskmaster.core.errors import DirectoryLookupError
from taskmaster.models.user import User


def lookup_email(db: Session, user_id: str) -> str:
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise DirectoryLookupError(f"failed to query user email: {exc}") from exc

    if not user:
        raise DirectoryLookupError(f"user not found: {user_id}")
    if not user.email:
        raise DirectoryLookupError(f"no email for user: {user_id}")
    return user.email
