"""Keep a local User row in step with the identity provider."""
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth import Principal
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

_ROLE_RANK = {UserRole.USER: 0, UserRole.MERCHANT: 1, UserRole.ADMIN: 2}


def effective_role(stored: UserRole, granted: UserRole) -> UserRole:
    """The higher of the stored role (e.g. promoted on approval) and the provider-granted role."""
    return stored if _ROLE_RANK[stored] >= _ROLE_RANK[granted] else granted


def _find_user(db: Session, subject: str):
    return db.query(User).filter(User.auth_sub == subject).first()


def create_user(db: Session, principal: Principal) -> User:
    """Insert the user; if a concurrent request inserted the same subject first, return that row."""
    user = User(
        id=str(uuid.uuid4()),
        auth_sub=principal.subject,
        email=principal.email,
        name=principal.name,
        role=principal.role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_user(db, principal.subject)
        if existing is None:
            raise
        logger.info("User %s already created by a concurrent request", principal.subject)
        return existing
    db.refresh(user)
    logger.info("Created user %s (role=%s)", user.id, user.role.value)
    return user


def upsert_user(db: Session, principal: Principal) -> User:
    user = _find_user(db, principal.subject)
    if user is None:
        user = create_user(db, principal)

    changed = False
    if principal.email and user.email != principal.email:
        user.email = principal.email
        changed = True
    if principal.name and user.name != principal.name:
        user.name = principal.name
        changed = True
    role = effective_role(user.role, principal.role)
    if role != user.role:
        user.role = role
        changed = True
    if changed:
        db.commit()
        db.refresh(user)
    return user
