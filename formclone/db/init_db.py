from sqlalchemy.orm import Session

from formclone.db.base import Base
# Imported for their side effect of registering tables on Base.metadata
from formclone.models import form, submission, user  # noqa: F401

def init_db(db: Session) -> None:
    """Create any missing tables on the session's bind"""
    try:
        Base.metadata.create_all(bind=db.get_bind())
    except Exception as e:
        db.rollback()
        raise e
