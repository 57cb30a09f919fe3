import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def commit_or_500(db: Session, failure_detail: str, *refresh, **log_context):
    """
    Commit the session and refresh the given instances.
    On failure the session is rolled back, the error logged and a 500 raised.
    """
    try:
        db.commit()
        for instance in refresh:
            db.refresh(instance)
    except Exception as exc:
        db.rollback()
        logger.error(failure_detail, extra={"error": str(exc), **log_context})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)
