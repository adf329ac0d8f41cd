import logging

from sqlalchemy.orm import Session

from storefront.errors import StorefrontError, BackendError

logger = logging.getLogger(__name__)

# Roll back the session and re-raise: domain errors pass through unchanged,
# database errors are wrapped in BackendError
def rollback_and_raise(db: Session, action: str, exc: Exception):
    db.rollback()
    if isinstance(exc, StorefrontError):
        logger.info("%s aborted: %s", action, exc)
        raise exc
    logger.exception("%s failed: %s", action, exc)
    raise BackendError(f"{action} failed") from exc
