import time
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.orm import Session

SLOW_TRANSACTION_SECONDS = 30


class DatabaseOperationError(Exception):
    """Raised when a database transaction fails and has been rolled back."""


@contextmanager
def db_transaction(db: Session):
    """
    Context manager to wrap database operations in a transaction.
    Commits on success; rolls back on exception.

    Args:
        db: Database session
    """
    start_time = time.time()
    try:
        yield

        duration = time.time() - start_time
        if duration > SLOW_TRANSACTION_SECONDS:
            logger.warning(
                f"Slow database transaction completed in {duration:.2f} seconds"
            )

        db.commit()

    except Exception as e:
        db.rollback()
        duration = time.time() - start_time
        logger.exception(
            f"Database transaction failed after {duration:.2f} seconds: {str(e)}"
        )
        raise DatabaseOperationError(f"Database operation failed: {str(e)}") from e


@contextmanager
def read_db_transaction(db: Session, **kwargs):
    """
    Context manager to wrap database operations in a read transaction.
    """
    try:
        yield
    except Exception as e:
        logger.exception(
            f"Read database transaction failed in with kwargs: {kwargs}: {str(e)}"
        )
        raise DatabaseOperationError(
            f"Read database operation failed: {str(e)}"
        ) from e
