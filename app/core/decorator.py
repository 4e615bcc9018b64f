from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import CatalogException, ConstraintViolation


def db_exception(stage: str):
    """Translate SQLAlchemy errors raised by a repository call into catalog errors."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except IntegrityError as e:
                raise ConstraintViolation(
                    f"Integrity error during {stage}: {e.orig}", stage=stage
                ) from e
            except SQLAlchemyError as e:
                raise CatalogException(
                    f"Database error during {stage}: {e}", stage=stage
                ) from e

        return wrapper

    return decorator
