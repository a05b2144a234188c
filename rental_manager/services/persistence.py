# rental_manager/services/persistence.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .. import db
from ..errors import Conflict, NotFound, ServiceError, UnexpectedFailure

logger = logging.getLogger(__name__)


def get_or_404(model, id, label):
    obj = db.session.get(model, id)
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def is_unique_violation(error):
    # SQLite says "UNIQUE constraint failed", PostgreSQL "violates unique constraint"
    return 'unique' in str(error.orig).lower()


@contextmanager
def transaction(action, conflict=None):
    """
    Run the block as one unit of work and commit once at the end.

    Any failure rolls the whole unit back. A unique-constraint violation
    becomes a Conflict when a ``conflict`` message is given; every other
    database error surfaces as UnexpectedFailure.
    """
    try:
        yield db.session
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        if conflict and is_unique_violation(e):
            logger.warning("Conflict while trying to %s: %s", action, conflict)
            raise Conflict(conflict)
        logger.exception("Integrity error while trying to %s", action)
        raise UnexpectedFailure(f'Failed to {action}')
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Database error while trying to %s", action)
        raise UnexpectedFailure(f'Failed to {action}')
