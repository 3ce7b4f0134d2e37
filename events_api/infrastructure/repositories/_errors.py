"""Translation of persistence errors into domain errors"""

import logging
from contextlib import contextmanager
from typing import Mapping, Optional

from sqlalchemy.exc import IntegrityError

from ...domain.errors import ConflictError


logger = logging.getLogger(__name__)


@contextmanager
def translate_integrity_errors(
    message: str = "Resource conflicts with existing data",
    by_constraint: Optional[Mapping[str, str]] = None,
):
    """Turn constraint violations into ConflictError without leaking driver details.

    ``by_constraint`` maps a fragment of the violated constraint's name (or
    column) to a more specific message; ``message`` is used when none match.
    """
    try:
        yield
    except IntegrityError as e:
        logger.info("Integrity error translated to conflict: %s", e.orig.__class__.__name__)
        raise ConflictError(_message_for(str(e.orig), message, by_constraint or {})) from e


def _message_for(detail: str, default: str, by_constraint: Mapping[str, str]) -> str:
    for fragment, text in by_constraint.items():
        if fragment in detail:
            return text
    return default
