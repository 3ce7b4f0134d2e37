"""Helpers shared by the use cases"""

import logging
from typing import Iterable

from ...domain.errors import ValidationError
from ...domain.value_objects.email import Email


logger = logging.getLogger("events_api.domain_events")


def parse_email(value: str) -> Email:
    try:
        return Email(value)
    except ValueError as e:
        raise ValidationError(str(e), errors=[{"field": "email", "message": str(e)}])


def log_domain_events(domain_events: Iterable) -> None:
    """Record drained domain events once their transaction has committed"""
    for domain_event in domain_events:
        logger.info(
            type(domain_event).__name__,
            extra={key: str(value) for key, value in vars(domain_event).items()},
        )
