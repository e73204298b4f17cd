"""
Translates any raised failure into the caller-visible `{statusCode, errors}`
shape.

Structured upstream errors keep their status code and message list;
everything else becomes one message with status 500.
"""

import logging
from typing import List, Optional

from cmr_graph.models.errors import ErrorResponse

logger = logging.getLogger("cmr_graph.errors")

DEFAULT_STATUS_CODE = 500


class UpstreamError(Exception):
    """Raised when the catalog answers with an error status."""

    def __init__(self, errors: Optional[List[str]] = None, status_code: int = DEFAULT_STATUS_CODE):
        self.errors = list(errors) if errors else ["Unknown Error"]
        self.status_code = status_code
        super().__init__("; ".join(self.errors))


class MalformedResponseError(Exception):
    """Raised when an upstream payload lacks a structurally required key."""
    pass


def parse_error(
    error: BaseException,
    should_log: bool = True,
    re_raise: bool = False,
) -> ErrorResponse:
    """
    Translate any failure into an ErrorResponse.

    Each extracted message is logged when `should_log` is set. With
    `re_raise` the original error is raised again after logging so an outer
    handler can apply its own mapping.
    """
    name = type(error).__name__

    if isinstance(error, UpstreamError):
        status_code = error.status_code
        messages = list(error.errors)
    else:
        status_code = DEFAULT_STATUS_CODE
        messages = [str(error) or name]

    if should_log:
        for message in messages:
            logger.warning("%s (%s): %s", name, status_code, message)

    if re_raise:
        raise error

    return ErrorResponse(status_code=status_code, errors=messages)
