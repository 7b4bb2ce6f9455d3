"""Patient identifier validation.

A valid identifier is an optional single ``*`` marker followed by one or more
ASCII digits, with nothing else around it. The marker flags an incomplete
account and is preserved on the returned :class:`Identifier`.
"""

from __future__ import annotations

import re
from typing import Any

from .data_models import Identifier
from .errors import IdentifierFormatError

IDENTIFIER_PATTERN = re.compile(r"\*?[0-9]+")


def validate(raw: Any) -> Identifier:
    """Validate a raw patient identifier.

    Parameters
    ----------
    raw : Any
        Value of the ``patient-id`` field. Only strings can be valid.

    Returns
    -------
    Identifier
        The identifier, unchanged.

    Raises
    ------
    IdentifierFormatError
        If ``raw`` is not a string of the form ``*?[0-9]+``.

    Examples
    --------
    >>> validate("*12345")
    Identifier(value='*12345')

    >>> validate("12a45")
    Traceback (most recent call last):
        ...
    patient_intake.errors.IdentifierFormatError: Invalid patient identifier: '12a45'
    """
    if not isinstance(raw, str) or IDENTIFIER_PATTERN.fullmatch(raw) is None:
        raise IdentifierFormatError(f"Invalid patient identifier: {raw!r}")
    return Identifier(raw)


def is_complete(identifier: Identifier) -> bool:
    """True unless the validated identifier starts with the ``*`` marker."""
    return not identifier.is_marked
