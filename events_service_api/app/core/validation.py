"""
Declarative payload validation.

Services describe the JSON body they accept as an ordered list of
``FieldDescriptor`` entries.  ``validate_payload`` walks that list,
dispatches every present value to a per-type parser and returns a
sanitized ``dict`` containing only the recognised fields.  Problems
are not raised one at a time: every field is checked and all failures
are collected into a single ``PayloadValidationError`` so that a client
can fix its request in one round trip.  The order of the collected
errors always follows the order of the schema.

The module is pure.  It performs no I/O and keeps no state between
calls, so it is safe to call from any number of concurrent requests.
"""

import math
import re
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError


FIELD_TYPES = ("string", "email", "number", "date", "ownerId", "options")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
# Decimal notation with ASCII digits only; a leading sign or dot is allowed.
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_datetime_adapter = TypeAdapter(datetime)


@dataclass(frozen=True)
class FieldDescriptor:
    """Description of one expected field of a request body.

    ``min`` and ``max`` only apply to ``number`` fields and ``options``
    only to ``options`` fields.  When ``many`` is set the value must be
    an array and every element is parsed with the rule of ``type``.
    """

    name: str
    type: str
    required: bool = False
    min: Optional[float] = None
    max: Optional[float] = None
    options: Sequence[str] = ()
    many: bool = False

    def __post_init__(self) -> None:
        # A bare string would turn membership checks into substring checks.
        if not isinstance(self.options, str):
            object.__setattr__(self, "options", tuple(self.options))


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation problem."""

    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class PayloadValidationError(Exception):
    """Raised when a request body does not satisfy its schema.

    ``details`` holds every ``FieldError`` found, in schema order.
    """

    def __init__(self, message: str, details: Iterable[FieldError]) -> None:
        super().__init__(message)
        self.message = message
        self.details: List[FieldError] = list(details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "details": [detail.as_dict() for detail in self.details],
        }


Reporter = Callable[[str], None]


def is_object_id(value: Any) -> bool:
    """Return ``True`` if ``value`` is a 24 character hexadecimal string."""
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.fullmatch(value))


def _parse_string(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        report(f"{field.name} must be a string.")
        return None
    trimmed = value.strip()
    if not trimmed:
        report(f"{field.name} must be a non-empty string.")
        return None
    return trimmed


def _parse_email(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        report(f"{field.name} must be a string.")
        return None
    trimmed = value.strip()
    if not trimmed:
        report(f"{field.name} must be a non-empty email string.")
        return None
    if not EMAIL_PATTERN.fullmatch(trimmed):
        report(f"{field.name} must be a valid email address.")
        return None
    return trimmed


def _to_number(value: Any) -> Optional[float]:
    # bool is an int subclass but never a meaningful number in a payload
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not NUMBER_PATTERN.fullmatch(text):
            return None
        try:
            return int(text)
        except ValueError:
            return float(text)
    return None


def _parse_number(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[float]:
    number = _to_number(value)
    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        report(f"{field.name} must be a valid number.")
        return None
    if field.min is not None and number < field.min:
        report(f"{field.name} must be greater than or equal to {field.min}.")
        return None
    if field.max is not None and number > field.max:
        report(f"{field.name} must be less than or equal to {field.max}.")
        return None
    return number


def _parse_date(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[datetime]:
    if isinstance(value, bool):
        report(f"{field.name} must be a valid date.")
        return None
    try:
        parsed = _datetime_adapter.validate_python(value)
    except PydanticValidationError:
        report(f"{field.name} must be a valid date.")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_owner_id(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[str]:
    owner_id = _parse_string(report, field, value)
    if owner_id is None:
        return None
    if not is_object_id(owner_id):
        report(f"{field.name} must be a valid ObjectId string.")
        return None
    return owner_id


def _parse_option(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[str]:
    if isinstance(value, str):
        value = value.strip()
    if value not in field.options:
        report(f"{field.name} must be one of: {', '.join(field.options)}.")
        return None
    return value


_PARSERS: Dict[str, Callable[[Reporter, FieldDescriptor, Any], Any]] = {
    "string": _parse_string,
    "email": _parse_email,
    "number": _parse_number,
    "date": _parse_date,
    "ownerId": _parse_owner_id,
    "options": _parse_option,
}


def _parse_many(report: Reporter, field: FieldDescriptor, value: Any) -> Optional[List[Any]]:
    if not isinstance(value, list):
        report(f"{field.name} must be an array.")
        return None
    parser = _PARSERS[field.type]
    items: List[Any] = []
    for index, item in enumerate(value):
        messages: List[str] = []
        element = replace(field, name=f"{field.name}[{index}]", many=False)
        parsed = parser(messages.append, element, item)
        if messages:
            report(messages[0])
            return None
        items.append(parsed)
    return items


def validate_payload(
    schema: Sequence[FieldDescriptor],
    body: Any,
    message: str = "Invalid payload.",
) -> Dict[str, Any]:
    """Validate ``body`` against ``schema`` and return the sanitized data.

    Parameters
    ----------
    schema : sequence of FieldDescriptor
        Expected fields in the order errors should be reported.
    body : Any
        Decoded JSON request body.  Anything other than a JSON object
        is rejected with a single ``body`` error.
    message : str
        Summary message carried by the raised error.

    Returns
    -------
    dict
        Parsed values keyed by field name.  Unknown input keys and
        absent optional fields do not appear.  The mapping may be empty.

    Raises
    ------
    PayloadValidationError
        If the body is not an object or any field fails validation.
    """
    if not isinstance(body, dict):
        raise PayloadValidationError(
            message,
            [FieldError("body", "Request body must be a JSON object.")],
        )

    errors: List[FieldError] = []
    data: Dict[str, Any] = {}

    for field in schema:
        if field.type not in FIELD_TYPES:
            errors.append(FieldError(field.name, f'Invalid type: "{field.type}".'))
            continue
        if field.type == "options" and isinstance(field.options, str):
            errors.append(FieldError(field.name, f"{field.name} options must be a list of strings."))
            continue
        if field.type == "options" and not field.options:
            errors.append(FieldError(field.name, f"{field.name} has no options configured."))
            continue

        value = body.get(field.name)
        if value is None:
            if field.required:
                errors.append(FieldError(field.name, f"{field.name} is required."))
            continue

        field_errors: List[str] = []
        parser = _parse_many if field.many else _PARSERS[field.type]
        parsed = parser(field_errors.append, field, value)
        if field_errors:
            errors.append(FieldError(field.name, field_errors[0]))
            continue
        data[field.name] = parsed

    if errors:
        raise PayloadValidationError(message, errors)
    return data
