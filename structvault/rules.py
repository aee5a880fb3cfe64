"""Built-in validation rules and the value helpers they share.

Every validation takes ``(ctx, path, value, param)`` and returns a bool.
Misuse of a rule by the schema raises ``ConfigurationError``.
"""

import inspect
import operator
import re
from collections.abc import Iterator, Mapping
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict

from .errors import ConfigurationError
from .reflect import is_record, iter_fields

TIME_TYPES = (datetime, date, time)
SIZED_TYPES = (str, bytes, bytearray, list, tuple, set, frozenset)

# RFC 5322 addr-spec, restricted the way HTML form validators restrict it
_UCS = r"\u00a0-\ud7ff\uf900-\ufdcf\ufdf0-\uffef"
_ATOM = rf"[a-zA-Z\d!#$%&'*+\-/=?^_`{{|}}~{_UCS}]"
_QUOTED = (
    rf'"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x7f\x21\x23-\x5b\x5d-\x7e{_UCS}]'
    rf"|\\[\x01-\x09\x0b\x0c\x0d-\x7f{_UCS}]|[\x20\x09])*\""
)
_LABEL_EDGE = rf"[a-zA-Z\d{_UCS}]"
_TLD_EDGE = rf"[a-zA-Z{_UCS}]"
_LABEL_INNER = rf"[a-zA-Z\d\-.~{_UCS}]"
EMAIL_RE = re.compile(
    rf"(?:{_ATOM}+(?:\.{_ATOM}+)*|{_QUOTED})"
    rf"@(?:(?:{_LABEL_EDGE}|{_LABEL_EDGE}{_LABEL_INNER}*{_LABEL_EDGE})\.)+"
    rf"(?:{_TLD_EDGE}|{_TLD_EDGE}{_LABEL_INNER}*{_TLD_EDGE})\.?"
)


# --- Value helpers ---
def is_time_like(value: Any) -> bool:
    return isinstance(value, TIME_TYPES)


def is_supported(value: Any) -> bool:
    """Values that cannot be stored: callables, generators, coroutines, iterators."""
    if is_record(value):
        return True
    if callable(value) or inspect.isawaitable(value):
        return False
    return not isinstance(value, Iterator)


def has_value(value: Any) -> bool:
    """Type-aware non-empty check shared by ``required`` and ``omitempty``."""
    if value is None:
        return False
    if is_time_like(value):
        return True
    if is_record(value):
        return any(has_value(f.value) for f in iter_fields(value, tagged_only=False))
    if isinstance(value, (Mapping,) + SIZED_TYPES):
        return len(value) > 0
    if isinstance(value, (bool, int, float, Decimal, complex)):
        return value != 0
    return True


def kind_of(value: Any) -> str:
    """Short kind name used in errors."""
    if value is None:
        return "none"
    if is_record(value):
        return "record"
    if is_time_like(value):
        return "time"
    if isinstance(value, Mapping):
        return "map"
    if isinstance(value, (list, tuple)):
        return "sequence"
    return type(value).__name__


# --- Param parsing ---
def as_int(param: str) -> int:
    """Integer param with base prefixes; a leading zero means octal (``010`` is 8)."""
    digits = param.lstrip("+-")
    text = param
    if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
        text = param[: len(param) - len(digits)] + "0o" + digits[1:]
    try:
        return int(text, 0)
    except ValueError as e:
        raise ConfigurationError(f"invalid integer param '{param}'") from e


def as_number(param: str) -> Any:
    """Bound for an int value: integer param, else a float one.

    Float fields hold ints too, so ``min=0.5`` must work against ``10``.
    """
    try:
        return as_int(param)
    except ConfigurationError:
        try:
            return float(param)
        except ValueError:
            pass
        raise


def as_float(param: str) -> float:
    try:
        return float(param)
    except ValueError as e:
        raise ConfigurationError(f"invalid float param '{param}'") from e


def as_decimal(param: str) -> Decimal:
    try:
        return Decimal(param)
    except InvalidOperation as e:
        raise ConfigurationError(f"invalid decimal param '{param}'") from e


def as_time(param: str, like: Any) -> Any:
    """Parse an ISO-8601 param into the same time type as ``like``."""
    try:
        if isinstance(like, datetime):
            return datetime.fromisoformat(param)
        if isinstance(like, date):
            return date.fromisoformat(param)
        return time.fromisoformat(param)
    except ValueError as e:
        raise ConfigurationError(f"invalid ISO-8601 param '{param}'") from e


def _bound(rule: str, path: str, value: Any, param: str) -> tuple:
    """Return ``(measured, limit)`` for min/max comparisons."""
    if param == "":
        raise ConfigurationError(f"provide a {rule} param - {path}")

    if isinstance(value, (Mapping,) + SIZED_TYPES):
        return len(value), as_int(param)
    if isinstance(value, int) and not isinstance(value, bool):
        return value, as_number(param)
    if isinstance(value, float):
        return value, as_float(param)
    if isinstance(value, Decimal):
        return value, as_decimal(param)
    if is_time_like(value):
        return value, as_time(param, value)

    raise ConfigurationError(
        f"invalid field type for {rule} - {path}: {type(value).__name__}"
    )


def _compare(rule: str, path: str, op: Callable[[Any, Any], bool], value: Any, limit: Any) -> bool:
    try:
        return op(value, limit)
    except TypeError as e:
        # naive vs aware datetimes
        raise ConfigurationError(f"cannot compare {rule} param - {path}: {e}") from e


# --- Built-in validations ---
def validate_required(ctx: Any, path: str, value: Any, param: str) -> bool:
    return has_value(value)


def validate_email(ctx: Any, path: str, value: Any, param: str) -> bool:
    if not isinstance(value, str):
        return False
    return EMAIL_RE.fullmatch(value) is not None


def validate_min(ctx: Any, path: str, value: Any, param: str) -> bool:
    measured, limit = _bound("min", path, value, param)
    return _compare("min", path, operator.ge, measured, limit)


def validate_max(ctx: Any, path: str, value: Any, param: str) -> bool:
    measured, limit = _bound("max", path, value, param)
    return _compare("max", path, operator.le, measured, limit)


BUILT_IN_VALIDATIONS: Dict[str, Callable[..., bool]] = {
    "required": validate_required,
    "required_create": validate_required,
    "required_update": validate_required,
    "required_validate": validate_required,
    "email": validate_email,
    "max": validate_max,
    "min": validate_min,
}
