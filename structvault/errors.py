"""Exceptions raised by structvault."""

from typing import Any, Optional

UNKNOWN_VALIDATION = "unknown-validation"
UNKNOWN_TRANSFORMATION = "unknown-transformation"
FAILED_VALIDATION = "failed-validation"
FAILED_TRANSFORMATION = "failed-transformation"
UNSUPPORTED_FIELD_TYPE = "unsupported-field-type"


class VaultError(Exception):
    """Base class for all structvault errors."""


class RegistrationError(VaultError, ValueError):
    """A rule was registered with an empty name or a non-callable function."""


class ConfigurationError(VaultError):
    """A rule was misused by the schema: missing/bad param or unsupported kind."""


class FieldError(VaultError):
    """A single field failed; carries everything needed to build a message.

    Attributes:
        code: reason for the error, e.g. ``failed-validation``
        tag: name of the rule that failed, e.g. ``min``
        field: output field name (tag name wins over the attribute name)
        struct_field: the attribute name on the record
        path: dotted/bracketed location of the field in the record
        value: the offending value
        param: rule parameter, "" when the rule takes none
        kind: kind of the value (``str``, ``int``, ``record``, ...)
        type: runtime type of the value
    """

    def __init__(
        self,
        code: str,
        tag: str,
        field: str,
        struct_field: str = "",
        path: str = "",
        value: Any = None,
        param: str = "",
        kind: str = "",
        type: Optional[type] = None,
    ) -> None:
        self.code = code
        self.tag = tag
        self.field = field
        self.struct_field = struct_field or field
        self.path = path or field
        self.value = value
        self.param = param
        self.kind = kind
        self.type = type
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.code == UNSUPPORTED_FIELD_TYPE:
            return f"unsupported field type for '{self.path}': {self.kind}"
        return f"field validation for '{self.field}' failed on the '{self.tag}' tag"

    def __repr__(self) -> str:
        return (
            f"FieldError(code={self.code!r}, tag={self.tag!r}, "
            f"field={self.field!r}, path={self.path!r})"
        )
