"""Per-call options and their resolution into walker flags.

``Options`` is what callers build; ``resolve`` turns it into the
``ValidationOpts`` the walker consumes for a given method.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple, Union

from pydantic import BaseModel

PathLike = Union[str, Sequence[str]]


class Method(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    VALIDATE = "validate"


def field_path(*segments: str) -> str:
    """Join path segments: ``field_path("address", "city") == "address.city"``."""
    if not segments or any(not s for s in segments):
        raise ValueError("field path segments must be non-empty")
    return ".".join(segments)


def _as_path(path: PathLike) -> str:
    if isinstance(path, str):
        if not path:
            raise ValueError("field path cannot be empty")
        return path
    return field_path(*path)


class Options(BaseModel):
    """Caller options, frozen; every builder returns a modified copy.

    Example:
        Options().unskip_required().allow_empty_fields("address.city")
    """

    model_config = {"frozen": True}

    skip_validation_: bool = False
    skip_required_: bool = False
    unskip_required_: bool = False
    allow_empty_fields_: Tuple[str, ...] = ()
    merge_fields_: Tuple[str, ...] = ()
    id_: str = ""

    def skip_validation(self) -> "Options":
        """Skip every rule; names, ``-`` and omission directives still apply."""
        return self.model_copy(update={"skip_validation_": True})

    def skip_required(self) -> "Options":
        """Ignore ``required`` on create, where it is honoured by default."""
        return self.model_copy(update={"skip_required_": True})

    def unskip_required(self) -> "Options":
        """Honour ``required`` on update/validate, where it is skipped by default."""
        return self.model_copy(update={"unskip_required_": True})

    def allow_empty_fields(self, *paths: PathLike) -> "Options":
        """Field paths that bypass omission directives for this call."""
        extra = tuple(_as_path(p) for p in paths)
        return self.model_copy(update={"allow_empty_fields_": self.allow_empty_fields_ + extra})

    def merge_fields(self, *paths: PathLike) -> "Options":
        """Field paths the store should overwrite on update; others are untouched."""
        extra = tuple(_as_path(p) for p in paths)
        return self.model_copy(update={"merge_fields_": self.merge_fields_ + extra})

    def id(self, doc_id: str) -> "Options":
        """Custom document id for create."""
        return self.model_copy(update={"id_": doc_id})


class ValidationOpts(BaseModel):
    model_config = {"frozen": True}

    method: Method = Method.VALIDATE
    skip_validation: bool = False
    skip_required: bool = False
    empty_fields_allowed: Tuple[str, ...] = ()


def resolve(method: Union[Method, str], options: Optional[Options] = None) -> ValidationOpts:
    """Concrete walker flags for ``method``.

    ``required`` is honoured on create unless ``skip_required()`` was set and
    skipped on update/validate unless ``unskip_required()`` was set.
    """
    method = Method(method)
    options = options or Options()

    if method is Method.CREATE:
        skip_required = options.skip_required_
    else:
        skip_required = not options.unskip_required_

    return ValidationOpts(
        method=method,
        skip_validation=options.skip_validation_,
        skip_required=skip_required,
        empty_fields_allowed=options.allow_empty_fields_,
    )
