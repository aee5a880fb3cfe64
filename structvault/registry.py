"""Named validation and transformation functions.

Registration is expected to happen once at setup time. The registry takes no
locks, so registering while validations run in other threads is unsafe.
"""

import logging
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .errors import RegistrationError
from .rules import BUILT_IN_VALIDATIONS

logger = logging.getLogger(__name__)

# (ctx, path, value, param) -> bool, optionally async
ValidationFn = Callable[[Any, str, Any, str], Union[bool, Awaitable[bool]]]
# (ctx, path, value) -> new value or None, optionally async
TransformationFn = Callable[[Any, str, Any], Any]


def _check(kind: str, name: str, fn: Any) -> None:
    if not isinstance(name, str) or not name:
        raise RegistrationError(f"{kind} function name cannot be empty")
    if fn is None or not callable(fn):
        raise RegistrationError(f"{kind} function {name} cannot be empty")


class Registry:
    """Process-wide rule table, seeded with the built-in validations."""

    def __init__(self) -> None:
        self._validations: Dict[str, ValidationFn] = dict(BUILT_IN_VALIDATIONS)
        self._transformations: Dict[str, TransformationFn] = {}

    def register_validation(self, name: str, fn: ValidationFn) -> None:
        """Register ``fn`` under ``name``; replaces any rule of the same name."""
        _check("validation", name, fn)
        if name in self._validations:
            logger.debug("Replacing validation %r", name)
        self._validations[name] = fn
        logger.debug("Registered validation %r", name)

    def register_transformation(self, name: str, fn: TransformationFn) -> None:
        """Register ``fn`` under ``name``; replaces any rule of the same name."""
        _check("transformation", name, fn)
        if name in self._transformations:
            logger.debug("Replacing transformation %r", name)
        self._transformations[name] = fn
        logger.debug("Registered transformation %r", name)

    def get_validation(self, name: str) -> Optional[ValidationFn]:
        return self._validations.get(name)

    def get_transformation(self, name: str) -> Optional[TransformationFn]:
        return self._transformations.get(name)

    @property
    def validations(self) -> Mapping[str, ValidationFn]:
        return MappingProxyType(self._validations)

    @property
    def transformations(self) -> Mapping[str, TransformationFn]:
        return MappingProxyType(self._transformations)
