"""Field tag syntax: ``name,rule1,rule2=param,omitempty,...``.

The first segment is the output field name (empty keeps the native
attribute name); every other segment is a rule token. A tag of ``-``
excludes the field.
"""

from typing import List, Optional, Tuple

IGNORE_MARKER = "-"
OMIT_EMPTY = "omitempty"
TRANSFORM_PREFIX = "transform="

# dataclass field(metadata=...) key holding a raw tag string
METADATA_KEY = "vault"

_METHODS = ("create", "update", "validate")


class Tag:
    """Marker carrying a raw tag string in ``Annotated`` metadata."""

    __slots__ = ("raw",)

    def __init__(self, raw: str) -> None:
        if not isinstance(raw, str):
            raise TypeError(f"tag must be a string, got {type(raw).__name__}")
        self.raw = raw

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        return f"tag({self.raw!r})"


def tag(raw: str) -> Tag:
    """Attach a vault tag to a field: ``Annotated[str, tag("name,required")]``."""
    return Tag(raw)


def is_ignored(raw: str) -> bool:
    return not raw or raw == IGNORE_MARKER


def parse_tag(raw: str) -> List[str]:
    """Split a tag into rule tokens.

    Segments are whitespace-trimmed and empty ones dropped, except the name
    slot at index 0 which is always present.
    """
    segments = [segment.strip() for segment in raw.split(",")]
    return [segments[0]] + [s for s in segments[1:] if s]


def output_name(rules: List[str], native_name: str) -> str:
    return rules[0] if rules and rules[0] else native_name


def is_omission_directive(token: str) -> bool:
    if token == OMIT_EMPTY:
        return True
    return any(
        token in (f"{OMIT_EMPTY}_{method}", f"{OMIT_EMPTY}{method}")
        for method in _METHODS
    )


def omission_applies(rules: List[str], method: str) -> bool:
    """True when a general or a ``method``-scoped omission directive is present."""
    scoped = (f"{OMIT_EMPTY}_{method}", f"{OMIT_EMPTY}{method}")
    return any(token == OMIT_EMPTY or token in scoped for token in rules[1:])


def strip_omission_directives(rules: List[str]) -> List[str]:
    """Rule tokens to dispatch: name slot and omission directives removed."""
    return [token for token in rules[1:] if not is_omission_directive(token)]


def split_rule(token: str) -> Tuple[str, str]:
    name, _, param = token.partition("=")
    return name, param


def transformation_name(token: str) -> Optional[str]:
    """Name referenced by a ``transform=<name>`` token, None for other tokens."""
    if token.startswith(TRANSFORM_PREFIX):
        return token[len(TRANSFORM_PREFIX):]
    return None
