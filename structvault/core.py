from types import UnionType
from typing import (
    Annotated,
    Any,
    Callable,
    Dict,
    List,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from .tags import Tag


# structvault/core.py
# --- Metaclass ---
class StructMeta(type):
    """Metaclass for Struct that collects fields, defaults, types and tags."""

    def __new__(mcls, name: str, bases: tuple, namespace: dict) -> Any:
        # --- Field and Default Collection ---
        fields: List[str] = []
        defaults: Dict[str, Any] = {}
        for base in bases:
            if hasattr(base, "_fields"):
                fields.extend(getattr(base, "_fields"))
            if hasattr(base, "_defaults"):
                defaults.update(getattr(base, "_defaults"))

        annotations = namespace.get("__annotations__")
        annotate = namespace.get("__annotate__") or namespace.get("__annotate_func__")
        if annotations is None and annotate is not None:
            # Python 3.14+ evaluates class annotations lazily
            import annotationlib

            annotations = annotationlib.call_annotate_function(
                annotate, annotationlib.Format.FORWARDREF
            )
        annotations = annotations or {}
        new_fields = [k for k in annotations if not k.startswith("_")]
        fields.extend(new_fields)

        for k in new_fields:
            if k in namespace:
                defaults[k] = namespace.pop(k)

        seen: set[str] = set()
        unique_fields: List[str] = []
        for f in fields:
            if f not in seen:
                seen.add(f)
                unique_fields.append(f)
        fields = unique_fields

        namespace["__slots__"] = new_fields
        namespace["_fields"] = fields
        namespace["_defaults"] = defaults

        cls = super().__new__(mcls, name, bases, namespace)
        cls_any = cast(Any, cls)

        cls_any._field_metadata = {}
        cls_any._tags = {}

        # Use include_extras=True to keep Annotated metadata (and tags)
        types = get_type_hints(cls, include_extras=True)
        cls_any._types = {f: types[f] for f in fields if f in types}

        for field_name, field_type in list(cls_any._types.items()):
            if get_origin(field_type) is Annotated:
                args = get_args(field_type)
                metadata = args[1:]
                cls_any._field_metadata[field_name] = metadata
                cls_any._types[field_name] = args[0]
                for item in metadata:
                    if isinstance(item, Tag):
                        cls_any._tags[field_name] = item.raw

        return cls


# --- Struct Builder Class ---
class StructBuilder:
    """Fluent interface builder for creating Struct instances."""

    def __init__(self, struct_class: Any) -> None:
        self._struct_class = struct_class
        self._values: Dict[str, Any] = {}

    def __getattr__(self, name: str) -> Callable[..., Any]:
        """Create a fluent setter method for any field."""
        if name.startswith("_"):
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{name}'"
            )

        def setter(value: Any) -> Any:
            self._values[name] = value
            return self

        return setter

    def build(self, **additional_kwargs: Any) -> Any:
        """Build the final struct instance."""
        final_values = {**self._values, **additional_kwargs}
        return self._struct_class(**final_values)


# --- Main Struct Class ---
class Struct(metaclass=StructMeta):
    """Typed record whose fields may carry vault tags.

    Example:
        class User(Struct):
            name: Annotated[str, tag("name,required,min=3")]
            email: Annotated[str, tag("email,required,email")]
            nickname: str = ""  # untagged, never stored
    """

    _fields: List[str] = []
    _defaults: Dict[str, Any] = {}
    _types: Dict[str, Any] = {}
    _field_metadata: Dict[str, tuple] = {}
    _tags: Dict[str, str] = {}

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Initialize a new struct instance."""
        total_fields = len(self._fields)

        invalid_fields = [k for k in kwargs if k not in self._fields]
        if invalid_fields:
            raise TypeError(
                f"Invalid field(s) for {self.__class__.__name__}: {', '.join(invalid_fields)}. "  # noqa: E501
                f"Valid fields are: {', '.join(self._fields)}."
            )

        if len(args) + len(kwargs) > total_fields:
            raise TypeError(
                f"Too many arguments for {self.__class__.__name__}. "
                f"Expected at most {total_fields}, got {len(args) + len(kwargs)}. "  # noqa: E501
                f"Fields: {', '.join(self._fields)}."
            )

        assigned_fields: set[str] = set()

        # Positional arguments
        for name, value in zip(self._fields, args):
            self._validate_and_set(name, value)
            assigned_fields.add(name)

        # Keyword arguments
        for name, value in kwargs.items():
            if name in assigned_fields:
                raise TypeError(
                    f"Duplicate value for field '{name}' in {self.__class__.__name__}. "  # noqa: E501
                    f"Fields can only be assigned once."
                )
            self._validate_and_set(name, value)
            assigned_fields.add(name)

        # Default values for any remaining fields
        for name in self._fields:
            if name not in assigned_fields:
                if name in self._defaults:
                    default = self._defaults[name]
                    value = default() if callable(default) else default
                    self._validate_and_set(name, value)
                else:
                    raise TypeError(
                        f"Missing required field '{name}' for {self.__class__.__name__}. "  # noqa: E501
                        f"Fields: {', '.join(self._fields)}."
                    )

    def _validate_type(self, name: str, value: Any, expected: Any) -> None:
        """Validate that value matches the expected type annotation."""
        if not expected or expected is Any:
            return

        origin_type = get_origin(expected)

        # Handle Union types (including Optional which is Union[T, None])
        if origin_type is Union or origin_type is UnionType:
            for union_type in get_args(expected):
                try:
                    if union_type is type(None) and value is None:
                        return
                    elif union_type is not type(None) and isinstance(
                        value, get_origin(union_type) or union_type
                    ):
                        return
                except TypeError:
                    continue
            raise TypeError(
                f"Field '{name}' expects {expected}, got {type(value).__name__}"
            )

        elif origin_type:
            # For generic types like list[int], dict[str, int], just check the origin
            if isinstance(origin_type, type) and not isinstance(value, origin_type):
                raise TypeError(
                    f"Field '{name}' expects {expected}, got {type(value).__name__}"
                )
        elif isinstance(expected, type):
            # int is accepted where float is declared
            if expected is float and isinstance(value, int) and not isinstance(value, bool):
                return
            if not isinstance(value, expected):
                raise TypeError(
                    f"Field '{name}' expects {expected}, got {type(value).__name__}"
                )

    def _validate_and_set(self, name: str, value: Any) -> None:
        """Type-check a value and store it on the instance."""
        self._validate_type(name, value, self._types.get(name))
        object.__setattr__(self, name, value)

    def __setattr__(self, name: str, value: Any) -> None:
        """Set attribute with type checking."""
        if name not in self._fields:
            raise AttributeError(
                f"'{self.__class__.__name__}' has no field '{name}'. "
                f"Valid fields are: {', '.join(self._fields)}."
            )
        self._validate_and_set(name, value)

    # --- Equality ---
    def __eq__(self, other: object) -> bool:
        """Check equality by comparing all field values."""
        if not isinstance(other, self.__class__):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self._fields)

    # --- Serialization ---
    def to_dict(self, recursive: bool = True) -> Dict[str, Any]:
        """Convert the struct to a dictionary keyed by native field names.

        Unlike validation output, this ignores tags entirely.
        """
        d = {}
        for name in self._fields:
            value = getattr(self, name)
            if recursive:
                if isinstance(value, Struct):
                    value = value.to_dict(recursive=True)
                elif isinstance(value, (list, tuple)):
                    value = type(value)(
                        v.to_dict(recursive=True) if isinstance(v, Struct) else v
                        for v in value
                    )
                elif isinstance(value, dict):
                    value = {
                        k: v.to_dict(recursive=True) if isinstance(v, Struct) else v
                        for k, v in value.items()
                    }
            d[name] = value
        return d

    # --- String Representation ---
    def __repr__(self) -> str:
        """Return a detailed string representation of the struct."""
        fields_str = ", ".join(f"{f}={getattr(self, f)!r}" for f in self._fields)
        return f"{self.__class__.__name__}({fields_str})"

    # --- Metadata Access ---
    @classmethod
    def get_field_metadata(cls, field_name: str) -> tuple:
        """Get metadata for a specific field from Annotated type hints."""
        return cls._field_metadata.get(field_name, ())

    @classmethod
    def get_field_tag(cls, field_name: str) -> str:
        """Get the raw vault tag of a field, or "" when it has none."""
        return cls._tags.get(field_name, "")

    # --- Builder Pattern Support ---
    @classmethod
    def builder(cls) -> "StructBuilder":
        """Create a fluent builder for this struct type."""
        return StructBuilder(cls)
