"""
StructVault - tag-driven validation and transformation of typed records

Walks a record's tagged fields, applies named rules (validations and
transformations) in tag order and returns the document to persist.

Example:
    from typing import Annotated
    from structvault import Struct, Vault, Method, tag

    class User(Struct):
        name: Annotated[str, tag("name,required,min=3,transform=strip")]
        email: Annotated[str, tag("email,required,email")]
        age: Annotated[int, tag("age,omitempty,min=18")] = 0

    vault = Vault()
    vault.register_transformation("strip", lambda ctx, path, value: value.strip())

    vault.validate(User("  John Doe ", "john@example.com"), Method.CREATE)
    # {"name": "John Doe", "email": "john@example.com"}
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core import Struct, StructBuilder, StructMeta
from .errors import (
    FAILED_TRANSFORMATION,
    FAILED_VALIDATION,
    UNKNOWN_TRANSFORMATION,
    UNKNOWN_VALIDATION,
    UNSUPPORTED_FIELD_TYPE,
    ConfigurationError,
    FieldError,
    RegistrationError,
    VaultError,
)
from .options import Method, Options, ValidationOpts, field_path, resolve
from .registry import Registry
from .tags import Tag, parse_tag, tag
from .validator import Validator
from .vault import Collection, DocumentStore, Vault

__all__ = [
    "Struct",
    "StructBuilder",
    "StructMeta",
    "Tag",
    "tag",
    "parse_tag",
    "Registry",
    "Validator",
    "Vault",
    "Collection",
    "DocumentStore",
    "Method",
    "Options",
    "ValidationOpts",
    "field_path",
    "resolve",
    "VaultError",
    "RegistrationError",
    "ConfigurationError",
    "FieldError",
    "UNKNOWN_VALIDATION",
    "UNKNOWN_TRANSFORMATION",
    "FAILED_VALIDATION",
    "FAILED_TRANSFORMATION",
    "UNSUPPORTED_FIELD_TYPE",
]
