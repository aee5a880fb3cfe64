#!/usr/bin/env python3
"""
Walkthrough of structvault: tags, rules, transformations and collections
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Dict, List, Optional

from structvault import FieldError, Method, Options, Struct, Vault, tag


class Address(Struct):
    street: Annotated[str, tag("street,required")] = ""
    city: Annotated[str, tag("city,required,transform=title")] = ""


class User(Struct):
    name: Annotated[str, tag("name,required,min=3,max=50,transform=strip")] = ""
    email: Annotated[str, tag("email,required,email")] = ""
    age: Annotated[int, tag("age,omitempty,min=18,max=120")] = 0
    joined: Annotated[Optional[datetime], tag("joined,omitempty,min=2020-01-01T00:00:00+00:00")] = None
    addresses: Annotated[List[Address], tag("addresses,omitempty,max=3")] = list
    password: Annotated[str, tag("-")] = ""


@dataclass
class Settings:
    theme: str = field(default="dark", metadata={"vault": "theme,omitemptyupdate"})
    flags: Dict[str, bool] = field(default_factory=dict, metadata={"vault": "flags"})


class PrintStore:
    """Stand-in DocumentStore that prints every write."""

    def add(self, collection, document, doc_id=""):
        doc_id = doc_id or uuid.uuid4().hex[:8]
        print(f"  add {collection}/{doc_id}: {document}")
        return doc_id

    def set(self, collection, doc_id, document, merge_fields=()):
        print(f"  set {collection}/{doc_id} merge={list(merge_fields)}: {document}")

    def get(self, collection, doc_id):
        return {}

    def delete(self, collection, doc_id):
        print(f"  delete {collection}/{doc_id}")


def build_vault():
    vault = Vault()
    vault.register_transformation("strip", lambda ctx, path, value: value.strip())
    vault.register_transformation("title", lambda ctx, path, value: value.title())
    return vault


def demo_validation(vault):
    print("=== Validation ===")

    user = User(
        name="  Ada Lovelace ",
        email="ada@example.com",
        joined=datetime(2021, 5, 1, tzinfo=timezone.utc),
        addresses=[Address("12 St James's Sq", "london")],
        password="secret",
    )
    document = vault.validate(user, Method.CREATE)
    print(f"document: {document}")
    print(f"record after transformations: {user.name!r}, {user.addresses[0].city!r}")

    try:
        vault.validate(User(name="Al", email="al@example.com"), Method.CREATE)
    except FieldError as e:
        print(f"✓ Caught expected error [{e.code}] on {e.path}: {e}")

    try:
        vault.validate(User(name="Alan", email="not-an-email"), Method.CREATE)
    except FieldError as e:
        print(f"✓ Caught expected error [{e.code}] on {e.path}: {e}")
    print()


def demo_methods(vault):
    print("=== Methods and options ===")
    # required is skipped outside of create
    print(vault.validate(User(email="partial@example.com"), Method.UPDATE))
    print(vault.validate(Settings(theme=""), Method.UPDATE))
    print(vault.validate(Settings(theme=""), Method.UPDATE, Options().allow_empty_fields("theme")))
    print()


def demo_collection(vault):
    print("=== Collection ===")
    users = vault.collection("users", PrintStore())
    doc_id = users.create(User(name="Grace", email="grace@example.com"), Options().id("grace"))
    users.update_by_id(doc_id, User(name="Grace Hopper"), Options().merge_fields("name"))
    users.delete_by_id(doc_id)
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    vault = build_vault()
    demo_validation(vault)
    demo_methods(vault)
    demo_collection(vault)
    print("All examples completed!")
