"""Entry points used by application code: ``Vault`` and ``Collection``.

The backing store is reached only through ``DocumentStore``; transport,
retries and query execution are the store's business.
"""

import logging
from typing import Any, Dict, Optional, Protocol, Tuple

from .options import Method, Options, resolve
from .registry import Registry, TransformationFn, ValidationFn
from .validator import Document, Validator

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def add(self, collection: str, document: Document, doc_id: str = "") -> str:
        """Create a document, returning its id (generated when ``doc_id`` is empty)."""
        ...

    def set(
        self, collection: str, doc_id: str, document: Document, merge_fields: Tuple[str, ...] = ()
    ) -> None:
        """Merge ``document`` into an existing one; only ``merge_fields`` if given."""
        ...

    def get(self, collection: str, doc_id: str) -> Dict[str, Any]:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...


class Vault:
    """Owns the rule registry and validates records for any collection."""

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self.validator = Validator(registry)

    @property
    def registry(self) -> Registry:
        return self.validator.registry

    def register_validation(self, name: str, fn: ValidationFn) -> None:
        self.registry.register_validation(name, fn)

    def register_transformation(self, name: str, fn: TransformationFn) -> None:
        self.registry.register_transformation(name, fn)

    def validate(
        self,
        record: Any,
        method: Method = Method.VALIDATE,
        options: Optional[Options] = None,
        ctx: Any = None,
    ) -> Document:
        return self.validator.validate(record, resolve(method, options), ctx)

    async def validate_async(
        self,
        record: Any,
        method: Method = Method.VALIDATE,
        options: Optional[Options] = None,
        ctx: Any = None,
    ) -> Document:
        return await self.validator.validate_async(record, resolve(method, options), ctx)

    def collection(self, name: str, store: DocumentStore) -> "Collection":
        return Collection(self, name, store)


class Collection:
    """A named set of documents in ``store``, validated through ``vault``."""

    def __init__(self, vault: Vault, name: str, store: DocumentStore) -> None:
        if not name:
            raise ValueError("collection name cannot be empty")
        self.vault = vault
        self.name = name
        self.store = store

    def validate(self, record: Any, options: Optional[Options] = None, ctx: Any = None) -> None:
        """Run the rules (and transformations) without writing anything."""
        self.vault.validate(record, Method.VALIDATE, options, ctx)

    def create(self, record: Any, options: Optional[Options] = None, ctx: Any = None) -> str:
        options = options or Options()
        document = self.vault.validate(record, Method.CREATE, options, ctx)
        doc_id = self.store.add(self.name, document, options.id_)
        logger.debug("Created %s/%s", self.name, doc_id)
        return doc_id

    def update_by_id(
        self, doc_id: str, record: Any, options: Optional[Options] = None, ctx: Any = None
    ) -> None:
        options = options or Options()
        document = self.vault.validate(record, Method.UPDATE, options, ctx)
        self.store.set(self.name, doc_id, document, options.merge_fields_)
        logger.debug("Updated %s/%s", self.name, doc_id)

    def find_by_id(self, doc_id: str) -> Dict[str, Any]:
        """Raw stored document; decoding it into a record is left to the caller."""
        return self.store.get(self.name, doc_id)

    def delete_by_id(self, doc_id: str) -> None:
        self.store.delete(self.name, doc_id)
        logger.debug("Deleted %s/%s", self.name, doc_id)

    async def validate_async(
        self, record: Any, options: Optional[Options] = None, ctx: Any = None
    ) -> None:
        await self.vault.validate_async(record, Method.VALIDATE, options, ctx)

    async def create_async(
        self, record: Any, options: Optional[Options] = None, ctx: Any = None
    ) -> str:
        """``create`` for async rules; the store call itself stays synchronous."""
        options = options or Options()
        document = await self.vault.validate_async(record, Method.CREATE, options, ctx)
        doc_id = self.store.add(self.name, document, options.id_)
        logger.debug("Created %s/%s", self.name, doc_id)
        return doc_id

    async def update_by_id_async(
        self, doc_id: str, record: Any, options: Optional[Options] = None, ctx: Any = None
    ) -> None:
        options = options or Options()
        document = await self.vault.validate_async(record, Method.UPDATE, options, ctx)
        self.store.set(self.name, doc_id, document, options.merge_fields_)
        logger.debug("Updated %s/%s", self.name, doc_id)
