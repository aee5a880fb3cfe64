"""The field walker: applies tag rules to a record and builds its document.

Records are walked in field declaration order, rules run in tag order and the
first failure aborts the whole call, so a caller either gets a complete
document or exactly one exception.

Transformations write their result back onto the record, so the record
passed in is mutated in place.
"""

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Any, Coroutine, Dict, List, Optional

from .errors import (
    FAILED_TRANSFORMATION,
    FAILED_VALIDATION,
    UNKNOWN_TRANSFORMATION,
    UNKNOWN_VALIDATION,
    UNSUPPORTED_FIELD_TYPE,
    FieldError,
    VaultError,
)
from .options import ValidationOpts
from .reflect import FieldDescriptor, is_record, iter_fields, set_field
from .registry import Registry
from .rules import has_value, is_supported, is_time_like, kind_of
from .tags import (
    is_ignored,
    omission_applies,
    output_name,
    parse_tag,
    split_rule,
    strip_omission_directives,
    transformation_name,
)

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

REQUIRED_RULES = ("required", "required_create", "required_update", "required_validate")


async def _resolve(result: Any) -> Any:
    # rules may be plain functions or coroutine functions
    if inspect.isawaitable(result):
        return await result
    return result


def _run_inline(coro: Coroutine[Any, Any, Document]) -> Document:
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value
    coro.close()
    raise RuntimeError(
        "a validation rule suspended inside a running event loop; "
        "await validate_async instead"
    )


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


class Validator:
    """Walks records and dispatches their tag rules through a ``Registry``."""

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self.registry = registry or Registry()

    def validate(self, record: Any, opts: ValidationOpts, ctx: Any = None) -> Document:
        """Validate ``record`` and return its output document.

        Outside an event loop this runs its own. Inside a running loop the
        walk is driven in place, which works as long as no rule suspends;
        a rule that does raises ``RuntimeError``, use ``validate_async``.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.validate_async(record, opts, ctx))
        return _run_inline(self.validate_async(record, opts, ctx))

    async def validate_async(self, record: Any, opts: ValidationOpts, ctx: Any = None) -> Document:
        """Validate ``record`` and return its output document.

        ``ctx`` is handed unchanged to every rule. Cancelling the task aborts
        the call at the next awaiting rule.
        """
        if not is_record(record):
            raise TypeError(
                f"data must be a Struct or dataclass instance, got {type(record).__name__}"
            )
        return await self._validate_fields(ctx, record, "", opts)

    async def _validate_fields(
        self, ctx: Any, record: Any, path: str, opts: ValidationOpts
    ) -> Document:
        document: Document = {}

        for descriptor in iter_fields(record):
            if is_ignored(descriptor.tag):
                continue

            rules = parse_tag(descriptor.tag)
            name = output_name(rules, descriptor.name)
            field_path = _join(path, name)
            value = descriptor.value

            if not is_supported(value):
                raise FieldError(
                    UNSUPPORTED_FIELD_TYPE,
                    tag="",
                    field=name,
                    struct_field=descriptor.name,
                    path=field_path,
                    value=value,
                    kind=kind_of(value),
                    type=type(value),
                )

            if self._should_omit(value, field_path, rules, opts):
                logger.debug("Omitting empty field %s", field_path)
                continue

            if not opts.skip_validation:
                value = await self._apply_rules(
                    ctx, record, descriptor, value, field_path, name,
                    strip_omission_directives(rules), opts,
                )

            document[name] = await self._process_value(ctx, value, field_path, opts)

        return document

    def _should_omit(
        self, value: Any, field_path: str, rules: List[str], opts: ValidationOpts
    ) -> bool:
        if not omission_applies(rules, opts.method.value):
            return False
        if field_path in opts.empty_fields_allowed:
            return False
        return not has_value(value)

    def _is_required_rule(self, token: str, opts: ValidationOpts) -> bool:
        if token == "required":
            return not opts.skip_required
        return token == f"required_{opts.method.value}"

    async def _apply_rules(
        self,
        ctx: Any,
        record: Any,
        descriptor: FieldDescriptor,
        value: Any,
        field_path: str,
        name: str,
        rules: List[str],
        opts: ValidationOpts,
    ) -> Any:
        for token in rules:
            if token in REQUIRED_RULES:
                if not self._is_required_rule(token, opts):
                    continue
            elif not has_value(value):
                # non-required rules never fire on empty values
                continue

            rule, param = split_rule(token)

            def error(code: str) -> FieldError:
                return FieldError(
                    code,
                    tag=rule,
                    field=name,
                    struct_field=descriptor.name,
                    path=field_path,
                    value=value,
                    param=param,
                    kind=kind_of(value),
                    type=type(value),
                )

            transformation = transformation_name(token)
            if transformation is not None:
                fn = self.registry.get_transformation(transformation)
                if fn is None:
                    raise error(UNKNOWN_TRANSFORMATION)
                try:
                    new_value = await _resolve(fn(ctx, field_path, value))
                except VaultError:
                    raise
                except Exception as e:
                    raise error(FAILED_TRANSFORMATION) from e

                if new_value is not None:
                    logger.debug("Transformed %s with %r", field_path, transformation)
                    set_field(record, descriptor.name, new_value)
                    value = new_value
                continue

            fn = self.registry.get_validation(rule)
            if fn is None:
                raise error(UNKNOWN_VALIDATION)
            if not await _resolve(fn(ctx, field_path, value, param)):
                raise error(FAILED_VALIDATION)

        return value

    async def _process_value(
        self, ctx: Any, value: Any, field_path: str, opts: ValidationOpts
    ) -> Any:
        """Output form of a value: records become nested documents."""
        if is_time_like(value):
            return value
        if is_record(value):
            return await self._validate_fields(ctx, value, field_path, opts)
        if isinstance(value, Mapping):
            return {
                str(key): await self._process_value(ctx, item, f"{field_path}.{key}", opts)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [
                await self._process_value(ctx, item, f"{field_path}[{index}]", opts)
                for index, item in enumerate(value)
            ]
        return value
