"""Resource Serializer — registry of Resource types keyed by resource_type tag.

Invariants:
    - One class per tag; registering a second class under the same tag fails
    - decode_type() only ever returns an instance of the registered class
    - Every decode failure is a TaskDecodeError naming the tag

Design Decisions:
    - Explicit dict over class-scanning: every registered type is visible in one place
    - Accepts already-parsed JSON (dict) or raw bytes/str: envelope attrs arrive parsed,
      direct callers may hand over raw bytes
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from quark_rest.core.errors import ErrorContext, RegistrationError, TaskDecodeError
from quark_rest.core.resource import Resource

logger = logging.getLogger(__name__)


class ResourceSerializer:
    """Maps resource_type tags to Resource classes."""

    def __init__(self):
        self._types: dict[str, type[Resource]] = {}

    def register(self, resource_cls: type[Resource]) -> None:
        if not (isinstance(resource_cls, type) and issubclass(resource_cls, Resource)):
            raise RegistrationError(f"{resource_cls!r} is not a Resource type")
        tag = resource_cls.resource_type
        if not tag:
            raise RegistrationError(f"{resource_cls.__name__} has empty resource_type")
        existing = self._types.get(tag)
        if existing is not None and existing is not resource_cls:
            raise RegistrationError(
                f"resource type '{tag}' already registered by {existing.__name__}",
            )
        self._types[tag] = resource_cls
        logger.debug(f"Registered resource type '{tag}'")

    def lookup(self, tag: str) -> type[Resource]:
        try:
            return self._types[tag]
        except KeyError:
            raise TaskDecodeError(
                f"unknown resource type '{tag}'",
                ErrorContext(resource_type=tag),
            ) from None

    def decode_type(self, tag: str, raw: Any) -> Resource:
        resource_cls = self.lookup(tag)
        try:
            if isinstance(raw, (bytes, str)):
                return resource_cls.model_validate_json(raw)
            return resource_cls.model_validate(raw)
        except ValidationError as e:
            raise TaskDecodeError(
                f"invalid {tag} payload: {e.error_count()} error(s)",
                ErrorContext(resource_type=tag, debug_info={"errors": e.errors()}),
            ) from e

    @staticmethod
    def encode(resource: BaseModel) -> dict:
        return resource.model_dump(mode="json")

    @property
    def registered_types(self) -> list[str]:
        return list(self._types)
