"""Resource — base type for user-defined records carried by commands.

Invariants:
    - Every Resource subclass has a non-empty resource_type tag
    - id is the identity used by existence checks
    - validate_fields() never raises; it returns the first invalid field or None

Design Decisions:
    - Pydantic BaseModel: the serializer decodes attrs entries with model_validate,
      so type errors surface at decode time and business rules in validate_fields()
    - resource_type defaults to the lower-cased class name; subclasses may pin it
"""

from typing import ClassVar

from pydantic import BaseModel

from quark_rest.core.errors import ResourceValidationError


class Resource(BaseModel):
    """A named record type. Subclass and add fields."""

    resource_type: ClassVar[str] = ""

    id: str = ""

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if not cls.__dict__.get("resource_type"):
            cls.resource_type = cls.__name__.lower()

    def validate_fields(self) -> ResourceValidationError | None:
        """Business validation. Default: always valid."""
        return None

    def __str__(self) -> str:
        return f"{self.resource_type}({self.model_dump_json()})"


def get_resource_type(resource: Resource) -> str:
    return type(resource).resource_type


def resource_id(resource: Resource) -> str:
    return resource.id
