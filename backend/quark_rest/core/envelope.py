"""Wire Envelope — JSON shapes carried in POST/PUT/DELETE/PATCH bodies.

Invariants:
    - One envelope per task body: {resource_type, zdnsuser, attrs}
    - One attrs entry per command, in command order
    - DELETE entries: {id}; PATCH entries: {id, new_attrs}; POST/PUT entries: the resource itself

Design Decisions:
    - attrs kept as list[Any]: entries are re-hydrated per verb by the codec,
      not by the envelope model
    - user is serialized under the "zdnsuser" alias (historical wire name)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource_type: str = ""
    user: str = Field("", alias="zdnsuser")
    attrs: list[Any] = Field(default_factory=list)


class DeleteEntry(BaseModel):
    id: str = ""


class PatchEntry(BaseModel):
    id: str = ""
    new_attrs: dict[str, Any] = Field(default_factory=dict)
