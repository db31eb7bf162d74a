"""Shared pydantic base for schemas exchanged with backends and the store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case attributes, camelCase on the wire (backend JSON and store rows)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
