"""
Shared base for request/response DTOs.

The HTTP API speaks camelCase (``firstName``, ``refreshToken``) while Python
code uses snake_case; the alias generator bridges the two. populate_by_name
lets tests and services build DTOs with snake_case keyword arguments.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
