"""
Shared base for the MongoDB document models.

Documents keep their primary key under ``_id``; the models expose it as
``id``. ``to_mongo`` and ``from_mongo`` convert between the two shapes, and
``with_id`` returns a copy carrying the id MongoDB assigned on insert.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

DocT = TypeVar("DocT", bound="MongoBaseModel")


class PyObjectId(ObjectId):
    """ObjectId field type: accepts ObjectId or its 24-char hex form, dumps to str in JSON."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _validate(cls, v: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError(f"Invalid ObjectId: {v!r}")


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Document dict for insert_one; ``_id`` is left out until one is assigned."""
        data = self.model_dump(by_alias=True)
        if data.get("_id") is None:
            data.pop("_id", None)
        return data

    @classmethod
    def from_mongo(cls: type[DocT], data: Optional[dict]) -> Optional[DocT]:
        """Model for a raw document, or None for a find_one miss."""
        if data is None:
            return None
        return cls.model_validate(data)

    def with_id(self: DocT, new_id: ObjectId) -> DocT:
        return self.model_copy(update={"id": new_id})
