"""Content domain models: pure Pydantic v2 data types.

A ContentRecord is a single draft or post. An IndexEntry is the
lightweight projection of a record kept in the remote per-collection
index file. Field names serialize in camelCase so data written by the
browser editor round-trips unchanged.
"""

from __future__ import annotations

import json
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from blogsync.shared.errors import ParseError


class CollectionKind(StrEnum):
    """The two collections a record can live in."""

    DRAFTS = "drafts"
    POSTS = "posts"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        """Serialize with stable two-space indentation."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


class IndexEntry(_CamelModel):
    """Listing projection of a ContentRecord without the content body."""

    id: str
    title: str = ""
    excerpt: str = ""
    cover: str = ""
    created_at: int | None = Field(default=None, alias="createdAt")
    updated_at: int | None = Field(default=None, alias="updatedAt")

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ContentRecord(_CamelModel):
    """A draft or post as gathered from the editor."""

    id: str
    title: str = ""
    content: str = ""
    cover: str = ""
    excerpt: str = ""
    created_at: int = Field(default=0, alias="createdAt")
    updated_at: int = Field(default=0, alias="updatedAt")

    def to_index_entry(self) -> IndexEntry:
        return IndexEntry(
            id=self.id,
            title=self.title,
            excerpt=self.excerpt,
            cover=self.cover,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_data(cls, data: object) -> ContentRecord:
        """Validate already-decoded JSON into a record.

        Raises:
            ParseError: ``data`` is not a valid record object.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ParseError(f"Invalid record: {exc.error_count()} validation error(s)") from exc

    @classmethod
    def from_json(cls, text: str) -> ContentRecord:
        """Parse a record file as written by ``to_json``.

        Raises:
            ParseError: ``text`` is not JSON or not a valid record.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Invalid record JSON: {exc.msg}") from exc
        return cls.from_data(data)
