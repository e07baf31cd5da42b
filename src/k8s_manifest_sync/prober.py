"""Live resource identity probing."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from .errors import ParseError

logger = logging.getLogger(__name__)

# Query callback signature: (manifest_dir) -> raw response text
QueryFn = Callable[[Path], str]

IDENTITY_SEPARATOR = "|"


class ResourceMetadata(BaseModel):
    """The part of a resource's metadata that identifies it live."""

    selflink: str = Field(
        default="",
        validation_alias=AliasChoices("selflink", "selfLink"),
    )

    @field_validator("selflink", mode="before")
    @classmethod
    def _null_selflink(cls, value: Any) -> Any:
        return "" if value is None else value


class ResourceItem(BaseModel):
    """A single live resource as returned by the query."""

    metadata: ResourceMetadata = Field(default_factory=ResourceMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return {} if value is None else value


class QueryResponse(BaseModel):
    """A list of live resources matching a manifest directory.

    JSON nulls read as empty values: a null list has no items, a null item
    has no metadata and a null self link is "".
    """

    items: list[ResourceItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [{} if item is None else item for item in value]
        return value


def parse_response(output: str) -> QueryResponse:
    """
    Parse a JSON query response.

    A bare object (what the query returns when a directory holds a single
    manifest) is read as a one-item list.

    Raises:
        ParseError: If the output is not JSON or does not have the list shape
    """
    try:
        data: Any = json.loads(output)
    except json.JSONDecodeError as e:
        raise ParseError(f"Query response is not valid JSON: {e}", output) from e

    if not isinstance(data, dict):
        raise ParseError("Query response is not a JSON object", output)

    if "items" not in data and "metadata" in data:
        data = {"items": [data]}

    try:
        return QueryResponse.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Unexpected query response shape: {e}", output) from e


def identity_string(response: QueryResponse) -> str:
    """Join every item's self link, each followed by the separator."""
    return "".join(
        item.metadata.selflink + IDENTITY_SEPARATOR for item in response.items
    )


def probe_identity(manifest_dir: Path, query: QueryFn) -> str:
    """
    Build the raw identity string for the live resources of a directory.

    Args:
        manifest_dir: Manifest directory passed through to the query
        query: Callable returning the live system's response text

    Returns:
        Self links joined by the separator, or "" when nothing is live
    """
    output = query(manifest_dir)
    if not output.strip():
        logger.debug("No live resources for %s", manifest_dir)
        return ""

    identity = identity_string(parse_response(output))
    logger.debug("Live identity for %s: %r", manifest_dir, identity)
    return identity
