"""Response models for the record service API.

The API speaks camelCase JSON; the models accept those names as aliases
and also the snake_case field names.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StoreInfo(_ApiModel):
    id: str
    name: Optional[str] = None


class KeyListItem(_ApiModel):
    key: str
    size: int = 0


class KeyListPage(_ApiModel):
    items: List[KeyListItem] = Field(default_factory=list)
    is_truncated: bool = Field(default=False, alias="isTruncated")
    exclusive_start_key: Optional[str] = Field(default=None, alias="exclusiveStartKey")
    next_exclusive_start_key: Optional[str] = Field(default=None, alias="nextExclusiveStartKey")
    count: Optional[int] = None
    limit: Optional[int] = None


@dataclass
class Record:
    body: Union[bytes, str]
    content_type: Optional[str]
