# sitebuilder/api/v1/schemas.py
"""Request bodies of the builder API."""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class SiteCreate(RequestBody):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255)


class DomainCreate(RequestBody):
    domain: str = Field(min_length=1, max_length=255)


class PageCreate(RequestBody):
    name: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=200)
    builderTree: Optional[Dict[str, Any]] = None
    isHomepage: bool = False


class PageUpdate(RequestBody):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=1, max_length=200)
    metaTitle: Optional[str] = Field(default=None, max_length=200)
    metaDescription: Optional[str] = Field(default=None, max_length=500)

    def to_fields(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude_none=True)
        mapping = {"metaTitle": "meta_title", "metaDescription": "meta_description"}
        return {mapping.get(k, k): v for k, v in data.items()}


class TreeUpdate(RequestBody):
    builderTree: Dict[str, Any]


class PublishRequest(RequestBody):
    comment: Optional[str] = Field(default=None, max_length=500)
    scheduledPublishAt: Optional[datetime] = None


class RollbackRequest(RequestBody):
    revisionId: str = Field(min_length=1)
