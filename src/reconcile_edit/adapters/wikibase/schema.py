"""Response schemas for the Wikibase action API modules used by the property source."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WikibaseBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApiError(WikibaseBaseModel):
    code: str
    info: str | None = None


class EntityInfo(WikibaseBaseModel):
    """One entry of ``wbgetentities`` with ``props=datatype``."""

    id: str
    type: str | None = None
    datatype: str | None = None
    missing: str | None = None

    @property
    def is_missing(self) -> bool:
        return self.missing is not None


class ApiResponse(WikibaseBaseModel):
    error: ApiError | None = None


class GetEntitiesResponse(ApiResponse):
    entities: dict[str, EntityInfo] = Field(default_factory=dict[str, EntityInfo])


class SearchMatch(WikibaseBaseModel):
    type: str
    language: str | None = None
    text: str


class SearchResult(WikibaseBaseModel):
    id: str
    label: str | None = None
    match: SearchMatch | None = None

    def has_label(self, label: str) -> bool:
        if self.match is not None and self.match.type == "label":
            return self.match.text == label
        return self.label == label


class SearchEntitiesResponse(ApiResponse):
    search: list[SearchResult] = Field(default_factory=list[SearchResult])
    search_continue: int | None = Field(default=None, alias="search-continue")
