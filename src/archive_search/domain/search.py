"""Domain models for ingestion records and search results.

Value objects are immutable (frozen=True) and carry no infrastructure
dependencies, so an external service layer can serialize them directly with
``model_dump()``.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ArchiveRecord(BaseModel):
    """One line of an archive listing: the archive name and its entry paths."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    files: list[str] = Field(validation_alias=AliasChoices("files", "paths"))


class SearchMatch(BaseModel):
    """A document that matched at least one query term."""

    model_config = ConfigDict(frozen=True)

    document: str
    score: float


class SearchResponse(BaseModel):
    """Ranked matches plus the total match count."""

    model_config = ConfigDict(frozen=True)

    matches: list[SearchMatch] = Field(default_factory=list)
    total: int = 0
