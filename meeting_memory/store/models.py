"""Meeting domain models - persisted records and the on-disk document."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActionItem(BaseModel):
    """Single action item extracted from a transcript."""

    model_config = ConfigDict(frozen=True)

    title: str
    owner: str
    due: str | None = None


class Chunk(BaseModel):
    """60-word window of the labelled transcript with its embedding."""

    model_config = ConfigDict(frozen=True)

    text: str
    embedding: list[float]


class Meeting(BaseModel):
    """One successfully ingested recording. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    transcript: str
    summary: str
    actions: list[ActionItem] = Field(default_factory=list)
    calendar_links: list[str] = Field(default_factory=list)
    image_url: str
    chunks: list[Chunk] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def check_calendar_links_aligned(self) -> "Meeting":
        if len(self.calendar_links) != len(self.actions):
            raise ValueError(
                f"calendar_links ({len(self.calendar_links)}) must align with "
                f"actions ({len(self.actions)})"
            )
        return self


class StoreDocument(BaseModel):
    """Whole persisted collection, rewritten on every append."""

    meetings: list[Meeting] = Field(default_factory=list)
