"""Pydantic response models (DTOs) for FastAPI endpoints."""

from pydantic import BaseModel, Field


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
    source: str
    source_available: bool


class VisitedPageDTO(BaseModel):
    link: str
    text: str


class SearchResponseDTO(BaseModel):
    query: str
    output: str
    text: str
    links: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    pages: list[VisitedPageDTO] = Field(default_factory=list)

    @classmethod
    def from_command_result(cls, query: str, command_result):
        """Convert SearchCommandResult to DTO."""
        result = command_result.result
        return cls(
            query=query,
            output=command_result.output,
            text=result.text,
            links=list(result.links),
            images=list(result.images),
            pages=[VisitedPageDTO(link=p.link, text=p.text) for p in command_result.pages],
        )


class VisitResponseDTO(BaseModel):
    pages: list[VisitedPageDTO] = Field(default_factory=list)


class InterceptResponseDTO(BaseModel):
    state: str
    query: str = ""
    prompt: str = ""
    cache_hit: bool = False
    links: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    attachment: str | None = None
    image_attachments: list[str] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_cycle_result(cls, outcome):
        """Convert SearchCycleResult to DTO."""
        return cls(
            state=outcome.state.value,
            query=outcome.query,
            prompt=outcome.prompt,
            cache_hit=outcome.cache_hit,
            links=list(outcome.links),
            images=list(outcome.images),
            attachment=outcome.attachment,
            image_attachments=list(outcome.image_attachments),
            error=outcome.error,
        )


class DiagnosticSearchResponseDTO(BaseModel):
    text: str
    links: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
