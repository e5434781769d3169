"""Pydantic request models for FastAPI endpoints."""

from pydantic import BaseModel, Field, model_validator


class ChatMessageItem(BaseModel):
    text: str
    is_user: bool = False
    is_system: bool = False
    index: int | None = None


class InterceptRequest(BaseModel):
    """A chat transcript, oldest message first."""

    messages: list[ChatMessageItem] = Field(default_factory=list, max_length=500)

    @model_validator(mode="after")
    def assign_indexes(self):
        for position, message in enumerate(self.messages):
            if message.index is None:
                message.index = position
        return self


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=1000)
    snippets: bool = True
    links: bool = False

    @model_validator(mode="after")
    def validate_result_type(self):
        if not self.snippets and not self.links:
            raise ValueError("at least one of snippets or links must be enabled")
        return self


class VisitRequest(BaseModel):
    links: list[str] = Field(..., min_length=1, max_length=20)


class DiagnosticSearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=1000)
