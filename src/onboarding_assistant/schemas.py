from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Serialises with camelCase keys, accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UiElement(_CamelModel):
    id: str = ""
    description: str = ""


class RouteContext(_CamelModel):
    """Grounding information describing one UI route."""

    route: str = ""
    description: str = ""
    elements: list[UiElement] = Field(default_factory=list)
    api_calls: list[str] = Field(default_factory=list)
    user_actions: list[str] = Field(default_factory=list)
    dependencies: list[str] | None = None


class QueryRequest(_CamelModel):
    # Left optional so the route handler can answer 400 rather than 422.
    query: str | None = ""
    route: str | None = ""
    thread_id: str | None = None


class AssistantAction(_CamelModel):
    """Structured directive parsed out of an assistant reply."""

    type: str
    element_id: str | None = None
    description: str | None = None
    route: str | None = None


class QueryResponse(_CamelModel):
    message: str
    thread_id: str = ""
    actions: list[AssistantAction] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = "healthy"
