"""Typed outcomes of handling a mock request.

Every expected failure is returned as one of these values rather than raised,
so the transport can translate them into status codes of its own.
"""

from typing import Any

from pydantic import BaseModel

from api_mocker.parser.base import Operation


class RouteMatch(BaseModel):
    """An operation selected by the router."""

    template: str
    method: str
    operation: Operation
    path_params: dict[str, str] = {}


class MockResponse(BaseModel):
    """A synthetic response for a matched operation."""

    status: int
    body: Any = None
    content_type: str | None = None
    template: str = ""
    path_params: dict[str, str] = {}


class RouteNotFound(BaseModel):
    path: str

    @property
    def message(self) -> str:
        return f"No matching path found for: {self.path}"


class MethodNotAllowed(BaseModel):
    path: str
    method: str
    allowed_methods: list[str]

    @property
    def message(self) -> str:
        return f"Method {self.method} not allowed for path: {self.path}"


class SpecNotFound(BaseModel):
    name: str

    @property
    def message(self) -> str:
        return f"Specification '{self.name}' not found."


class NoDefaultSpecConfigured(BaseModel):
    @property
    def message(self) -> str:
        return "No default specification available. Please specify a spec parameter."


class NoResponseDefined(BaseModel):
    path: str = ""
    method: str = ""

    @property
    def message(self) -> str:
        return "No response schema defined for this operation."


RouteResult = RouteMatch | RouteNotFound | MethodNotAllowed
HandleResult = (
    MockResponse
    | RouteNotFound
    | MethodNotAllowed
    | SpecNotFound
    | NoDefaultSpecConfigured
    | NoResponseDefined
)
