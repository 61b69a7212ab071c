"""Unified data models for parsed API description documents.

The parser converts OpenAPI / Swagger input into these models; routing,
response selection, data generation and merging all work on them.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

HTTP_METHODS = ("GET", "PUT", "POST", "DELETE", "OPTIONS", "HEAD", "PATCH", "TRACE")


class SchemaKind(str, Enum):
    """Generation strategy of a schema node."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    DATE = "date"
    DATE_TIME = "date-time"
    ENUM = "enum"
    COMPOSED = "composed"
    UNKNOWN = "unknown"


class Schema(BaseModel):
    """A recursive type/constraint declaration."""

    kind: SchemaKind = SchemaKind.UNKNOWN
    format: str | None = None
    description: str = ""
    # numeric constraints
    minimum: float | None = None
    maximum: float | None = None
    multiple_of: float | None = None
    # string constraints
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    # object
    properties: dict[str, "Schema"] = {}
    required: list[str] = []
    additional_properties: "bool | Schema | None" = None
    # array
    items: "Schema | None" = None
    min_items: int | None = None
    max_items: int | None = None
    # composition
    all_of: list["Schema"] = []
    one_of: list["Schema"] = []
    any_of: list["Schema"] = []
    enum: list[Any] = []
    example: Any = None
    ref: str | None = None  # component name this node was resolved from

    @property
    def has_example(self) -> bool:
        return "example" in self.model_fields_set


class Parameter(BaseModel):
    """A single operation or path parameter."""

    name: str
    location: str  # query / path / header / cookie
    required: bool = False
    description: str = ""
    schema_: Schema | None = Field(default=None, alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class MediaType(BaseModel):
    """Content declared for one content type."""

    schema_: Schema | None = Field(default=None, alias="schema")
    example: Any = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def has_example(self) -> bool:
        return "example" in self.model_fields_set


class Response(BaseModel):
    description: str = ""
    content: dict[str, MediaType] = {}


class RequestBody(BaseModel):
    description: str = ""
    required: bool = False
    content: dict[str, MediaType] = {}


class Operation(BaseModel):
    """One HTTP-method handler declared under a path template."""

    operation_id: str | None = None
    summary: str = ""
    description: str = ""
    tags: list[str] = []
    parameters: list[Parameter] = []
    request_body: RequestBody | None = None
    responses: dict[str, Response] = {}  # declaration order is significant


class PathEntry(BaseModel):
    """All operations declared under one path template."""

    operations: dict[str, Operation] = {}  # {"GET": Operation, ...}
    parameters: list[Parameter] = []
    summary: str = ""
    description: str | None = None

    @property
    def methods(self) -> list[str]:
        return [m for m in HTTP_METHODS if m in self.operations]


class Info(BaseModel):
    title: str = ""
    version: str = ""
    description: str = ""


class Server(BaseModel):
    url: str
    description: str = ""


class Tag(BaseModel):
    name: str
    description: str = ""


class Components(BaseModel):
    """Named reusable pieces of a document."""

    schemas: dict[str, Schema] = {}
    responses: dict[str, Response] = {}
    parameters: dict[str, Parameter] = {}
    request_bodies: dict[str, RequestBody] = {}
    security_schemes: dict[str, Any] = {}
    examples: dict[str, Any] = {}
    callbacks: dict[str, Any] = {}
    links: dict[str, Any] = {}
    headers: dict[str, Any] = {}

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in COMPONENT_CATEGORIES)


COMPONENT_CATEGORIES = (
    "schemas",
    "responses",
    "parameters",
    "request_bodies",
    "security_schemes",
    "examples",
    "callbacks",
    "links",
    "headers",
)


class ContractDocument(BaseModel):
    """One parsed API description."""

    openapi: str = "3.0.3"
    info: Info | None = None
    paths: dict[str, PathEntry] = {}  # declaration order is significant
    components: Components = Field(default_factory=Components)
    servers: list[Server] = []
    security: list[dict[str, list[str]]] = []
    tags: list[Tag] = []
