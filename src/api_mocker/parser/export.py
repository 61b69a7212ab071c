"""Serialize ContractDocument models back into OpenAPI 3 mappings.

References resolved by the parser are written inline, so the output is a
self-contained document.
"""

from typing import Any

from .base import (
    ContractDocument,
    MediaType,
    Operation,
    Parameter,
    PathEntry,
    RequestBody,
    Response,
    Schema,
    SchemaKind,
)

_KIND_TYPES = {
    SchemaKind.STRING: "string",
    SchemaKind.NUMBER: "number",
    SchemaKind.INTEGER: "integer",
    SchemaKind.BOOLEAN: "boolean",
    SchemaKind.OBJECT: "object",
    SchemaKind.ARRAY: "array",
    SchemaKind.DATE: "string",
    SchemaKind.DATE_TIME: "string",
}

_SCHEMA_KEYWORDS = {
    "format": "format",
    "description": "description",
    "minimum": "minimum",
    "maximum": "maximum",
    "multiple_of": "multipleOf",
    "min_length": "minLength",
    "max_length": "maxLength",
    "pattern": "pattern",
    "min_items": "minItems",
    "max_items": "maxItems",
}


def document_to_dict(document: ContractDocument) -> dict[str, Any]:
    """Return ``document`` as a plain OpenAPI 3 mapping."""
    out: dict[str, Any] = {"openapi": document.openapi if document.openapi.startswith("3") else "3.0.3"}
    if document.info is not None:
        out["info"] = _drop_empty(document.info.model_dump())
    else:
        out["info"] = {"title": "", "version": ""}
    if document.servers:
        out["servers"] = [_drop_empty(s.model_dump()) for s in document.servers]
    if document.security:
        out["security"] = [dict(req) for req in document.security]
    if document.tags:
        out["tags"] = [_drop_empty(t.model_dump()) for t in document.tags]
    out["paths"] = {template: _path_entry(entry) for template, entry in document.paths.items()}

    comps = document.components
    components: dict[str, Any] = {}
    if comps.schemas:
        components["schemas"] = {name: schema_to_dict(s) for name, s in comps.schemas.items()}
    if comps.responses:
        components["responses"] = {name: _response(r) for name, r in comps.responses.items()}
    if comps.parameters:
        components["parameters"] = {name: _parameter(p) for name, p in comps.parameters.items()}
    if comps.request_bodies:
        components["requestBodies"] = {
            name: _request_body(b) for name, b in comps.request_bodies.items()
        }
    for attr, key in (
        ("security_schemes", "securitySchemes"),
        ("examples", "examples"),
        ("callbacks", "callbacks"),
        ("links", "links"),
        ("headers", "headers"),
    ):
        if getattr(comps, attr):
            components[key] = dict(getattr(comps, attr))
    if components:
        out["components"] = components
    return out


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if schema.kind in _KIND_TYPES:
        out["type"] = _KIND_TYPES[schema.kind]
    if schema.kind is SchemaKind.DATE:
        out["format"] = "date"
    elif schema.kind is SchemaKind.DATE_TIME:
        out["format"] = "date-time"

    for attr, key in _SCHEMA_KEYWORDS.items():
        value = getattr(schema, attr)
        if value not in (None, "") and key not in out:
            out[key] = value
    if schema.properties:
        out["properties"] = {name: schema_to_dict(p) for name, p in schema.properties.items()}
    if schema.required:
        out["required"] = list(schema.required)
    if isinstance(schema.additional_properties, Schema):
        out["additionalProperties"] = schema_to_dict(schema.additional_properties)
    elif schema.additional_properties is not None:
        out["additionalProperties"] = schema.additional_properties
    if schema.items is not None:
        out["items"] = schema_to_dict(schema.items)
    for attr, key in (("all_of", "allOf"), ("one_of", "oneOf"), ("any_of", "anyOf")):
        members = getattr(schema, attr)
        if members:
            out[key] = [schema_to_dict(m) for m in members]
    if schema.enum:
        out["enum"] = list(schema.enum)
    if schema.has_example:
        out["example"] = schema.example
    return out


def _path_entry(entry: PathEntry) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if entry.summary:
        out["summary"] = entry.summary
    if entry.description:
        out["description"] = entry.description
    if entry.parameters:
        out["parameters"] = [_parameter(p) for p in entry.parameters]
    for method, operation in entry.operations.items():
        out[method.lower()] = _operation(operation)
    return out


def _operation(operation: Operation) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if operation.operation_id:
        out["operationId"] = operation.operation_id
    if operation.summary:
        out["summary"] = operation.summary
    if operation.description:
        out["description"] = operation.description
    if operation.tags:
        out["tags"] = list(operation.tags)
    if operation.parameters:
        out["parameters"] = [_parameter(p) for p in operation.parameters]
    if operation.request_body is not None:
        out["requestBody"] = _request_body(operation.request_body)
    out["responses"] = {status: _response(r) for status, r in operation.responses.items()}
    return out


def _parameter(param: Parameter) -> dict[str, Any]:
    out: dict[str, Any] = {"name": param.name, "in": param.location}
    if param.required:
        out["required"] = True
    if param.description:
        out["description"] = param.description
    if param.schema_ is not None:
        out["schema"] = schema_to_dict(param.schema_)
    return out


def _content(content: dict[str, MediaType]) -> dict[str, Any]:
    out = {}
    for content_type, media in content.items():
        item: dict[str, Any] = {}
        if media.schema_ is not None:
            item["schema"] = schema_to_dict(media.schema_)
        if media.has_example:
            item["example"] = media.example
        out[content_type] = item
    return out


def _response(response: Response) -> dict[str, Any]:
    out: dict[str, Any] = {"description": response.description}
    if response.content:
        out["content"] = _content(response.content)
    return out


def _request_body(body: RequestBody) -> dict[str, Any]:
    out: dict[str, Any] = {"content": _content(body.content)}
    if body.description:
        out["description"] = body.description
    if body.required:
        out["required"] = True
    return out


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v not in (None, "")}
