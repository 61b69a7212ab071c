"""OpenAPI / Swagger document parser.

Parses OpenAPI 3.x and Swagger 2.0 documents into ContractDocument models.
Local ``$ref`` pointers are resolved while building; a reference that loops
back onto itself becomes an empty object schema.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from api_mocker.errors import SpecParseError

from .base import (
    HTTP_METHODS,
    Components,
    ContractDocument,
    Info,
    MediaType,
    Operation,
    Parameter,
    PathEntry,
    RequestBody,
    Response,
    Schema,
    SchemaKind,
    Server,
    Tag,
)

logger = logging.getLogger(__name__)

# OpenAPI keyword -> Schema field
_SCHEMA_SCALARS = {
    "format": "format",
    "description": "description",
    "minimum": "minimum",
    "maximum": "maximum",
    "multipleOf": "multiple_of",
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "minItems": "min_items",
    "maxItems": "max_items",
}

_SIMPLE_KINDS = {
    "number": SchemaKind.NUMBER,
    "integer": SchemaKind.INTEGER,
    "boolean": SchemaKind.BOOLEAN,
    "object": SchemaKind.OBJECT,
    "array": SchemaKind.ARRAY,
}


def parse_openapi(file_path: Path) -> ContractDocument:
    """Parse an OpenAPI/Swagger file into a ContractDocument."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecParseError(f"Cannot read {file_path}: {e}") from e
    return parse_openapi_text(text)


def parse_openapi_text(text: str) -> ContractDocument:
    """Parse YAML or JSON text into a ContractDocument."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpecParseError(f"Invalid YAML/JSON: {e}") from e
    return build_document(data)


def build_document(data: Any) -> ContractDocument:
    """Build a ContractDocument from an already decoded mapping."""
    if not isinstance(data, Mapping):
        raise SpecParseError("Document root must be a mapping.")
    if "openapi" not in data and "swagger" not in data:
        raise SpecParseError("Document declares neither 'openapi' nor 'swagger'.")

    builder = _DocumentBuilder(data)
    try:
        return builder.build()
    except (ValidationError, AttributeError, TypeError) as e:
        raise SpecParseError(f"Malformed document: {e}") from e


class _DocumentBuilder:
    """Walks one decoded document, resolving references against its root."""

    def __init__(self, root: Mapping):
        self.root = root
        self.is_swagger2 = "swagger" in root
        self._schema_cache: dict[str, Schema] = {}

    def build(self) -> ContractDocument:
        doc = self.root
        paths = doc.get("paths") or {}
        if not isinstance(paths, Mapping):
            raise SpecParseError("'paths' must be a mapping.")

        return ContractDocument(
            openapi=str(doc.get("openapi") or doc.get("swagger")),
            info=self._info(doc.get("info")),
            paths={str(template): self._path_entry(item) for template, item in paths.items()},
            components=self._components(),
            servers=self._servers(),
            security=[dict(req) for req in doc.get("security") or [] if isinstance(req, Mapping)],
            tags=[
                Tag(name=str(t["name"]), description=t.get("description") or "")
                for t in doc.get("tags") or []
                if isinstance(t, Mapping) and "name" in t
            ],
        )

    # -- references -------------------------------------------------------

    def _resolve(self, ref: str) -> Any:
        if not ref.startswith("#/"):
            logger.warning("Skipping non-local reference: %s", ref)
            return None
        node: Any = self.root
        for part in ref[2:].split("/"):
            part = part.replace("~1", "/").replace("~0", "~")
            if not isinstance(node, Mapping) or part not in node:
                logger.warning("Unresolvable reference: %s", ref)
                return None
            node = node[part]
        return node

    def _deref(self, node: Any) -> Any:
        """Follow ``$ref`` chains on non-schema objects."""
        seen: set[str] = set()
        while isinstance(node, Mapping) and "$ref" in node:
            ref = node["$ref"]
            if ref in seen:
                return None
            seen.add(ref)
            node = self._resolve(ref)
        return node

    # -- schemas ----------------------------------------------------------

    def schema(self, node: Any, stack: tuple[str, ...] = ()) -> Schema:
        if not isinstance(node, Mapping):
            return Schema()

        ref = node.get("$ref")
        if isinstance(ref, str):
            name = ref.rsplit("/", 1)[-1]
            if ref in stack:
                return Schema(kind=SchemaKind.OBJECT, ref=name)
            if ref in self._schema_cache:
                return self._schema_cache[ref]
            target = self._resolve(ref)
            built = self.schema(target, stack + (ref,))
            built = built.model_copy(update={"ref": name})
            # only a build started outside any cycle is complete for every caller
            if not stack:
                self._schema_cache[ref] = built
            return built

        fields: dict[str, Any] = {"kind": _schema_kind(node)}
        for key, attr in _SCHEMA_SCALARS.items():
            if node.get(key) is not None:
                fields[attr] = node[key]

        properties = node.get("properties")
        if isinstance(properties, Mapping):
            fields["properties"] = {
                str(name): self.schema(child, stack) for name, child in properties.items()
            }
        if isinstance(node.get("required"), list):
            fields["required"] = [str(r) for r in node["required"]]

        additional = node.get("additionalProperties")
        if isinstance(additional, bool):
            fields["additional_properties"] = additional
        elif isinstance(additional, Mapping):
            fields["additional_properties"] = self.schema(additional, stack)

        if "items" in node:
            fields["items"] = self.schema(node["items"], stack)

        for key, attr in (("allOf", "all_of"), ("oneOf", "one_of"), ("anyOf", "any_of")):
            members = node.get(key)
            if isinstance(members, list):
                fields[attr] = [self.schema(m, stack) for m in members]

        if isinstance(node.get("enum"), list):
            fields["enum"] = list(node["enum"])

        if "example" in node:
            fields["example"] = node["example"]
        elif isinstance(node.get("examples"), list) and node["examples"]:
            fields["example"] = node["examples"][0]

        return Schema(**fields)

    # -- document parts ---------------------------------------------------

    def _info(self, info: Any) -> Info | None:
        if not isinstance(info, Mapping):
            return None
        return Info(
            title=str(info.get("title") or ""),
            version=str(info.get("version") or ""),
            description=str(info.get("description") or ""),
        )

    def _servers(self) -> list[Server]:
        doc = self.root
        if self.is_swagger2:
            if not doc.get("host"):
                return []
            scheme = (doc.get("schemes") or ["https"])[0]
            return [Server(url=f"{scheme}://{doc['host']}{doc.get('basePath', '')}")]
        return [
            Server(url=s["url"], description=s.get("description") or "")
            for s in doc.get("servers") or []
            if isinstance(s, Mapping) and "url" in s
        ]

    def _path_entry(self, item: Any) -> PathEntry:
        item = self._deref(item)
        if not isinstance(item, Mapping):
            return PathEntry()

        operations: dict[str, Operation] = {}
        for key, operation in item.items():
            method = str(key).upper()
            if method not in HTTP_METHODS or not isinstance(operation, Mapping):
                continue
            operations[method] = self._operation(operation)

        return PathEntry(
            operations=operations,
            parameters=self._parameters(item.get("parameters")),
            summary=str(item.get("summary") or ""),
            description=item.get("description"),
        )

    def _operation(self, operation: Mapping) -> Operation:
        request_body = self._request_body(operation.get("requestBody"))
        if request_body is None and self.is_swagger2:
            request_body = self._swagger2_body(operation)

        responses = operation.get("responses") or {}
        if not isinstance(responses, Mapping):
            raise SpecParseError("'responses' must be a mapping.")
        return Operation(
            operation_id=operation.get("operationId"),
            summary=str(operation.get("summary") or ""),
            description=str(operation.get("description") or ""),
            tags=[str(t) for t in operation.get("tags") or []],
            parameters=self._parameters(operation.get("parameters")),
            request_body=request_body,
            responses={
                str(status): self._response(resp)
                for status, resp in responses.items()
            },
        )

    def _parameters(self, params: Any) -> list[Parameter]:
        result = []
        for raw in params or []:
            p = self._deref(raw)
            if not isinstance(p, Mapping) or "name" not in p or p.get("in") == "body":
                continue
            result.append(self._parameter(p))
        return result

    def _parameter(self, p: Mapping) -> Parameter:
        if "schema" in p:
            schema = self.schema(p["schema"])
        else:
            # Swagger 2.0 declares the type inline on the parameter
            schema = self.schema({k: v for k, v in p.items() if k not in ("name", "in")})
        return Parameter(
            name=str(p["name"]),
            location=str(p.get("in", "query")),
            required=bool(p.get("required", False)),
            description=str(p.get("description") or ""),
            schema=schema,
        )

    def _content(self, content: Any) -> dict[str, MediaType]:
        result = {}
        if not isinstance(content, Mapping):
            return result
        for content_type, media in content.items():
            if not isinstance(media, Mapping):
                result[str(content_type)] = MediaType()
                continue
            fields: dict[str, Any] = {}
            if "schema" in media:
                fields["schema"] = self.schema(media["schema"])
            if "example" in media:
                fields["example"] = media["example"]
            else:
                example = self._first_named_example(media.get("examples"))
                if example is not None:
                    fields["example"] = example
            result[str(content_type)] = MediaType(**fields)
        return result

    def _first_named_example(self, examples: Any) -> Any:
        if not isinstance(examples, Mapping):
            return None
        for example in examples.values():
            example = self._deref(example)
            if isinstance(example, Mapping) and "value" in example:
                return example["value"]
        return None

    def _response(self, resp: Any) -> Response:
        resp = self._deref(resp)
        if not isinstance(resp, Mapping):
            return Response()
        if self.is_swagger2:
            content = {}
            if "schema" in resp:
                media: dict[str, Any] = {"schema": self.schema(resp["schema"])}
                examples = resp.get("examples")
                if isinstance(examples, Mapping) and "application/json" in examples:
                    media["example"] = examples["application/json"]
                content["application/json"] = MediaType(**media)
            return Response(description=str(resp.get("description") or ""), content=content)
        return Response(
            description=str(resp.get("description") or ""),
            content=self._content(resp.get("content")),
        )

    def _request_body(self, body: Any) -> RequestBody | None:
        body = self._deref(body)
        if not isinstance(body, Mapping):
            return None
        return RequestBody(
            description=str(body.get("description") or ""),
            required=bool(body.get("required", False)),
            content=self._content(body.get("content")),
        )

    def _swagger2_body(self, operation: Mapping) -> RequestBody | None:
        for raw in operation.get("parameters") or []:
            p = self._deref(raw)
            if isinstance(p, Mapping) and p.get("in") == "body":
                content_types = operation.get("consumes") or self.root.get("consumes") or [
                    "application/json"
                ]
                return RequestBody(
                    description=str(p.get("description") or ""),
                    required=bool(p.get("required", False)),
                    content={
                        ct: MediaType(schema=self.schema(p.get("schema"))) for ct in content_types
                    },
                )
        return None

    def _components(self) -> Components:
        doc = self.root
        if self.is_swagger2:
            return Components(
                schemas={
                    str(name): self.schema({"$ref": f"#/definitions/{name}"})
                    for name in doc.get("definitions") or {}
                },
                responses={
                    str(name): self._response(r) for name, r in (doc.get("responses") or {}).items()
                },
                parameters=self._named_parameters(doc.get("parameters")),
                security_schemes=dict(doc.get("securityDefinitions") or {}),
            )

        comps = doc.get("components") or {}
        if not isinstance(comps, Mapping):
            return Components()
        return Components(
            schemas={
                str(name): self.schema({"$ref": f"#/components/schemas/{name}"})
                for name in comps.get("schemas") or {}
            },
            responses={
                str(name): self._response(r) for name, r in (comps.get("responses") or {}).items()
            },
            parameters=self._named_parameters(comps.get("parameters")),
            request_bodies=self._named_request_bodies(comps.get("requestBodies")),
            security_schemes=dict(comps.get("securitySchemes") or {}),
            examples=dict(comps.get("examples") or {}),
            callbacks=dict(comps.get("callbacks") or {}),
            links=dict(comps.get("links") or {}),
            headers=dict(comps.get("headers") or {}),
        )

    def _named_parameters(self, params: Any) -> dict[str, Parameter]:
        result = {}
        for name, raw in (params or {}).items():
            p = self._deref(raw)
            if isinstance(p, Mapping) and "name" in p and p.get("in") != "body":
                result[str(name)] = self._parameter(p)
        return result

    def _named_request_bodies(self, bodies: Any) -> dict[str, RequestBody]:
        result = {}
        for name, raw in (bodies or {}).items():
            body = self._request_body(raw)
            if body is not None:
                result[str(name)] = body
        return result


def _schema_kind(node: Mapping) -> SchemaKind:
    """Pick the generation strategy of a raw schema node."""
    if isinstance(node.get("enum"), list) and node["enum"]:
        return SchemaKind.ENUM
    if any(isinstance(node.get(k), list) and node[k] for k in ("allOf", "oneOf", "anyOf")):
        return SchemaKind.COMPOSED

    schema_type = node.get("type")
    if isinstance(schema_type, list):
        # OpenAPI 3.1 style ["string", "null"]
        non_null = [t for t in schema_type if t != "null"]
        schema_type = non_null[0] if non_null else None

    if schema_type == "string":
        if node.get("format") == "date":
            return SchemaKind.DATE
        if node.get("format") == "date-time":
            return SchemaKind.DATE_TIME
        return SchemaKind.STRING
    if schema_type in _SIMPLE_KINDS:
        return _SIMPLE_KINDS[schema_type]
    if isinstance(node.get("properties"), Mapping) or isinstance(
        node.get("additionalProperties"), Mapping
    ):
        return SchemaKind.OBJECT
    if "items" in node:
        return SchemaKind.ARRAY
    return SchemaKind.UNKNOWN
