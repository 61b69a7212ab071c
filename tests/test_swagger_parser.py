from pathlib import Path

import pytest

from api_mocker.errors import SpecParseError
from api_mocker.parser.base import SchemaKind
from api_mocker.parser.detect import detect_format
from api_mocker.parser.swagger import build_document, parse_openapi, parse_openapi_text

FIXTURES = Path(__file__).parent / "fixtures"


class TestDetectFormat:
    def test_detect_openapi_yaml(self):
        assert detect_format(FIXTURES / "petstore.yaml") == "openapi"

    def test_detect_swagger_json(self):
        assert detect_format(FIXTURES / "inventory.json") == "swagger"

    def test_detect_unknown_yaml(self, tmp_path):
        f = tmp_path / "config.yaml"
        f.write_text("name: not a spec\n")
        assert detect_format(f) == "unknown"

    def test_detect_unknown_suffix(self, tmp_path):
        f = tmp_path / "doc.md"
        f.write_text("# API Docs\nSome text")
        assert detect_format(f) == "unknown"


class TestOpenApiParser:
    def test_parse_petstore_metadata(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        assert doc.info.title == "Swagger Petstore"
        assert doc.info.version == "1.0.0"
        assert [s.url for s in doc.servers] == ["http://petstore.swagger.io/v1"]
        assert [t.name for t in doc.tags] == ["pets"]
        assert doc.security == [{"api_key": []}]

    def test_paths_keep_declaration_order(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        assert list(doc.paths) == ["/pets", "/pets/{petId}"]
        assert list(doc.paths["/pets"].operations) == ["GET", "POST"]
        assert doc.paths["/pets"].description == "Pet collection"

    def test_responses_keep_declaration_order(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        responses = doc.paths["/pets/{petId}"].operations["GET"].responses
        assert list(responses) == ["404", "200"]

    def test_parse_query_parameter(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        param = doc.paths["/pets"].operations["GET"].parameters[0]
        assert param.name == "limit"
        assert param.location == "query"
        assert param.required is False
        assert param.schema_.kind is SchemaKind.INTEGER
        assert param.schema_.maximum == 100

    def test_path_level_parameter_ref_resolved(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        params = doc.paths["/pets/{petId}"].parameters
        assert params[0].name == "petId"
        assert params[0].location == "path"
        assert params[0].required is True

    def test_request_body(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        body = doc.paths["/pets"].operations["POST"].request_body
        assert body.required is True
        schema = body.content["application/json"].schema_
        assert schema.ref == "NewPet"
        assert schema.properties["name"].example == "Fido"

    def test_schema_refs_resolved(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        media = doc.paths["/pets/{petId}"].operations["GET"].responses["200"].content["application/json"]
        pet = media.schema_
        assert pet.kind is SchemaKind.OBJECT
        assert pet.ref == "Pet"
        assert pet.properties["tag"].kind is SchemaKind.ENUM
        assert pet.properties["born"].kind is SchemaKind.DATE
        assert pet.properties["owner"].properties["email"].format == "email"

    def test_cyclic_ref_becomes_empty_object(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        pet = doc.components.schemas["Pet"]
        back_ref = pet.properties["owner"].properties["pets"].items
        assert back_ref.kind is SchemaKind.OBJECT
        assert back_ref.ref == "Pet"
        assert back_ref.properties == {}

    def test_components_parsed(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        assert set(doc.components.schemas) == {"Pet", "NewPet", "Owner", "Pets", "Error"}
        assert doc.components.schemas["Pets"].min_items == 2
        assert "PetId" in doc.components.parameters

    def test_response_without_content(self):
        doc = parse_openapi(FIXTURES / "petstore.yaml")
        assert doc.paths["/pets"].operations["POST"].responses["201"].content == {}


class TestSwagger2Parser:
    def test_definitions_become_component_schemas(self):
        doc = parse_openapi(FIXTURES / "inventory.json")
        item = doc.components.schemas["Item"]
        assert item.properties["price"].multiple_of == 0.5
        assert item.properties["sku"].pattern == "^[A-Z]{3}-[0-9]{4}$"

    def test_server_from_host(self):
        doc = parse_openapi(FIXTURES / "inventory.json")
        assert doc.servers[0].url == "https://inventory.example.com/v2"

    def test_response_schema_wrapped_as_json(self):
        doc = parse_openapi(FIXTURES / "inventory.json")
        response = doc.paths["/items/{sku}"].operations["GET"].responses["200"]
        assert response.content["application/json"].schema_.ref == "Item"

    def test_body_parameter_becomes_request_body(self):
        doc = parse_openapi(FIXTURES / "inventory.json")
        put = doc.paths["/items/{sku}"].operations["PUT"]
        assert put.parameters == []
        assert put.request_body.content["application/json"].schema_.ref == "Item"

    def test_inline_parameter_type(self):
        doc = parse_openapi(FIXTURES / "inventory.json")
        param = doc.paths["/items/{sku}"].operations["GET"].parameters[0]
        assert param.schema_.kind is SchemaKind.STRING
        assert param.schema_.pattern == "^[A-Z]{3}-[0-9]{4}$"


class TestSchemaKinds:
    def _schema(self, node):
        doc = build_document({
            "openapi": "3.0.0",
            "paths": {},
            "components": {"schemas": {"S": node}},
        })
        return doc.components.schemas["S"]

    def test_enum_wins_over_type(self):
        assert self._schema({"type": "string", "enum": ["a"]}).kind is SchemaKind.ENUM

    def test_composed(self):
        assert self._schema({"oneOf": [{"type": "string"}]}).kind is SchemaKind.COMPOSED

    def test_properties_without_type_is_object(self):
        assert self._schema({"properties": {"a": {"type": "string"}}}).kind is SchemaKind.OBJECT

    def test_date_time(self):
        assert self._schema({"type": "string", "format": "date-time"}).kind is SchemaKind.DATE_TIME

    def test_nullable_type_list(self):
        assert self._schema({"type": ["integer", "null"]}).kind is SchemaKind.INTEGER

    def test_untyped_is_unknown(self):
        assert self._schema({"description": "anything"}).kind is SchemaKind.UNKNOWN

    def test_additional_properties_schema(self):
        s = self._schema({"type": "object", "additionalProperties": {"type": "integer"}})
        assert s.additional_properties.kind is SchemaKind.INTEGER

    def test_unresolvable_ref_degrades(self):
        s = self._schema({"type": "object", "properties": {"x": {"$ref": "#/components/schemas/Missing"}}})
        assert s.properties["x"].kind is SchemaKind.UNKNOWN


class TestParseErrors:
    def test_invalid_yaml(self):
        with pytest.raises(SpecParseError):
            parse_openapi_text("openapi: [unclosed\n")

    def test_root_not_mapping(self):
        with pytest.raises(SpecParseError):
            parse_openapi_text("- just\n- a list\n")

    def test_missing_version_key(self):
        with pytest.raises(SpecParseError):
            build_document({"paths": {}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(SpecParseError):
            parse_openapi(tmp_path / "nope.yaml")


class TestCyclicRefs:
    def test_component_depth_independent_of_first_use(self):
        doc = build_document({
            "openapi": "3.0.0",
            "paths": {"/a": {"get": {"responses": {"200": {
                "description": "a",
                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/A"}}},
            }}}}},
            "components": {"schemas": {
                "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
                "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
            }},
        })
        a = doc.components.schemas["A"]
        b = doc.components.schemas["B"]
        assert set(a.properties["b"].properties) == {"a"}
        assert set(b.properties["a"].properties) == {"b"}
        assert b.properties["a"].properties["b"].properties == {}


class TestMalformedShapes:
    def test_wrong_scalar_type_is_parse_error(self):
        with pytest.raises(SpecParseError, match="Malformed document"):
            build_document({"openapi": "3.0.0", "paths": {}, "components": {"schemas": {"S": {"minimum": "lots"}}}})

    def test_responses_list_is_parse_error(self):
        with pytest.raises(SpecParseError, match="responses"):
            build_document({"openapi": "3.0.0", "paths": {"/x": {"get": {"responses": ["200"]}}}})
