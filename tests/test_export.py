from pathlib import Path

import yaml

from api_mocker.merger import merge_documents
from api_mocker.parser.base import ContractDocument, Schema, SchemaKind
from api_mocker.parser.export import document_to_dict, schema_to_dict
from api_mocker.parser.swagger import build_document, parse_openapi

FIXTURES = Path(__file__).parent / "fixtures"


class TestSchemaToDict:
    def test_date_kind_restores_format(self):
        assert schema_to_dict(Schema(kind=SchemaKind.DATE)) == {"type": "string", "format": "date"}

    def test_constraints_use_openapi_keys(self):
        s = Schema(kind=SchemaKind.INTEGER, minimum=0, maximum=500, multiple_of=10)
        assert schema_to_dict(s) == {"type": "integer", "minimum": 0, "maximum": 500, "multipleOf": 10}

    def test_enum_without_type(self):
        assert schema_to_dict(Schema(kind=SchemaKind.ENUM, enum=["a", "b"])) == {"enum": ["a", "b"]}

    def test_falsy_example_kept(self):
        assert schema_to_dict(Schema(kind=SchemaKind.INTEGER, example=0))["example"] == 0


class TestDocumentToDict:
    def test_empty_document(self):
        out = document_to_dict(ContractDocument())
        assert out == {"openapi": "3.0.3", "info": {"title": "", "version": ""}, "paths": {}}

    def test_swagger2_exported_as_openapi3(self):
        out = document_to_dict(parse_openapi(FIXTURES / "inventory.json"))
        assert out["openapi"] == "3.0.3"
        assert out["servers"] == [{"url": "https://inventory.example.com/v2"}]
        put = out["paths"]["/items/{sku}"]["put"]
        assert put["requestBody"]["content"]["application/json"]["schema"]["type"] == "object"

    def test_exported_merge_parses_back(self):
        merged = merge_documents([
            parse_openapi(FIXTURES / "petstore.yaml"),
            parse_openapi(FIXTURES / "users.yaml"),
        ])
        text = yaml.safe_dump(document_to_dict(merged), sort_keys=False)
        again = build_document(yaml.safe_load(text))
        assert list(again.paths) == list(merged.paths)
        assert again.paths["/pets"].methods == ["GET", "PUT", "POST"]
        assert set(again.components.schemas) == set(merged.components.schemas)
        assert again.paths["/pets/{petId}"].parameters[0].name == "petId"
