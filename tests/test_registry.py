from pathlib import Path

import pytest

from api_mocker.parser.base import ContractDocument, Info, Operation, PathEntry
from api_mocker.parser.swagger import parse_openapi
from api_mocker.registry import SpecRegistry
from api_mocker.results import NoDefaultSpecConfigured, SpecNotFound

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def registry():
    reg = SpecRegistry()
    reg.register("petstore.yaml", parse_openapi(FIXTURES / "petstore.yaml"))
    return reg


class TestLookup:
    def test_get_registered(self, registry):
        doc = registry.get("petstore.yaml")
        assert isinstance(doc, ContractDocument)
        assert doc.info.title == "Swagger Petstore"

    def test_get_unknown(self, registry):
        result = registry.get("nope.yaml")
        assert isinstance(result, SpecNotFound)
        assert result.name == "nope.yaml"
        assert "nope.yaml" in result.message

    def test_no_default_configured(self, registry):
        assert isinstance(registry.get_default(), NoDefaultSpecConfigured)

    def test_default_pointing_at_missing_name(self, registry):
        registry.set_default("gone.yaml")
        assert isinstance(registry.get_default(), NoDefaultSpecConfigured)

    def test_default(self, registry):
        registry.set_default("petstore.yaml")
        assert registry.get_default() is registry.get("petstore.yaml")

    def test_register_replaces_same_name(self, registry):
        replacement = ContractDocument(info=Info(title="v2"))
        registry.register("petstore.yaml", replacement)
        assert registry.get("petstore.yaml") is replacement
        assert registry.names() == ["petstore.yaml"]


class TestSnapshots:
    def test_replace_publishes_whole_set(self, registry):
        registry.replace({"a": ContractDocument(), "b": ContractDocument()}, default="b")
        assert registry.names() == ["a", "b"]
        assert registry.snapshot.default_name == "b"
        assert isinstance(registry.get("petstore.yaml"), SpecNotFound)

    def test_old_snapshot_unchanged_by_writes(self, registry):
        before = registry.snapshot
        registry.register("other.yaml", ContractDocument())
        registry.set_default("other.yaml")
        assert list(before.specs) == ["petstore.yaml"]
        assert before.default_name is None

    def test_snapshot_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.snapshot.specs["x"] = ContractDocument()

    def test_replace_copies_mapping(self):
        reg = SpecRegistry()
        documents = {"a": ContractDocument()}
        reg.replace(documents)
        documents["b"] = ContractDocument()
        assert reg.names() == ["a"]


class TestAdminQueries:
    def test_list_loaded_specs(self, registry):
        registry.register("blank.yaml", ContractDocument(paths={"/x": PathEntry()}))
        assert registry.list_loaded_specs() == {
            "petstore.yaml": {"title": "Swagger Petstore", "version": "1.0.0", "pathCount": 2},
            "blank.yaml": {"title": "Untitled", "version": "Unknown", "pathCount": 1},
        }

    def test_list_loaded_specs_empty(self):
        assert SpecRegistry().list_loaded_specs() == {}

    def test_list_endpoints(self, registry):
        endpoints = registry.list_endpoints("petstore.yaml")
        assert endpoints == [
            {"path": "/pets", "methods": ["GET", "POST"], "description": "Pet collection"},
            {"path": "/pets/{petId}", "methods": ["GET", "DELETE"], "description": None},
        ]

    def test_list_endpoints_canonical_method_order(self):
        reg = SpecRegistry()
        ops = {"PATCH": Operation(), "GET": Operation(), "POST": Operation()}
        reg.register("x", ContractDocument(paths={"/x": PathEntry(operations=ops)}))
        assert reg.list_endpoints("x")[0]["methods"] == ["GET", "POST", "PATCH"]

    def test_list_endpoints_unknown_spec(self, registry):
        assert isinstance(registry.list_endpoints("missing"), SpecNotFound)
