"""Answer requests with synthetic responses.

The engine ties together the registry, the router and the response
selector. It is transport agnostic: callers hand in the method, the path,
an optional spec name and an optional body, and translate the typed result
into whatever their transport needs.
"""

import logging
from typing import Any

from api_mocker.config import MockConfig
from api_mocker.errors import ApiMockerError
from api_mocker.generator.data import SchemaDataGenerator
from api_mocker.generator.response import ResponseSelector
from api_mocker.loader import LoadReport, load_specs
from api_mocker.merger import merge_documents
from api_mocker.parser.base import ContractDocument
from api_mocker.registry import SpecRegistry
from api_mocker.results import HandleResult, MockResponse, RouteMatch, SpecNotFound
from api_mocker.router import route

logger = logging.getLogger(__name__)


class MockEngine:
    """Dispatches requests against the loaded documents."""

    def __init__(self, config: MockConfig | None = None, registry: SpecRegistry | None = None):
        self.config = config or MockConfig()
        self.registry = registry or SpecRegistry()
        self.generator = SchemaDataGenerator(self.config.generation)
        self.selector = ResponseSelector(self.generator)

    def reload(self) -> LoadReport:
        """Load every spec from ``specs_dir`` and publish them together."""
        report = load_specs(self.config.specs_dir)
        self.publish(report.documents)
        logger.info("Loaded %d OpenAPI specifications", len(report.documents))
        return report

    def publish(self, documents: dict[str, ContractDocument]) -> None:
        """Replace the registry contents, building the merged default first."""
        documents = dict(documents)
        default = None
        if self.config.merge_specs and documents:
            merged = merge_documents(list(documents.values()))
            documents[self.config.merged_spec_name] = merged
            default = self.config.merged_spec_name
        elif self.config.default_spec in documents:
            default = self.config.default_spec
        self.registry.replace(documents, default=default)

    def handle(
        self,
        method: str,
        path: str,
        spec_name: str | None = None,
        body: Any = None,
    ) -> HandleResult:
        """Answer one request with a synthetic response or a typed failure."""
        if spec_name:
            document = self.registry.get(spec_name)
        else:
            document = self.registry.get_default()
        if not isinstance(document, ContractDocument):
            return document

        path = path.split("?", 1)[0]
        matched = route(method, path, document)
        if not isinstance(matched, RouteMatch):
            logger.debug("%s %s not routed: %s", method, path, matched.message)
            return matched

        logger.debug(
            "%s %s matched %s (body %s)",
            matched.method,
            path,
            matched.template,
            "present" if body is not None else "absent",
        )
        result = self.selector.respond(matched.operation)
        if isinstance(result, MockResponse):
            return result.model_copy(
                update={"template": matched.template, "path_params": matched.path_params}
            )
        return result.model_copy(update={"path": matched.template, "method": matched.method})

    def generate_schema(self, spec_name: str, schema_name: str) -> Any:
        """Generate a value for a named component schema."""
        document = self.registry.get(spec_name)
        if isinstance(document, SpecNotFound):
            return document
        schema = document.components.schemas.get(schema_name)
        if schema is None:
            raise ApiMockerError(f"Schema '{schema_name}' not found in '{spec_name}'.")
        return self.generator.generate(schema)

    def list_loaded_specs(self) -> dict[str, dict[str, Any]]:
        return self.registry.list_loaded_specs()

    def list_endpoints(self, spec_name: str) -> list[dict[str, Any]] | SpecNotFound:
        return self.registry.list_endpoints(spec_name)
