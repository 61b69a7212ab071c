"""Name to document lookup with a designated default.

Readers always see one immutable snapshot. Writers build a new snapshot
under a lock and swap the reference, so a request never observes a
half-populated set of documents.
"""

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from api_mocker.parser.base import ContractDocument
from api_mocker.results import NoDefaultSpecConfigured, SpecNotFound


@dataclass(frozen=True)
class RegistrySnapshot:
    specs: Mapping[str, ContractDocument] = field(default_factory=lambda: MappingProxyType({}))
    default_name: str | None = None


class SpecRegistry:
    """Holds the loaded documents."""

    def __init__(self):
        self._snapshot = RegistrySnapshot()
        self._write_lock = threading.Lock()

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    def register(self, name: str, document: ContractDocument) -> None:
        """Insert or replace ``name``."""
        with self._write_lock:
            current = self._snapshot
            specs = dict(current.specs)
            specs[name] = document
            self._snapshot = RegistrySnapshot(MappingProxyType(specs), current.default_name)

    def set_default(self, name: str | None) -> None:
        """Designate ``name`` as the default document (None clears it)."""
        with self._write_lock:
            current = self._snapshot
            self._snapshot = RegistrySnapshot(current.specs, name)

    def replace(self, documents: Mapping[str, ContractDocument], default: str | None = None) -> None:
        """Publish a whole new set of documents at once."""
        snapshot = RegistrySnapshot(MappingProxyType(dict(documents)), default)
        with self._write_lock:
            self._snapshot = snapshot

    def get(self, name: str) -> ContractDocument | SpecNotFound:
        document = self._snapshot.specs.get(name)
        if document is None:
            return SpecNotFound(name=name)
        return document

    def get_default(self) -> ContractDocument | NoDefaultSpecConfigured:
        snapshot = self._snapshot
        if snapshot.default_name is None or snapshot.default_name not in snapshot.specs:
            return NoDefaultSpecConfigured()
        return snapshot.specs[snapshot.default_name]

    def names(self) -> list[str]:
        return list(self._snapshot.specs)

    def list_loaded_specs(self) -> dict[str, dict[str, Any]]:
        """Summaries of all documents: {name: {title, version, pathCount}}."""
        result = {}
        for name, spec in self._snapshot.specs.items():
            result[name] = {
                "title": spec.info.title if spec.info else "Untitled",
                "version": spec.info.version if spec.info else "Unknown",
                "pathCount": len(spec.paths),
            }
        return result

    def list_endpoints(self, name: str) -> list[dict[str, Any]] | SpecNotFound:
        """Endpoints of one document: [{path, methods, description}]."""
        document = self.get(name)
        if isinstance(document, SpecNotFound):
            return document
        return [
            {"path": path, "methods": entry.methods, "description": entry.description}
            for path, entry in document.paths.items()
        ]
