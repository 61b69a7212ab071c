"""Fold several contract documents into one unified document.

Precedence differs per section:

- paths: the first document declaring a (template, method) keeps it
- components: the last document declaring a name wins
- servers / tags / security requirements: appended when new
- info: the first document that has one
"""

import copy
import logging
from collections.abc import Sequence

from api_mocker.parser.base import COMPONENT_CATEGORIES, ContractDocument, PathEntry

logger = logging.getLogger(__name__)


def merge_documents(documents: Sequence[ContractDocument]) -> ContractDocument:
    """Merge ``documents`` left to right into a new document."""
    logger.info("Creating merged document from %d specifications", len(documents))

    if not documents:
        logger.warning("No specifications found to merge")
        return ContractDocument()

    merged = documents[0].model_copy(deep=True)
    for index, current in enumerate(documents[1:], start=2):
        logger.debug("Merging specification #%d", index)
        _merge_paths(merged, current)
        _merge_components(merged, current)
        _merge_servers(merged, current)
        _merge_security(merged, current)
        _merge_tags(merged, current)
        if merged.info is None and current.info is not None:
            merged.info = current.info.model_copy(deep=True)

    logger.info("Merged document has %d paths", len(merged.paths))
    return merged


def _merge_paths(target: ContractDocument, source: ContractDocument) -> None:
    for template, source_entry in source.paths.items():
        target_entry = target.paths.get(template)
        if target_entry is None:
            target.paths[template] = source_entry.model_copy(deep=True)
        else:
            _merge_path_entry(target_entry, source_entry)


def _merge_path_entry(target: PathEntry, source: PathEntry) -> None:
    for method, operation in source.operations.items():
        if method not in target.operations:
            target.operations[method] = operation.model_copy(deep=True)

    existing = {(p.name, p.location) for p in target.parameters}
    for param in source.parameters:
        if (param.name, param.location) not in existing:
            target.parameters.append(param.model_copy(deep=True))
            existing.add((param.name, param.location))


def _merge_components(target: ContractDocument, source: ContractDocument) -> None:
    for category in COMPONENT_CATEGORIES:
        incoming = getattr(source.components, category)
        if incoming:
            getattr(target.components, category).update(
                {name: copy.deepcopy(value) for name, value in incoming.items()}
            )


def _merge_servers(target: ContractDocument, source: ContractDocument) -> None:
    urls = {server.url for server in target.servers}
    for server in source.servers:
        if server.url not in urls:
            target.servers.append(server.model_copy())
            urls.add(server.url)


def _merge_security(target: ContractDocument, source: ContractDocument) -> None:
    for requirement in source.security:
        if not any(set(requirement) == set(existing) for existing in target.security):
            target.security.append(dict(requirement))


def _merge_tags(target: ContractDocument, source: ContractDocument) -> None:
    names = {tag.name for tag in target.tags}
    for tag in source.tags:
        if tag.name not in names:
            target.tags.append(tag.model_copy())
            names.add(tag.name)
