"""Resolve (method, path) to a declared operation.

An exact key match wins outright. Otherwise templates are tried in
declaration order and the first match wins.
"""

import re
from functools import lru_cache

from api_mocker.parser.base import ContractDocument, PathEntry
from api_mocker.results import MethodNotAllowed, RouteMatch, RouteNotFound, RouteResult

_PLACEHOLDER = re.compile(r"\{([^/{}]+)\}")


def route(method: str, path: str, document: ContractDocument) -> RouteResult:
    """Resolve ``method`` and ``path`` against ``document``."""
    method = method.upper()
    found = find_path(path, document)
    if found is None:
        return RouteNotFound(path=path)

    template, entry, params = found
    operation = entry.operations.get(method)
    if operation is None:
        return MethodNotAllowed(path=template, method=method, allowed_methods=entry.methods)
    return RouteMatch(template=template, method=method, operation=operation, path_params=params)


def find_path(path: str, document: ContractDocument) -> tuple[str, PathEntry, dict[str, str]] | None:
    """Return (template, entry, path params) for the first template matching ``path``."""
    candidate = "/" + (path[1:] if path.startswith("/") else path)
    paths = document.paths

    if candidate in paths:
        return candidate, paths[candidate], {}

    if not candidate.endswith("/") and candidate + "/" in paths:
        return candidate + "/", paths[candidate + "/"], {}

    for template, entry in paths.items():
        pattern, names = template_pattern(template)
        match = pattern.fullmatch(candidate)
        if match:
            return template, entry, dict(zip(names, match.groups()))
    return None


@lru_cache(maxsize=1024)
def template_pattern(template: str) -> tuple[re.Pattern, tuple[str, ...]]:
    """Compile a path template; each ``{name}`` matches one non-slash segment."""
    parts = []
    names = []
    last = 0
    for placeholder in _PLACEHOLDER.finditer(template):
        parts.append(re.escape(template[last:placeholder.start()]))
        parts.append("([^/]+)")
        names.append(placeholder.group(1))
        last = placeholder.end()
    parts.append(re.escape(template[last:]))
    return re.compile("".join(parts)), tuple(names)
