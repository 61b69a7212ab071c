"""Exceptions raised by api-mocker.

Expected request outcomes (unknown route, unknown spec, ...) are not
exceptions; see ``api_mocker.results``.
"""


class ApiMockerError(Exception):
    """Base class for api-mocker failures."""


class SpecParseError(ApiMockerError):
    """Raised when a document cannot be turned into a ContractDocument."""


class ConfigurationError(ApiMockerError):
    """Raised when the configuration file or its values are invalid."""
