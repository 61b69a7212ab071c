"""Load every description document found in a directory."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from api_mocker.errors import SpecParseError
from api_mocker.parser.base import ContractDocument
from api_mocker.parser.detect import SPEC_SUFFIXES, detect_format
from api_mocker.parser.swagger import parse_openapi

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Documents keyed by file name, plus the files that failed to load."""

    documents: dict[str, ContractDocument] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)


def load_specs(directory: Path) -> LoadReport:
    """Parse all spec files in ``directory``; a bad file never blocks the rest."""
    report = LoadReport()
    if not directory.is_dir():
        logger.warning("Specs directory not found: %s", directory)
        return report

    for file_path in sorted(directory.iterdir()):
        if not file_path.is_file() or file_path.suffix.lower() not in SPEC_SUFFIXES:
            continue

        logger.info("Loading OpenAPI spec: %s", file_path.name)
        try:
            if detect_format(file_path) == "unknown":
                raise SpecParseError("not an OpenAPI or Swagger document")
            document = parse_openapi(file_path)
        except (SpecParseError, OSError, UnicodeDecodeError) as e:
            logger.error("Failed to load OpenAPI spec %s: %s", file_path.name, e)
            report.failures[file_path.name] = str(e)
            continue

        report.documents[file_path.name] = document
        logger.info("Successfully loaded spec: %s with %d paths", file_path.name, len(document.paths))

    return report
