"""Pick the response of an operation and fabricate its body."""

import copy
import logging

from api_mocker.generator.data import SchemaDataGenerator
from api_mocker.parser.base import Operation, Response
from api_mocker.results import MockResponse, NoResponseDefined

logger = logging.getLogger(__name__)

PREFERRED_STATUSES = ("200", "201", "default")
PREFERRED_CONTENT_TYPES = ("application/json", "application/xml", "*/*")
DEFAULT_STATUS = 200


def select_response(operation: Operation) -> tuple[str, Response] | None:
    """Return the (status key, response) the mock should answer with.

    Ranking: "200", "201", "default", then the first declared response.
    """
    responses = operation.responses
    for key in PREFERRED_STATUSES:
        if key in responses:
            return key, responses[key]
    return next(iter(responses.items()), None)


def status_for(key: str) -> int:
    """Translate a response key into the HTTP status to echo back."""
    if key.isdigit():
        return int(key)
    # "2XX"-style ranges answer with the range's first code
    if len(key) == 3 and key[0].isdigit() and key[1:].upper() == "XX":
        return int(key[0]) * 100
    return DEFAULT_STATUS


class ResponseSelector:
    """Builds MockResponse values for matched operations."""

    def __init__(self, generator: SchemaDataGenerator):
        self.generator = generator

    def respond(self, operation: Operation) -> MockResponse | NoResponseDefined:
        selected = select_response(operation)
        if selected is None:
            return NoResponseDefined()

        key, response = selected
        status = status_for(key)
        content_type = _pick_content_type(response)
        if content_type is None:
            logger.debug("Response %s declares no usable content", key)
            return MockResponse(status=status)

        media = response.content[content_type]
        if self.generator.config.prefer_examples and media.has_example:
            body = copy.deepcopy(media.example)
        else:
            body = self.generator.generate(media.schema_)
        return MockResponse(status=status, body=body, content_type=content_type)


def _pick_content_type(response: Response) -> str | None:
    for content_type in PREFERRED_CONTENT_TYPES:
        media = response.content.get(content_type)
        if media is not None and (media.schema_ is not None or media.has_example):
            return content_type
    for content_type, media in response.content.items():
        if media.schema_ is not None or media.has_example:
            return content_type
    return None
