"""Turn one schema node into one synthetic value.

Values only have to conform to the declared structure and constraints; they
are random by design. Malformed fragments (a pattern that cannot be
generated, nesting deeper than ``max_depth``) degrade to a plausible
fallback instead of raising.
"""

import base64
import copy
import logging
import math
import random
import re
from datetime import timezone
from fractions import Fraction
from typing import Any

from faker import Faker
from rstr import Rstr

from api_mocker.config import GenerationConfig
from api_mocker.parser.base import Schema, SchemaKind

logger = logging.getLogger(__name__)

NUMBER_RANGE = (0.0, 1000.0)
INTEGER_RANGE = (0, 100)
INVERTED_RANGE_WIDTH = 100


class SchemaDataGenerator:
    """Generates mock values from Schema nodes."""

    def __init__(self, config: GenerationConfig | None = None):
        self.config = config or GenerationConfig()
        self.random = random.Random(self.config.seed)
        self.fake = Faker()
        if self.config.seed is not None:
            self.fake.seed_instance(self.config.seed)
        self.xeger = Rstr(self.random)

        self._string_formats = {
            "email": self.fake.email,
            "uri": self.fake.url,
            "url": self.fake.url,
            "uuid": self.fake.uuid4,
            "date": lambda: self._date(SchemaKind.DATE),
            "date-time": lambda: self._date(SchemaKind.DATE_TIME),
            "password": self.fake.password,
            "byte": lambda: base64.b64encode(self.fake.word().encode()).decode("ascii"),
            "binary": lambda: "binary data",
            "hostname": self.fake.domain_name,
            "ipv4": self.fake.ipv4,
            "ipv6": self.fake.ipv6,
        }

    def generate(self, schema: Schema | None, depth: int = 0) -> Any:
        """Generate one value for ``schema``."""
        if schema is None:
            return None

        if self.config.prefer_examples and schema.has_example:
            return copy.deepcopy(schema.example)

        kind = schema.kind
        if kind is SchemaKind.OBJECT:
            return self._object(schema, depth)
        elif kind is SchemaKind.ARRAY:
            return self._array(schema, depth)
        elif kind is SchemaKind.STRING:
            return self._string(schema)
        elif kind is SchemaKind.NUMBER:
            return self._number(schema)
        elif kind is SchemaKind.INTEGER:
            return self._integer(schema)
        elif kind is SchemaKind.BOOLEAN:
            return self.random.choice((True, False))
        elif kind in (SchemaKind.DATE, SchemaKind.DATE_TIME):
            return self._date(kind)
        elif kind is SchemaKind.ENUM:
            return self.random.choice(schema.enum) if schema.enum else self.fake.word()
        elif kind is SchemaKind.COMPOSED:
            return self._composed(schema, depth)
        else:
            return self.fake.word()

    def _object(self, schema: Schema, depth: int) -> dict[str, Any]:
        if depth > self.config.max_depth:
            return {}

        result = {name: self.generate(prop, depth + 1) for name, prop in schema.properties.items()}

        extra = schema.additional_properties
        if isinstance(extra, Schema):
            for _ in range(self.config.additional_properties_count):
                key = f"prop{self.fake.word()}"
                while key in result:
                    key = f"prop{self.fake.word()}{self.random.randint(0, 999)}"
                result[key] = self.generate(extra, depth + 1)
        return result

    def _array(self, schema: Schema, depth: int) -> list[Any]:
        if schema.items is None or depth > self.config.max_depth:
            return []

        size = self.config.default_collection_size
        min_items = schema.min_items or 0
        max_items = schema.max_items if schema.max_items is not None else size
        count = min(max_items, max(min_items, size))
        return [self.generate(schema.items, depth + 1) for _ in range(count)]

    def _string(self, schema: Schema) -> str:
        formatter = self._string_formats.get((schema.format or "").lower())
        if formatter is not None:
            return formatter()

        if schema.pattern:
            try:
                return self.xeger.xeger(schema.pattern)
            except (re.error, KeyError, ValueError, TypeError) as e:
                logger.warning("Failed to generate string from pattern %r: %s", schema.pattern, e)

        min_length = schema.min_length or 0
        max_length = (
            schema.max_length
            if schema.max_length is not None
            else self.config.default_string_length
        )
        if min_length > max_length:
            max_length = min_length
        return self.fake.pystr(min_chars=min_length, max_chars=max_length)

    def _number(self, schema: Schema) -> float:
        minimum = schema.minimum if schema.minimum is not None else NUMBER_RANGE[0]
        maximum = schema.maximum if schema.maximum is not None else NUMBER_RANGE[1]
        if minimum > maximum:
            maximum = minimum + INVERTED_RANGE_WIDTH

        value = self.random.uniform(minimum, maximum)
        step = schema.multiple_of
        if step and step > 0:
            value = math.floor(value / step) * step
            if value < minimum and value + step <= maximum:
                value += step
        return round(value, 2)

    def _integer(self, schema: Schema) -> int:
        minimum = math.ceil(schema.minimum) if schema.minimum is not None else INTEGER_RANGE[0]
        maximum = math.floor(schema.maximum) if schema.maximum is not None else INTEGER_RANGE[1]
        if minimum > maximum:
            maximum = minimum + INVERTED_RANGE_WIDTH

        value = self.random.randint(minimum, maximum)
        step = 0
        if schema.multiple_of and schema.multiple_of > 0:
            # integer multiples of p/q (lowest terms) are the multiples of p
            step = Fraction(schema.multiple_of).limit_denominator(10**6).numerator
        if step > 0:
            value = (value // step) * step
            if value < minimum and value + step <= maximum:
                value += step
        return value

    def _date(self, kind: SchemaKind) -> str:
        instant = self.fake.date_time_between(start_date="-1y", end_date="+1y", tzinfo=timezone.utc)
        if kind is SchemaKind.DATE_TIME:
            return instant.replace(microsecond=0).isoformat().replace("+00:00", "Z")
        return instant.strftime(self.config.date_format)

    def _composed(self, schema: Schema, depth: int) -> Any:
        if schema.all_of:
            merged: dict[str, Any] = {}
            produced_mapping = False
            last = None
            for member in schema.all_of:
                last = self.generate(member, depth)
                if isinstance(last, dict):
                    merged.update(last)
                    produced_mapping = True
            return merged if produced_mapping else last

        members = schema.one_of or schema.any_of
        if members:
            return self.generate(self.random.choice(members), depth)
        return self.fake.word()
