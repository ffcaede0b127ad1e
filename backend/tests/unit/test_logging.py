"""Unit tests for logging helpers"""

import json
import logging

import pytest

from app.core.logging import CustomJsonFormatter, mask_ssn


@pytest.mark.parametrize(
    "ssn, expected",
    [
        ("123-45-6789", "***-**-6789"),
        ("123456789", "***-**-6789"),
        ("12", "***-**-****"),
        (None, "***-**-****"),
    ],
)
def test_mask_ssn(ssn, expected):
    assert mask_ssn(ssn) == expected


def test_json_formatter_adds_service_fields():
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord("app.test", logging.WARNING, __file__, 1, "hello", None, None)

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "hello"
    assert payload["level"] == "WARNING"
    assert payload["name"] == "app.test"
    assert payload["service"] == "credit-decision-engine"
    assert payload["timestamp"]
