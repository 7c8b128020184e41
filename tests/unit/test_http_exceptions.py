"""HTTP exception handler tests."""

import json

import pytest

from sadaksathi.core.domain.exceptions import ConfigurationError, DomainException
from sadaksathi.core.interfaces.http.exceptions import (
    domain_exception_handler,
    global_exception_handler,
)
from sadaksathi.modules.feeds.domain.exceptions import (
    InvalidSourceConfigError,
    PipelineConfigError,
)

pytestmark = pytest.mark.anyio


async def test_configuration_error_maps_to_500():
    exc = PipelineConfigError("config/script-properties.json", "file not found")

    response = await domain_exception_handler(None, exc)

    assert isinstance(exc, ConfigurationError)
    assert response.status_code == 500
    assert json.loads(response.body) == {
        "error": {
            "code": "CONFIGURATION_ERROR",
            "message": "Cannot load pipeline config config/script-properties.json: "
            "file not found",
        }
    }


async def test_plain_domain_error_maps_to_400():
    response = await domain_exception_handler(None, InvalidSourceConfigError("bad"))

    assert response.status_code == 400
    assert json.loads(response.body)["error"]["code"] == DomainException.error_code


async def test_unexpected_error_hides_details():
    response = await global_exception_handler(None, RuntimeError("secret path"))

    assert response.status_code == 500
    assert json.loads(response.body) == {
        "error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}
    }
