"""
Shared fixtures. No test touches the network: adapters get a MagicMock transport.
"""

import json

import pytest
from unittest.mock import MagicMock

from registrar_api.api.http import HttpResponse, HttpTransport
from registrar_api.utils.config import Settings


def make_response(body=None, status=200, text=None, error=None, url="https://api.test/endpoint"):
    """Build an HttpResponse; body is JSON-encoded unless text is given."""
    if error:
        return HttpResponse(0, "", error, url)
    if text is None:
        text = json.dumps(body) if body is not None else ""
    return HttpResponse(status, text, None, url)


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def transport():
    return MagicMock(spec=HttpTransport)


@pytest.fixture
def settings():
    return Settings(_env_file=None)
