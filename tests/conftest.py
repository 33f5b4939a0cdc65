"""Shared pytest fixtures."""

from unittest.mock import MagicMock
from urllib.parse import urlsplit

import pytest

from formbuilder.builder import FormBuilder
from formbuilder.config import FormBuilderSettings, get_settings
from formbuilder.old_input import SessionOldInput
from formbuilder.url import RouteTableUrlGenerator


@pytest.fixture
def settings():
    """Default settings, independent of any formbuilder.yaml in the working directory."""
    return FormBuilderSettings()


@pytest.fixture
def urls():
    return RouteTableUrlGenerator(
        {
            "items": "/items",
            "item-detail": "/items/{item_id}",
            "item-edit": "/items/{}/edit",
        },
        current="/items/new",
    )


@pytest.fixture
def builder_factory(urls, settings):
    """Factory fixture that returns form builders with optional old input and token."""
    def _make(old_input=None, csrf_token="test-token"):
        return FormBuilder(
            urls,
            csrf_token=csrf_token,
            old_input=SessionOldInput(old_input) if old_input is not None else None,
            settings=settings,
        )
    return _make


@pytest.fixture
def builder(builder_factory):
    return builder_factory()


@pytest.fixture
def clean_settings_cache():
    """Clear the cached settings around a test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_request_factory():
    """Factory fixture that returns mock requests with a session dict."""
    def _make(session=None, form_data=None, url="http://testserver/items/new"):
        request = MagicMock()
        request.session = session if session is not None else {}
        request.url.__str__.return_value = url
        request.url.path = urlsplit(url).path
        if form_data is not None:
            async def _form():
                return form_data
            request.form = _form
        return request
    return _make
