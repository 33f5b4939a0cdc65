"""Litestar integration: URL generation from the request and a per-request form builder.

Usage:
    from formbuilder.integration import form_builder_dependency, remember_input

    @get("/profile", dependencies={"form": form_builder_dependency})
    async def edit_profile(form: FormBuilder) -> Template:
        return Template("profile.html", context={"form": form})

    @post("/profile")
    async def update_profile(request: Request) -> Redirect:
        if not valid:
            await remember_input(request)
            return Redirect("/profile")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from litestar import Request
from litestar.di import Provide

from formbuilder.builder import FormBuilder
from formbuilder.config import FormBuilderSettings, get_settings
from formbuilder.old_input import SessionOldInput, flash_old_input
from formbuilder.url import append_parameters, is_absolute_url

logger = logging.getLogger(__name__)


class LitestarUrlGenerator:
    """Resolves paths, named routes and the current URL against a Litestar request."""

    def __init__(self, request: Request):
        self.request = request

    def to(self, path: str, parameters: Any = None) -> str:
        if not is_absolute_url(path) and not path.startswith("/"):
            path = "/" + path
        return append_parameters(path, parameters)

    def route(self, name: str, parameters: Any = None) -> str:
        if parameters is None:
            return self.request.app.route_reverse(name)
        if not isinstance(parameters, Mapping):
            raise TypeError(
                f"Route '{name}' needs path parameters as a mapping, got {type(parameters).__name__}"
            )
        return self.request.app.route_reverse(name, **parameters)

    def current(self) -> str:
        return str(self.request.url)


def form_builder_for(request: Request, settings: FormBuilderSettings | None = None) -> FormBuilder:
    """Create a form builder for *request*.

    The CSRF token is read from the session, never generated here. Old input
    flashed by the previous request is popped from the session.
    """
    settings = settings or get_settings()
    session = request.session

    return FormBuilder(
        LitestarUrlGenerator(request),
        csrf_token=session.get(settings.csrf_session_key),
        old_input=SessionOldInput.from_session(session, settings.old_input_session_key),
        settings=settings,
    )


async def remember_input(request: Request, settings: FormBuilderSettings | None = None) -> None:
    """Flash the submitted form data so the next form re-populates from it."""
    settings = settings or get_settings()
    form_data = await request.form()
    flash_old_input(request.session, form_data, key=settings.old_input_session_key)
    logger.debug("Remembered input for %s", request.url.path)


def provide_form_builder(request: Request) -> FormBuilder:
    return form_builder_for(request)


form_builder_dependency = Provide(provide_form_builder, sync_to_thread=False)
