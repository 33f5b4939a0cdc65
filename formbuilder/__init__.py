"""Form builder - HTML form markup re-populated from old input or a bound model."""

from formbuilder.builder import FormBuilder
from formbuilder.config import FormBuilderSettings, get_settings, load_settings
from formbuilder.html import HtmlBuilder
from formbuilder.model import SupportsFormValue
from formbuilder.old_input import NullOldInput, OldInput, SessionOldInput, flash_old_input
from formbuilder.url import RouteTableUrlGenerator, UrlGenerator

__all__ = [
    "FormBuilder",
    "FormBuilderSettings",
    "HtmlBuilder",
    "NullOldInput",
    "OldInput",
    "RouteTableUrlGenerator",
    "SessionOldInput",
    "SupportsFormValue",
    "UrlGenerator",
    "flash_old_input",
    "get_settings",
    "load_settings",
]
