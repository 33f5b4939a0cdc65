"""Form builder: renders form markup re-populated from old input or a bound model."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from markupsafe import Markup

from formbuilder.config import FormBuilderSettings, get_settings
from formbuilder.html import HtmlBuilder
from formbuilder.model import get_model_value
from formbuilder.old_input import NullOldInput, OldInput
from formbuilder.url import UrlGenerator
from formbuilder.values import contains, is_absent, is_sequence, loose_equals, to_bool

logger = logging.getLogger(__name__)

METHOD_FIELD_NAME = "_method"
TOKEN_FIELD_NAME = "_token"


class FormBuilder:
    """Builds HTML forms whose fields re-populate themselves.

    A field's value comes from, in order: the old input of a rejected
    submission, the value passed by the caller, then the bound model.

    The builder keeps per-form state (the bound model and the labels
    rendered so far), so use one instance per render and do not share it
    between concurrent requests.

    Usage:
        form = FormBuilder(urls, csrf_token=token)

        form.model(user, {"route": ("user-update", {"user_id": user.id}), "method": "put"})
        form.label("email")
        form.email("email")
        form.submit("Save")
        form.close()
    """

    reserved = ("method", "url", "route", "action", "files")

    # HTML forms only submit GET and POST; these go through a hidden _method field
    spoofed_methods = ("DELETE", "PATCH", "PUT")

    # Never re-display a password or pre-fill a file input
    skip_value_types = ("file", "password", "checkbox", "radio")

    def __init__(
        self,
        urls: UrlGenerator,
        html: HtmlBuilder | None = None,
        csrf_token: str | None = None,
        old_input: OldInput | None = None,
        settings: FormBuilderSettings | None = None,
    ):
        self.urls = urls
        self.html = html if html is not None else HtmlBuilder()
        self.csrf_token = csrf_token
        self.old_input = old_input if old_input is not None else NullOldInput()
        self.settings = settings if settings is not None else get_settings()

        self.bound_model: Any = None
        self.labels: list[str] = []

    # -- Form lifecycle --

    def open(self, options: Mapping[str, Any] | None = None) -> Markup:
        """Open a form. Non-reserved options become attributes of the <form> tag."""
        options = dict(options or {})
        method = options.get("method") or "post"

        self.labels = []

        attributes = {
            "method": self._get_method(method),
            "action": self._get_action(options),
            "accept-charset": self.settings.charset,
        }

        append = self._get_appendage(method)

        if not is_absent(options.get("files")):
            options["enctype"] = "multipart/form-data"

        for key, value in options.items():
            if key in self.reserved:
                continue
            attributes[key] = value

        logger.debug("Opening form %s %s", method.upper(), attributes["action"])

        return self.to_html_string(f"<form{self.html.attributes(attributes)}>{append}")

    def model(self, model: Any, options: Mapping[str, Any] | None = None) -> Markup:
        """Bind *model* and open a form whose fields default to its values."""
        self.set_model(model)
        return self.open(options)

    def set_model(self, model: Any) -> None:
        logger.debug("Binding %s to form", type(model).__name__)
        self.bound_model = model

    def close(self) -> Markup:
        self.labels = []
        self.bound_model = None
        return self.to_html_string("</form>")

    def token(self) -> Markup:
        """Render the hidden CSRF token field."""
        token = self.csrf_token
        if not token:
            logger.warning(
                "No CSRF token configured, rendering %r instead", self.settings.unsupported_token
            )
            token = self.settings.unsupported_token
        return self.hidden(TOKEN_FIELD_NAME, token)

    # -- Labels --

    def label(
        self,
        name: str,
        value: str | None = None,
        options: Mapping[str, Any] | None = None,
        escape_html: bool = True,
    ) -> Markup:
        """Render a label. Inputs rendered afterwards for *name* get id=name."""
        self.labels.append(name)

        attributes = self.html.attributes(options)
        value = self._format_label(name, value)

        if escape_html:
            value = self.html.entities(value)

        return self.to_html_string(
            f'<label for="{self.html.entities(name)}"{attributes}>{value}</label>'
        )

    def _format_label(self, name: str, value: str | None) -> str:
        if not is_absent(value):
            return value
        words = name.replace("_", " ").split(" ")
        return " ".join(word[:1].upper() + word[1:] for word in words)

    # -- Inputs --

    def input(
        self,
        type: str,
        name: str | None,
        value: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> Markup:
        options = dict(options or {})
        if is_absent(options.get("name")):
            options["name"] = name

        id_ = self.get_id_attribute(name, options)

        if type not in self.skip_value_types:
            value = self.get_value_attribute(name, value)

        options.update(type=type, value=value, id=id_)

        return self.to_html_string(f"<input{self.html.attributes(options)}>")

    def text(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("text", name, value, options)

    def password(self, name: str, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("password", name, "", options)

    def hidden(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("hidden", name, value, options)

    def email(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("email", name, value, options)

    def tel(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("tel", name, value, options)

    def number(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("number", name, value, options)

    def date(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        if isinstance(value, dt.date):
            value = value.strftime("%Y-%m-%d")
        return self.input("date", name, value, options)

    def datetime(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        if isinstance(value, dt.date):
            value = value.isoformat()
        return self.input("datetime", name, value, options)

    def time(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("time", name, value, options)

    def url(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("url", name, value, options)

    def file(self, name: str, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("file", name, None, options)

    def color(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("color", name, value, options)

    def reset(self, value: Any, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("reset", None, value, options)

    def image(self, url: str, name: str | None = None, options: Mapping[str, Any] | None = None) -> Markup:
        options = dict(options or {})
        options["src"] = self.urls.to(url)
        return self.input("image", name, None, options)

    def submit(self, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        return self.input("submit", None, value, options)

    def button(self, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        """Render a <button>. Pass Markup as *value* to put HTML inside it."""
        options = dict(options or {})
        if is_absent(options.get("type")):
            options["type"] = "button"
        return self.to_html_string(
            f"<button{self.html.attributes(options)}>{self.html.entities(value)}</button>"
        )

    # -- Textarea --

    def textarea(self, name: str, value: Any = None, options: Mapping[str, Any] | None = None) -> Markup:
        options = dict(options or {})
        if is_absent(options.get("name")):
            options["name"] = name

        # "size" is a shortcut for cols and rows and never rendered itself
        options = self._set_text_area_size(options)
        options["id"] = self.get_id_attribute(name, options)
        options.pop("size", None)

        value = self.get_value_attribute(name, value)

        return self.to_html_string(
            f"<textarea{self.html.attributes(options)}>{self.html.entities(value)}</textarea>"
        )

    def _set_text_area_size(self, options: dict[str, Any]) -> dict[str, Any]:
        if not is_absent(options.get("size")):
            return self._set_quick_text_area_size(options)

        cols = options.get("cols") or self.settings.textarea_cols
        rows = options.get("rows") or self.settings.textarea_rows

        return {**options, "cols": cols, "rows": rows}

    def _set_quick_text_area_size(self, options: dict[str, Any]) -> dict[str, Any]:
        segments = str(options["size"]).split("x")

        return {
            **options,
            "cols": segments[0],
            "rows": segments[1] if len(segments) > 1 else None,
        }

    # -- Selects --

    def select(
        self,
        name: str,
        choices: Mapping[Any, Any] | Iterable[tuple[Any, Any]] | None = None,
        selected: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> Markup:
        """Render a <select>.

        *choices* maps option values to labels, either as a mapping or as
        (value, label) pairs. A label that is itself a mapping or list
        renders as an <optgroup> named after its key.
        """
        # The selected value re-populates like any other field value
        selected = self.get_value_attribute(name, selected)

        options = dict(options or {})
        if is_absent(options.get("name")):
            options["name"] = name
        options["id"] = self.get_id_attribute(name, options)

        html = []

        placeholder = options.pop("placeholder", None)
        if not is_absent(placeholder):
            html.append(self._placeholder_option(placeholder, selected))

        for value, display in _iter_choices(choices):
            html.append(self.get_select_option(display, value, selected))

        return self.to_html_string(
            f"<select{self.html.attributes(options)}>{''.join(html)}</select>"
        )

    def select_range(
        self,
        name: str,
        begin: int,
        end: int,
        selected: Any = None,
        options: Mapping[str, Any] | None = None,
    ) -> Markup:
        """Render a select over the integers begin..end, both inclusive."""
        choices = {i: i for i in range(begin, end + 1)}
        return self.select(name, choices, selected, options)

    select_year = select_range

    def select_month(
        self,
        name: str,
        selected: Any = None,
        options: Mapping[str, Any] | None = None,
        format: str | None = None,
    ) -> Markup:
        """Render a select of months 1-12 labelled with the strftime *format* (full month name by default)."""
        format = format or self.settings.month_format
        months = {month: dt.date(2000, month, 1).strftime(format) for month in range(1, 13)}
        return self.select(name, months, selected, options)

    def get_select_option(self, display: Any, value: Any, selected: Any) -> Markup:
        if isinstance(display, (Mapping, list)):
            return self._option_group(display, value, selected)
        return self._option(display, value, selected)

    def _option_group(self, choices: Any, label: Any, selected: Any) -> Markup:
        html = [
            self._option(display, value, selected) for value, display in _iter_choices(choices)
        ]
        return self.to_html_string(
            f'<optgroup label="{self.html.entities(label)}">{"".join(html)}</optgroup>'
        )

    def _option(self, display: Any, value: Any, selected: Any) -> Markup:
        attributes = {"value": value, "selected": self._get_selected_value(value, selected)}
        return self.to_html_string(
            f"<option{self.html.attributes(attributes)}>{self.html.entities(display)}</option>"
        )

    def _placeholder_option(self, display: Any, selected: Any) -> Markup:
        attributes = {
            "value": "",
            "selected": "selected" if is_absent(selected) or selected == "" else None,
        }
        return self.to_html_string(
            f"<option{self.html.attributes(attributes)}>{self.html.entities(display)}</option>"
        )

    def _get_selected_value(self, value: Any, selected: Any) -> str | None:
        if is_sequence(selected):
            return "selected" if contains(selected, value) else None
        if is_absent(selected):
            return None
        return "selected" if str(value) == str(selected) else None

    # -- Checkboxes and radios --

    def checkbox(
        self,
        name: str,
        value: Any = 1,
        checked: bool | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Markup:
        return self._checkable("checkbox", name, value, checked, options)

    def radio(
        self,
        name: str,
        value: Any = None,
        checked: bool | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> Markup:
        if is_absent(value):
            value = name
        return self._checkable("radio", name, value, checked, options)

    def _checkable(
        self,
        type: str,
        name: str,
        value: Any,
        checked: bool | None,
        options: Mapping[str, Any] | None,
    ) -> Markup:
        options = dict(options or {})
        if self._get_checked_state(type, name, value, checked):
            options["checked"] = "checked"
        return self.input(type, name, value, options)

    def _get_checked_state(self, type: str, name: str, value: Any, checked: bool | None) -> bool:
        if type == "checkbox":
            return self._get_checkbox_checked_state(name, value, checked)
        if type == "radio":
            return self._get_radio_checked_state(name, value, checked)
        return loose_equals(self.get_value_attribute(name), value)

    def _get_checkbox_checked_state(self, name: str, value: Any, checked: bool | None) -> bool:
        # Once anything was submitted, a box missing from the submission was unchecked
        if not self.old_input_is_empty() and is_absent(self.old(name)):
            return False

        if self._missing_old_and_model(name):
            return bool(checked)

        posted = self.get_value_attribute(name, checked)

        if is_sequence(posted):
            return contains(posted, value)

        return to_bool(posted)

    def _get_radio_checked_state(self, name: str, value: Any, checked: bool | None) -> bool:
        if self._missing_old_and_model(name):
            return bool(checked)
        return loose_equals(self.get_value_attribute(name), value)

    def _missing_old_and_model(self, name: str) -> bool:
        if not is_absent(self.old(name)):
            return False
        return is_absent(get_model_value(self.bound_model, name))

    # -- Value resolution --

    def get_id_attribute(self, name: str | None, attributes: Mapping[str, Any]) -> str | None:
        if not is_absent(attributes.get("id")):
            return attributes["id"]
        if name in self.labels:
            return name
        return None

    def get_value_attribute(self, name: str | None, value: Any = None) -> Any:
        """Resolve a field's value: old input, then *value*, then the bound model."""
        if name is None:
            return value

        old = self.old(name)
        if not is_absent(old) and name != METHOD_FIELD_NAME:
            return old

        if not is_absent(value):
            return value

        if self.bound_model is not None:
            return get_model_value(self.bound_model, name)

        return None

    def old(self, name: str) -> Any:
        return self.old_input.get(name)

    def old_input_is_empty(self) -> bool:
        return self.old_input.is_empty()

    # -- Internals --

    def _get_method(self, method: str) -> str:
        method = method.upper()
        return method if method == "GET" else "POST"

    def _get_action(self, options: Mapping[str, Any]) -> str:
        if not is_absent(options.get("url")):
            target, parameters = _split_target(options["url"])
            return self.urls.to(target, parameters)

        if not is_absent(options.get("route")):
            target, parameters = _split_target(options["route"])
            return self.urls.route(target, parameters)

        return self.urls.current()

    def _get_appendage(self, method: str) -> str:
        appendage = ""
        method = method.upper()

        if method in self.spoofed_methods:
            appendage += self.hidden(METHOD_FIELD_NAME, method)

        # Every form that can change state carries the CSRF token
        if method != "GET":
            appendage += self.token()

        return appendage

    def to_html_string(self, html: str) -> Markup:
        return self.html.to_html_string(html)


# -- Utilities --


def _iter_choices(choices: Any) -> Iterable[tuple[Any, Any]]:
    """Yield (value, display) pairs from a mapping or an iterable of choices.

    Entries of a list are either (value, display) pairs or plain values that
    serve as both: ["S", ("M", "Medium")] -> ("S", "S"), ("M", "Medium")
    """
    if choices is None:
        return
    if isinstance(choices, Mapping):
        yield from choices.items()
        return
    for entry in choices:
        if isinstance(entry, (list, tuple)) and len(entry) == 2:
            yield entry[0], entry[1]
        else:
            yield entry, entry


def _split_target(option: Any) -> tuple[Any, Any]:
    """Split a url/route option into its target and parameters.

    "users" -> ("users", None)
    ("user-detail", {"user_id": 5}) -> ("user-detail", {"user_id": 5})
    ("/items", 5, "edit") -> ("/items", [5, "edit"])
    """
    if not isinstance(option, (list, tuple)):
        return option, None

    target, *parameters = option
    if len(parameters) == 1 and isinstance(parameters[0], Mapping):
        return target, parameters[0]
    return target, parameters or None
