"""Model value lookup for forms bound to an application object."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from formbuilder.values import data_get, transform_key


@runtime_checkable
class SupportsFormValue(Protocol):
    """Models that control how their values are exposed to forms.

    Usage:
        class User(BaseModel):
            birthday: date

            def get_form_value(self, key: str):
                if key == "birthday":
                    return self.birthday.isoformat()
                return getattr(self, key, None)
    """

    def get_form_value(self, key: str) -> Any: ...


def get_model_value(model: Any, name: str) -> Any:
    """Return the value *model* holds for the field *name*, or None."""
    if model is None:
        return None

    key = transform_key(name)

    if isinstance(model, SupportsFormValue):
        return model.get_form_value(key)

    return data_get(model, key)
