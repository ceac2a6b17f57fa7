"""
Service binding and application metadata models.

Both are read-only views over JSON the platform hands to the build
(``VCAP_SERVICES`` and ``VCAP_APPLICATION``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Scalar = str | int | float | bool


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


class ServiceBinding(BaseModel):
    """A named external credential record exposed by the platform.

    ``service_type`` is the catalog key the binding was listed under
    (e.g. ``user-provided`` or ``newrelic``); ``label`` is the binding's own
    label and usually equals the type for brokered services.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    label: str = ""
    service_type: str = ""
    plan: str = ""
    tags: tuple[str, ...] = ()
    credentials: dict[str, Any] = Field(default_factory=dict)

    def credential(self, *aliases: str, default: Scalar | None = None) -> Scalar | None:
        """Return the first alias present in the credentials with a scalar value.

        Aliases are tried in the given order.  Nested values (dicts, lists)
        and nulls are skipped so a plugin never has to type-check raw maps.
        """
        for alias in aliases:
            value = self.credentials.get(alias)
            if value is not None and _is_scalar(value):
                return value
        return default

    def credential_str(self, *aliases: str, default: str = "") -> str:
        """Like :meth:`credential` but always returns a string.

        Integral floats (JSON numbers such as ``8081.0``) render without
        a fractional part.
        """
        value = self.credential(*aliases)
        if value is None:
            return default
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


class ApplicationInfo(BaseModel):
    """Application metadata used by plugins for labeling."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    application_name: str = ""
    application_version: str = ""
    space_name: str = ""
    application_uris: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.application_name

    @property
    def version(self) -> str:
        return self.application_version
