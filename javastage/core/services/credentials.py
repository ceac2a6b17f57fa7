"""
Credential resolver — uniform lookup over the platform service catalog.

The catalog is the JSON object the platform exposes in ``VCAP_SERVICES``:
a mapping of service type to a list of bindings.  Every plugin that cares
about a bound service asks this module instead of walking the JSON itself.

Matching rules:
    - by type:   case-insensitive equality with the catalog key or label
    - by tag:    case-insensitive substring of any tag
    - by name:   case-insensitive substring of the binding name

When several bindings match, the first one in catalog iteration order
wins.  That order is whatever order the platform serialised the JSON in;
it is NOT re-sorted here, so two bindings that both match a query are a
source of nondeterminism if the platform does not guarantee ordering.

A missing or malformed catalog is never an error: every query simply
finds nothing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from javastage.core.models.binding import ServiceBinding

logger = logging.getLogger(__name__)

SERVICES_ENV = "VCAP_SERVICES"


class ServiceCatalog:
    """Read-only, alias-tolerant view over the bound services."""

    def __init__(self, bindings: Iterable[ServiceBinding] = ()):
        self._bindings: tuple[ServiceBinding, ...] = tuple(bindings)

    # ── Construction ────────────────────────────────────────────

    @classmethod
    def from_json(cls, raw: str | None) -> ServiceCatalog:
        """Parse a catalog from its JSON text.  Never raises."""
        if not raw or not raw.strip():
            return cls()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed %s: %s", SERVICES_ENV, e)
            return cls()

        if not isinstance(data, dict):
            logger.warning(
                "Ignoring %s: expected a JSON object, got %s",
                SERVICES_ENV,
                type(data).__name__,
            )
            return cls()

        return cls(_parse_bindings(data))

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> ServiceCatalog:
        return cls.from_json(environ.get(SERVICES_ENV))

    # ── Iteration ───────────────────────────────────────────────

    def __iter__(self) -> Iterator[ServiceBinding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    @property
    def bindings(self) -> tuple[ServiceBinding, ...]:
        return self._bindings

    # ── Predicates ──────────────────────────────────────────────

    def has_service(self, type_name: str) -> bool:
        return self.get_service(type_name) is not None

    def has_tag(self, tag: str) -> bool:
        return self.get_service_by_tag(tag) is not None

    def has_service_by_name_pattern(self, substring: str) -> bool:
        return self.get_service_by_name_pattern(substring) is not None

    # ── Lookups ─────────────────────────────────────────────────

    def get_service(self, type_name: str) -> ServiceBinding | None:
        """First binding whose catalog key or label equals ``type_name``."""
        wanted = type_name.lower()
        for binding in self._bindings:
            if wanted in (binding.service_type.lower(), binding.label.lower()):
                return binding
        return None

    def get_service_by_tag(self, tag: str) -> ServiceBinding | None:
        """First binding with a tag containing ``tag``."""
        wanted = tag.lower()
        for binding in self._bindings:
            if any(wanted in t.lower() for t in binding.tags):
                return binding
        return None

    def get_service_by_name_pattern(self, substring: str) -> ServiceBinding | None:
        """First binding whose name contains ``substring``."""
        wanted = substring.lower()
        for binding in self._bindings:
            if wanted in binding.name.lower():
                return binding
        return None

    def find_service(
        self,
        types: Iterable[str] = (),
        tags: Iterable[str] = (),
        names: Iterable[str] = (),
    ) -> ServiceBinding | None:
        """Resolve a binding trying every exact type before any fuzzy match.

        Order: each of ``types`` (exact), then each of ``tags`` (substring),
        then each of ``names`` (substring).
        """
        for type_name in types:
            binding = self.get_service(type_name)
            if binding is not None:
                return binding
        for tag in tags:
            binding = self.get_service_by_tag(tag)
            if binding is not None:
                return binding
        for name in names:
            binding = self.get_service_by_name_pattern(name)
            if binding is not None:
                return binding
        return None


def _parse_bindings(data: dict[str, Any]) -> list[ServiceBinding]:
    """Flatten ``{type: [binding, ...]}`` into bindings, skipping junk entries."""
    bindings: list[ServiceBinding] = []
    for service_type, entries in data.items():
        if not isinstance(entries, list):
            logger.debug("Skipping catalog key %r: not a list", service_type)
            continue
        for entry in entries:
            if not isinstance(entry, dict):
                logger.debug("Skipping non-object binding under %r", service_type)
                continue
            bindings.append(_to_binding(str(service_type), entry))
    return bindings


def _to_binding(service_type: str, entry: dict[str, Any]) -> ServiceBinding:
    raw_tags = entry.get("tags")
    tags = tuple(t for t in raw_tags if isinstance(t, str)) if isinstance(raw_tags, list) else ()

    credentials = entry.get("credentials")
    if not isinstance(credentials, dict):
        credentials = {}

    label = entry.get("label")
    return ServiceBinding(
        name=_as_str(entry.get("name")),
        label=label if isinstance(label, str) and label else service_type,
        service_type=service_type,
        plan=_as_str(entry.get("plan")),
        tags=tags,
        credentials=credentials,
    )


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
