"""Template catalog served over HTTP."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Iterable, List

import requests
from jsonschema import Draft202012Validator

from scaffoldkit.domain.errors import CatalogError
from scaffoldkit.domain.template import TemplateDescriptor
from scaffoldkit.ports.registry import TemplateRegistry

_SCHEMA_RESOURCE = "template_catalog.schema.json"
_SCHEMA_PACKAGE = "scaffoldkit.resources"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def entry_errors(entry: Any) -> list[str]:
    """Return schema messages for a catalog entry (empty when valid)."""
    return [error.message for error in _validator().iter_errors(entry)]


class HTTPTemplateRegistry(TemplateRegistry):
    def __init__(
        self,
        url: str | None,
        session: requests.Session | None = None,
        *,
        timeout: float = 5.0,
    ) -> None:
        self._url = url
        self._session = session or requests.Session()
        self._timeout = timeout
        self.rejected: list[tuple[Any, list[str]]] = []

    def fetch_templates(self) -> List[TemplateDescriptor]:
        if not self._url:
            raise CatalogError(
                "template catalog URL not configured; set SCAFFOLDKIT_CATALOG_URL "
                "or catalog_url in config.yaml"
            )
        try:
            response = self._session.get(self._url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise CatalogError(f"template catalog request failed: {exc}") from exc
        if response.status_code >= 400:
            raise CatalogError(f"template catalog request failed: {response.status_code} {response.text}")
        try:
            body = response.json()
        except ValueError as exc:
            raise CatalogError(f"template catalog returned invalid JSON: {exc}") from exc
        templates = self._normalise(_extract_list(body))
        if not templates:
            raise CatalogError("no templates available in catalog")
        return templates

    def _normalise(self, entries: Iterable[Any]) -> List[TemplateDescriptor]:
        self.rejected = []
        templates: List[TemplateDescriptor] = []
        for entry in entries:
            problems = entry_errors(entry)
            if problems:
                self.rejected.append((entry, problems))
                continue
            templates.append(TemplateDescriptor.from_catalog_entry(entry))
        return templates


def _extract_list(body: Any) -> list[Any]:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        items = body.get("list")
        if items is None and isinstance(body.get("data"), dict):
            items = body["data"].get("list")
        if isinstance(items, list):
            return items
    return []


__all__ = ["HTTPTemplateRegistry", "entry_errors"]
