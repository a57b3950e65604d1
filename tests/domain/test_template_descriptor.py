from __future__ import annotations

import pytest

from scaffoldkit.domain.errors import TemplateConfigError
from scaffoldkit.domain.template import TemplateDescriptor, TemplateKind


def test_from_catalog_entry_maps_fields() -> None:
    descriptor = TemplateDescriptor.from_catalog_entry(
        {
            "npmName": "tpl-widget",
            "name": "Widget",
            "version": "1.2.0",
            "tag": ["component"],
            "type": "normal",
            "ignore": ["**/assets/**"],
            "buildPath": "dist",
            "examplePath": "examples",
            "owner": "ui-team",
        }
    )
    assert descriptor.package_id == "tpl-widget"
    assert descriptor.tags == ("component",)
    assert descriptor.ignore == ("**/assets/**",)
    assert descriptor.kind is TemplateKind.NORMAL
    assert descriptor.has_tag("component")
    assert descriptor.extra == {"owner": "ui-team"}
    payload = descriptor.to_payload()
    assert payload["npmName"] == "tpl-widget"
    assert payload["buildPath"] == "dist"
    assert payload["owner"] == "ui-team"


def test_single_string_tag_and_default_type() -> None:
    descriptor = TemplateDescriptor.from_catalog_entry({"npmName": "tpl", "version": "1.0.0", "tag": "project"})
    assert descriptor.tags == ("project",)
    assert descriptor.name == "tpl"
    assert descriptor.kind is TemplateKind.NORMAL


def test_unknown_type_is_a_configuration_error() -> None:
    descriptor = TemplateDescriptor.from_catalog_entry(
        {"npmName": "tpl", "version": "1.0.0", "tag": ["project"], "type": "magic"}
    )
    with pytest.raises(TemplateConfigError, match="unknown template type"):
        _ = descriptor.kind
