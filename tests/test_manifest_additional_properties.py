import json

import pytest

from scriptpack.config.schema import GeckoSettings, ManifestVariant
from scriptpack.errors import ManifestError
from scriptpack.manifest import build_manifest_text, gecko_properties, parse_additional_properties
from scriptpack.metadata import ScriptMetadata

META = ScriptMetadata(author="A", description="D", name="N", version="1.0")


def test_gecko_block_is_a_top_level_sibling_of_action() -> None:
    extra = gecko_properties(GeckoSettings(id="skipper@example.com", strict_min_version="109.0"))

    text = build_manifest_text(META, ManifestVariant.V3, additional_properties=extra)
    doc = json.loads(text)

    assert "action" in doc
    assert doc["browser_specific_settings"] == {
        "gecko": {"id": "skipper@example.com", "strict_min_version": "109.0"}
    }
    assert list(doc)[-1] == "browser_specific_settings"
    assert text.count("{") == text.count("}")


def test_gecko_block_omits_empty_id() -> None:
    assert gecko_properties(GeckoSettings()) == {
        "browser_specific_settings": {"gecko": {"strict_min_version": "109.0"}}
    }


@pytest.mark.parametrize("variant", list(ManifestVariant))
@pytest.mark.parametrize("extra", [None, {}, {"homepage_url": "https://example.com"}])
def test_every_variant_renders_valid_json(variant, extra) -> None:
    doc = json.loads(build_manifest_text(META, variant, additional_properties=extra))

    assert doc["name"] == "N"


def test_conflicting_additional_property_is_rejected() -> None:
    with pytest.raises(ManifestError):
        build_manifest_text(META, ManifestVariant.V3, additional_properties={"action": {}})


def test_parse_additional_properties_accepts_bare_members() -> None:
    text = '"browser_specific_settings": {"gecko": {"id": "x@y"}}'

    assert parse_additional_properties(text) == {"browser_specific_settings": {"gecko": {"id": "x@y"}}}


def test_parse_additional_properties_accepts_object_and_empty() -> None:
    assert parse_additional_properties('{"a": 1}') == {"a": 1}
    assert parse_additional_properties("   ") == {}


@pytest.mark.parametrize("bad", ['"a": ', '{"a": 1}}', "[1, 2]"])
def test_parse_additional_properties_rejects_malformed(bad) -> None:
    with pytest.raises(ManifestError):
        parse_additional_properties(bad)
