import json

from scriptpack.config.schema import ManifestConfig, ManifestVariant
from scriptpack.manifest import build_manifest, build_manifest_text, render_manifest
from scriptpack.metadata import ScriptMetadata

META = ScriptMetadata(author="A", description="D", name="N", version="1.0")


def test_v2_manifest_fields() -> None:
    text = build_manifest_text(META, ManifestVariant.V2)

    for fragment in ('"author":"A"', '"name":"N"', '"version":"1.0"', '"description":"D"', '"manifest_version":2'):
        assert fragment in text

    doc = json.loads(text)
    assert doc["permissions"] == ["*://*.pandora.com/*"]
    assert doc["browser_action"] == {"default_title": "N"}
    assert doc["minimum_chrome_version"] == "88.0.0.0"
    assert "action" not in doc
    assert "host_permissions" not in doc


def test_v3_manifest_fields() -> None:
    text = build_manifest_text(META, ManifestVariant.V3)

    assert '"manifest_version":3' in text
    assert '"host_permissions":["*://*.pandora.com/*"]' in text
    assert "browser_action" not in text

    doc = json.loads(text)
    assert doc["action"]["default_title"] == "N"
    assert doc["action"]["default_icon"] == {"48": "assets/icon48.png", "128": "assets/icon128.png"}
    assert "permissions" not in doc


def test_both_variants_share_content_scripts_and_icons() -> None:
    for variant in ManifestVariant:
        doc = build_manifest(META, variant, content_script="skipper.user.js")

        assert doc["content_scripts"] == [
            {
                "matches": ["*://*.pandora.com/*"],
                "js": ["skipper.user.js"],
                "run_at": "document_start",
            }
        ]
        assert doc["icons"] == {"48": "assets/icon48.png", "128": "assets/icon128.png"}


def test_name_and_version_are_copied_verbatim() -> None:
    meta = ScriptMetadata(author="A", description="D", name="  My Script v2 ", version="01.002-beta")

    doc = json.loads(build_manifest_text(meta, ManifestVariant.V3))

    assert doc["name"] == "  My Script v2 "
    assert doc["version"] == "01.002-beta"


def test_render_is_ascii_without_trailing_newline() -> None:
    meta = ScriptMetadata(author="Zoë", description="Café ☕", name="N", version="1")

    text = build_manifest_text(meta, ManifestVariant.V3)

    assert text.isascii()
    assert not text.endswith("\n")
    assert json.loads(text)["author"] == "Zoë"


def test_render_preserves_key_order() -> None:
    text = render_manifest(build_manifest(META, ManifestVariant.V3))

    keys = list(json.loads(text).keys())
    assert keys[:5] == ["manifest_version", "name", "version", "description", "author"]
    assert keys.index("action") < keys.index("host_permissions") < keys.index("content_scripts")


def test_custom_settings_are_used() -> None:
    settings = ManifestConfig(
        matches=["https://example.org/*"],
        minimum_chrome_version_v2="87.0.0.0",
        icons={"16": "i16.png"},
    )

    doc = build_manifest(META, ManifestVariant.V2, settings=settings)

    assert doc["permissions"] == ["https://example.org/*"]
    assert doc["minimum_chrome_version"] == "87.0.0.0"
    assert doc["icons"] == {"16": "assets/i16.png"}
