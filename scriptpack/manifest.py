"""Browser extension manifest generation (Manifest V2 and V3)."""

import json
from typing import Any

from scriptpack.config.schema import GeckoSettings, ManifestConfig, ManifestVariant
from scriptpack.errors import ManifestError
from scriptpack.metadata import ScriptMetadata

ASSETS_DIRNAME = "assets"


def _icon_paths(settings: ManifestConfig) -> dict[str, str]:
    return {size: f"{ASSETS_DIRNAME}/{filename}" for size, filename in settings.icons.items()}


def _content_scripts(settings: ManifestConfig, content_script: str) -> list[dict[str, Any]]:
    return [
        {
            "matches": list(settings.matches),
            "js": [content_script],
            "run_at": settings.run_at,
        }
    ]


def build_manifest(
    metadata: ScriptMetadata,
    variant: ManifestVariant,
    settings: ManifestConfig | None = None,
    additional_properties: dict[str, Any] | None = None,
    content_script: str = "script.user.js",
) -> dict[str, Any]:
    """
    Build the manifest document for one variant.

    Args:
        metadata: Userscript metadata; name and version are copied verbatim.
        variant: Manifest schema generation.
        settings: Fixed boilerplate (match patterns, icons, version floors).
        additional_properties: Extra top-level keys appended after the generated ones.
        content_script: File name listed in content_scripts[0].js.

    Returns:
        An ordered dict ready for render_manifest().

    Raises:
        ManifestError: An additional property would overwrite a generated key.
    """
    settings = settings or ManifestConfig()
    variant = ManifestVariant(variant)
    icons = _icon_paths(settings)

    doc: dict[str, Any] = {
        "manifest_version": 3 if variant is ManifestVariant.V3 else 2,
        "name": metadata.name,
        "version": metadata.version,
        "description": metadata.description,
        "author": metadata.author,
    }

    if variant is ManifestVariant.V3:
        doc["action"] = {"default_title": metadata.name, "default_icon": dict(icons)}
        doc["host_permissions"] = list(settings.matches)
        doc["minimum_chrome_version"] = settings.minimum_chrome_version_v3
    else:
        doc["browser_action"] = {"default_title": metadata.name}
        doc["permissions"] = list(settings.matches)
        doc["minimum_chrome_version"] = settings.minimum_chrome_version_v2

    doc["icons"] = icons
    doc["content_scripts"] = _content_scripts(settings, content_script)

    for key, value in (additional_properties or {}).items():
        if key in doc:
            raise ManifestError(f"Additional property '{key}' conflicts with a generated manifest key")
        doc[key] = value

    return doc


def gecko_properties(gecko: GeckoSettings) -> dict[str, Any]:
    """Firefox compatibility block merged into Firefox-targeted manifests."""
    block: dict[str, str] = {}
    if gecko.id:
        block["id"] = gecko.id
    if gecko.strict_min_version:
        block["strict_min_version"] = gecko.strict_min_version
    return {"browser_specific_settings": {"gecko": block}}


def parse_additional_properties(text: str) -> dict[str, Any]:
    """
    Parse a raw JSON fragment of extra manifest keys.

    Accepts a full object (`{"key": ...}`) or bare members (`"key": ...`),
    the latter being how fragments are written when spliced into a template.
    """
    t = (text or "").strip().rstrip(",").strip()
    if t == "":
        return {}
    if not t.startswith("{"):
        t = "{" + t + "}"
    try:
        obj = json.loads(t)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Additional properties are not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ManifestError("Additional properties must be a JSON object")
    return obj


def render_manifest(document: dict[str, Any]) -> str:
    """Serialize a manifest as ASCII-only compact JSON with no trailing newline."""
    return json.dumps(document, ensure_ascii=True, separators=(",", ":"))


def build_manifest_text(
    metadata: ScriptMetadata,
    variant: ManifestVariant,
    settings: ManifestConfig | None = None,
    additional_properties: dict[str, Any] | None = None,
    content_script: str = "script.user.js",
) -> str:
    doc = build_manifest(
        metadata,
        variant,
        settings=settings,
        additional_properties=additional_properties,
        content_script=content_script,
    )
    return render_manifest(doc)
