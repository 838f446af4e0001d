"""Configuration schema using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ManifestVariant(str, Enum):
    """Browser extension manifest schema generation."""
    V2 = "v2"
    V3 = "v3"


class SourceConfig(BaseModel):
    """Where the userscript sources come from."""
    repo_url: str = ""  # Git URL cloned fresh on every run
    branch: str | None = None
    clone_dir: str = "source"  # Deleted and re-cloned before each build
    script_file: str = "script.user.js"  # Userscript path relative to the clone
    skip_clone: bool = False  # Use clone_dir as-is (local checkout)
    clone_depth: int = 1


class ManifestConfig(BaseModel):
    """Fixed manifest boilerplate shared by every target."""
    matches: list[str] = Field(default_factory=lambda: ["*://*.pandora.com/*"])
    content_script: str = ""  # Defaults to the basename of source.script_file
    run_at: str = "document_start"
    minimum_chrome_version_v2: str = "88.0.0.0"
    minimum_chrome_version_v3: str = "88.0.0.0"
    # Icon size -> file name inside package.assets_dir
    icons: dict[str, str] = Field(
        default_factory=lambda: {"48": "icon48.png", "128": "icon128.png"}
    )


class GeckoSettings(BaseModel):
    """Firefox `browser_specific_settings.gecko` block."""
    id: str = ""  # Add-on ID, e.g. "name@example.com" (omitted when empty)
    strict_min_version: str = "109.0"  # First Firefox release with MV3 support


class BuildTarget(BaseModel):
    """One package/archive produced per run."""
    name: str
    variant: ManifestVariant = ManifestVariant.V3
    gecko: GeckoSettings | None = None
    additional_properties: dict = Field(default_factory=dict)
    enabled: bool = True

    @field_validator("variant", mode="before")
    @classmethod
    def _normalize_variant(cls, value):
        # Accept "V3", "3" and 3 as well as "v3".
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str):
            value = value.strip().lower()
            if value.isdigit():
                value = "v" + value
        return value


def _default_targets() -> list[BuildTarget]:
    return [
        BuildTarget(name="chrome", variant=ManifestVariant.V3),
        BuildTarget(name="firefox", variant=ManifestVariant.V3, gecko=GeckoSettings()),
        BuildTarget(name="firefox_v2", variant=ManifestVariant.V2),
    ]


class PackageConfig(BaseModel):
    """Package assembly and archive settings."""
    assets_dir: str = "assets"  # Icons copied into <package>/assets
    output_dir: str = "dist"
    package_name: str = ""  # Defaults to the userscript @name
    exclude: list[str] = Field(
        default_factory=lambda: [".git", ".github", ".gitignore", ".gitattributes", "README.md"]
    )
    archiver: str = "zipfile"  # "zipfile" or "7z"
    keep_directories: bool = True  # Leave staging directories next to the archives
    allow_incomplete_metadata: bool = False  # Warn instead of failing on missing tags


class Config(BaseSettings):
    """Root configuration for scriptpack."""

    model_config = SettingsConfigDict(env_prefix="SCRIPTPACK_", env_nested_delimiter="__")

    source: SourceConfig = Field(default_factory=SourceConfig)
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)
    package: PackageConfig = Field(default_factory=PackageConfig)
    targets: list[BuildTarget] = Field(default_factory=_default_targets)

    @model_validator(mode="after")
    def _validate_targets(self) -> "Config":
        if not self.targets:
            raise ValueError("at least one build target is required")
        names = [t.name for t in self.targets]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate target names: {', '.join(duplicates)}")
        if self.package.archiver not in ("zipfile", "7z"):
            raise ValueError(f"unknown archiver '{self.package.archiver}' (expected 'zipfile' or '7z')")
        return self

    @property
    def content_script(self) -> str:
        """File name referenced by content_scripts[0].js."""
        if self.manifest.content_script:
            return self.manifest.content_script
        return self.source.script_file.replace("\\", "/").rsplit("/", 1)[-1]

    def enabled_targets(self) -> list[BuildTarget]:
        return [t for t in self.targets if t.enabled]
