"""Error types raised by the packaging pipeline.

Every error is fatal for a run: nothing is retried, and a failed stage
never leaves a half-written package behind.
"""


class PackagingError(Exception):
    """Base class for all packaging failures."""


class ConfigError(PackagingError):
    """Configuration file is unreadable or does not match the schema."""


class FetchError(PackagingError):
    """Source repository could not be cloned."""


class MetadataMissingError(PackagingError):
    """One or more required userscript header tags are absent."""

    def __init__(self, missing: list[str], source: str | None = None):
        self.missing = list(missing)
        self.source = source
        where = f" in {source}" if source else ""
        tags = ", ".join(f"@{tag}" for tag in self.missing)
        super().__init__(f"Missing userscript metadata{where}: {tags}")


class ManifestError(PackagingError):
    """Manifest document could not be built from the given inputs."""


class FilesystemError(PackagingError):
    """Directory creation, copy, or write failed."""


class ArchiveError(PackagingError):
    """Compression step failed or the archiver is unavailable."""
