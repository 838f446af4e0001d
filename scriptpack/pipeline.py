"""End-to-end packaging run: fetch, extract, build manifests, assemble, archive."""

import re
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from scriptpack.archive import get_archiver
from scriptpack.assembler import PackageDescriptor, assemble_package, clean_directory
from scriptpack.config.schema import BuildTarget, Config
from scriptpack.errors import ConfigError, FilesystemError, ManifestError, MetadataMissingError
from scriptpack.fetch import clone_repository
from scriptpack.manifest import build_manifest_text, gecko_properties
from scriptpack.metadata import ScriptMetadata, extract_metadata, require_complete


@dataclass
class BuildResult:
    """Outcome of packaging one target."""

    target: str
    directory: Path
    archive: Path
    manifest_text: str


def package_basename(metadata: ScriptMetadata, config: Config) -> str:
    """Base name for package directories and archives."""
    raw = config.package.package_name or metadata.name or "extension"
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", raw).strip("_")
    return name or "extension"


def select_targets(config: Config, names: list[str] | None = None) -> list[BuildTarget]:
    """Enabled targets, optionally filtered by name."""
    if not names:
        return config.enabled_targets()
    by_name = {t.name: t for t in config.targets}
    unknown = [n for n in names if n not in by_name]
    if unknown:
        raise ConfigError(
            f"Unknown target(s): {', '.join(unknown)} (configured: {', '.join(by_name)})"
        )
    return [by_name[n] for n in names]


def target_properties(target: BuildTarget) -> dict:
    """Extra top-level manifest keys for a target."""
    props: dict = {}
    if target.gecko is not None:
        props.update(gecko_properties(target.gecko))
    overlap = sorted(set(props) & set(target.additional_properties))
    if overlap:
        raise ManifestError(
            f"Target '{target.name}' sets {', '.join(overlap)} in both gecko and additionalProperties"
        )
    props.update(target.additional_properties)
    return props


def output_excludes(config: Config, base: str, source: Path, output_dir: Path) -> list[str]:
    """Names to skip so build outputs never get copied into a package."""
    out_resolved, src_resolved = output_dir.resolve(), source.resolve()
    if out_resolved == src_resolved:
        # Building in place: skip every target's staging directory and archive.
        names: list[str] = []
        for t in config.targets:
            names += [f"{base}_{t.name}", f"{base}_{t.name}.zip"]
        return names
    if src_resolved in out_resolved.parents:
        return [out_resolved.relative_to(src_resolved).parts[0]]
    return []


def prepare_source(config: Config, source_dir: Path | None = None) -> Path:
    """Return the source checkout, re-cloning it unless a local copy is requested."""
    if source_dir is not None:
        path = Path(source_dir)
    elif config.source.skip_clone:
        path = Path(config.source.clone_dir)
    else:
        return clone_repository(
            config.source.repo_url,
            Path(config.source.clone_dir),
            branch=config.source.branch,
            depth=config.source.clone_depth,
        )
    if not path.is_dir():
        raise FilesystemError(f"Source directory not found: {path}")
    logger.info(f"Using local source {path}")
    return path


def load_metadata(config: Config, source: Path) -> ScriptMetadata:
    script_path = source / config.source.script_file
    metadata = extract_metadata(script_path)
    try:
        require_complete(metadata, source=str(script_path))
    except MetadataMissingError as e:
        if not config.package.allow_incomplete_metadata:
            raise
        logger.warning(f"{e}; continuing because allowIncompleteMetadata is set")
    return metadata


def build_target(
    config: Config,
    target: BuildTarget,
    metadata: ScriptMetadata,
    source: Path,
    output_dir: Path,
) -> BuildResult:
    """Assemble and archive one target."""
    base = package_basename(metadata, config)
    directory = output_dir / f"{base}_{target.name}"
    archive_path = output_dir / f"{base}_{target.name}.zip"

    manifest_text = build_manifest_text(
        metadata,
        target.variant,
        settings=config.manifest,
        additional_properties=target_properties(target),
        content_script=config.content_script,
    )

    assets_dir = Path(config.package.assets_dir)
    descriptor = PackageDescriptor(
        directory=directory,
        manifest_text=manifest_text,
        assets=[assets_dir / filename for filename in config.manifest.icons.values()],
    )

    excludes = list(config.package.exclude) + output_excludes(config, base, source, output_dir)

    logger.info(f"Building target '{target.name}' ({target.variant.value}) -> {directory}")
    clean_directory(directory)
    assemble_package(descriptor, source, excludes=excludes)
    get_archiver(config.package.archiver).create(directory, archive_path)

    if not config.package.keep_directories:
        clean_directory(directory)

    return BuildResult(
        target=target.name,
        directory=directory,
        archive=archive_path,
        manifest_text=manifest_text,
    )


def run_build(
    config: Config,
    source_dir: Path | None = None,
    targets: list[str] | None = None,
) -> list[BuildResult]:
    """
    Run the full packaging pipeline.

    Args:
        config: Loaded configuration.
        source_dir: Use this checkout instead of cloning source.repoUrl.
        targets: Build only these target names (default: all enabled targets).

    Returns:
        One BuildResult per built target, in configuration order.
    """
    selected = select_targets(config, targets)
    source = prepare_source(config, source_dir)
    metadata = load_metadata(config, source)
    logger.info(f"Packaging {metadata.name or '<unnamed>'} v{metadata.version or '?'}")

    output_dir = Path(config.package.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create output directory {output_dir}: {e}") from e

    results = [build_target(config, t, metadata, source, output_dir) for t in selected]
    logger.info(f"Built {len(results)} package(s) in {output_dir}")
    return results
