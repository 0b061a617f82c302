"""Diff partitioner: stage changed files and split out legacy code."""

import asyncio
import shutil
from pathlib import Path
from typing import FrozenSet, Iterable, List, Union

from ..config import CIContext, PrepareConfig
from ..errors import FileMoveError
from ..models import FileMoveRecord, PrepareResult
from ..tools import list_changed_files, resolve_commit_range
from ..utils import get_logger, log_group


PathLike = Union[str, Path]


def filter_source_paths(paths: Iterable[str], marker: str = "force-app") -> List[str]:
    """Keep the paths that contain the application-source identifier."""
    return [p for p in paths if marker in p]


def load_legacy_manifest(path: PathLike) -> FrozenSet[str]:
    """
    Load the legacy manifest.

    One repository-relative path per line; blank lines and ``#`` comments
    are ignored. A missing manifest means no file is legacy.
    """
    manifest = Path(path)
    if not manifest.exists():
        get_logger().warning(f"Legacy manifest {manifest} not found; treating no files as legacy")
        return frozenset()

    entries = set()
    for line in manifest.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            entries.add(line)
    return frozenset(entries)


def copy_files(paths: Iterable[str], destination: PathLike, root: PathLike = ".") -> List[str]:
    """
    Copy files into a staging directory, mirroring their relative paths.

    Args:
        paths: Repository-relative paths
        destination: Staging directory
        root: Directory the paths are relative to

    Returns:
        Destination paths of the copied files
    """
    logger = get_logger()
    destination = Path(destination)
    root = Path(root)
    destination.mkdir(parents=True, exist_ok=True)

    copied = []
    for rel_path in paths:
        source = root / rel_path
        if not source.is_file():
            logger.warning(f"Skipping {rel_path}: not present in the working tree")
            continue
        target = destination / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        copied.append(str(target))

    return copied


def partition_legacy(
    paths: Iterable[str],
    manifest: FrozenSet[str],
    legacy_dir: PathLike,
    root: PathLike = ".",
) -> List[str]:
    """
    Move legacy files out of ``root`` into the legacy staging directory.

    Only paths listed in the manifest move; the rest stay in place for the
    normal scan. The first failed move aborts the whole step.

    Args:
        paths: Repository-relative paths to consider
        manifest: Paths classified as legacy
        legacy_dir: Legacy staging directory
        root: Directory the paths currently live under

    Returns:
        New paths of the moved files, in input order

    Raises:
        FileMoveError: A move failed
    """
    logger = get_logger()
    legacy_dir = Path(legacy_dir)
    root = Path(root)

    moved = []
    for rel_path in paths:
        if rel_path not in manifest:
            continue

        source = root / rel_path
        target = legacy_dir / rel_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise FileMoveError(str(source), str(target), str(e)) from e

        move = FileMoveRecord(source=str(source), destination=str(target))
        logger.info(f"Moved legacy file {move}")
        moved.append(move.destination)

    return moved


def list_staged_files(directory: PathLike) -> List[str]:
    """List files under a staging directory, relative and sorted."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        str(p.relative_to(directory))
        for p in directory.rglob("*")
        if p.is_file()
    )


async def run_prepare(
    config: PrepareConfig,
    ctx: CIContext,
) -> PrepareResult:
    """
    Run the diff partitioner.

    Args:
        config: Partitioner configuration
        ctx: CI environment snapshot

    Returns:
        PrepareResult describing staged and moved files
    """
    logger = get_logger()
    work_dir = Path(config.work_dir)

    commit_range = await resolve_commit_range(
        ctx,
        policy=config.non_pr_policy,
        remote=config.remote,
        cwd=work_dir,
    )
    if commit_range is None:
        return PrepareResult(commit_range=None, skipped=True)

    modified, added = await asyncio.gather(
        list_changed_files(commit_range, config.modified_filter, cwd=work_dir),
        list_changed_files(commit_range, config.added_filter, cwd=work_dir),
    )
    modified = filter_source_paths(modified, config.source_marker)
    added = filter_source_paths(added, config.source_marker)
    logger.info(f"{len(modified)} modified and {len(added)} new files under {config.source_marker}")

    manifest = load_legacy_manifest(work_dir / config.manifest_path)

    modified_dir = work_dir / config.modified_dir
    new_dir = work_dir / config.new_dir
    legacy_dir = work_dir / config.legacy_dir

    copy_files(modified, modified_dir, root=work_dir)
    copy_files(added, new_dir, root=work_dir)
    modified = [p for p in modified if (modified_dir / p).is_file()]
    added = [p for p in added if (new_dir / p).is_file()]

    # Legacy files leave the staging copies, never the checkout itself
    legacy = partition_legacy(modified, manifest, legacy_dir, root=modified_dir)
    legacy += partition_legacy(added, manifest, legacy_dir, root=new_dir)

    result = PrepareResult(
        commit_range=commit_range,
        modified_files=list_staged_files(modified_dir),
        new_files=list_staged_files(new_dir),
        legacy_files=legacy,
    )

    for title, files in (
        ("MODIFIED FILES", result.modified_files),
        ("NEW FILES", result.new_files),
        ("LEGACY FILES", list_staged_files(legacy_dir)),
    ):
        with log_group(title):
            for f in files:
                logger.info(f"  {f}")

    logger.info("File processing complete.")
    return result
