"""Fetching dependencies, keeping the lockfile, and locating dependency entry points."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from azurite.manifest import Manifest

LOCKFILE_NAME = "azurite.lock"


class ResolveError(Exception):
    """Raised when dependencies cannot be resolved or the lockfile cannot be used."""


@dataclass
class LockEntry:
    """One resolved dependency as recorded in the lockfile."""

    name: str
    git: str | None = None
    path: str | None = None
    commit: str | None = None
    rev: str | None = None


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


def _lock_table(table: dict, index: int) -> dict | None:
    dotted = table.get(f"dependency.{index}")
    if isinstance(dotted, dict):
        return dotted
    nested = table.get("dependency")
    if isinstance(nested, dict):
        entry = nested.get(str(index))
        if isinstance(entry, dict):
            return entry
    return None


def _str_or_none(table: dict, key: str) -> str | None:
    value = table.get(key)
    return value if isinstance(value, str) else None


def load_lockfile(project_dir: str | os.PathLike) -> list[LockEntry]:
    """Read the project's lockfile; an absent lockfile yields an empty list."""
    lock_path = Path(project_dir) / LOCKFILE_NAME
    if not lock_path.exists():
        return []
    try:
        content = lock_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ResolveError(f"cannot read {lock_path}: {err}") from err
    try:
        table = tomllib.loads(content)
    except tomllib.TOMLDecodeError as err:
        raise ResolveError(f"invalid azurite.lock: {err}") from err

    entries: list[LockEntry] = []
    index = 0
    while (dep := _lock_table(table, index)) is not None:
        entries.append(
            LockEntry(
                name=_str_or_none(dep, "name") or "",
                git=_str_or_none(dep, "git"),
                path=_str_or_none(dep, "path"),
                commit=_str_or_none(dep, "commit"),
                rev=_str_or_none(dep, "rev"),
            )
        )
        index += 1
    return entries


def save_lockfile(project_dir: str | os.PathLike, entries: list[LockEntry]) -> None:
    """Write the lockfile for the given entries, replacing any existing one."""
    lines = ["# Azurite lockfile"]
    for i, entry in enumerate(entries):
        lines.append("")
        lines.append(f"[dependency.{i}]")
        lines.append(f'name = "{entry.name}"')
        for key in ("git", "path", "commit", "rev"):
            value = getattr(entry, key)
            if value is not None:
                lines.append(f'{key} = "{value}"')
    lock_path = Path(project_dir) / LOCKFILE_NAME
    try:
        lock_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as err:
        raise ResolveError(f"cannot write {lock_path}: {err}") from err


def _run_git(args: list[str], failure: str, cwd: Path | None = None) -> int:
    try:
        return subprocess.run(["git", *args], cwd=cwd).returncode
    except OSError as err:
        raise ResolveError(f"{failure}: {err}") from err


def _compute_commit(cache_path: Path) -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=cache_path,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except OSError as err:
        raise ResolveError(f"git rev-parse failed: {err}") from err
    if result.returncode != 0:
        raise ResolveError("git rev-parse returned non-zero exit")
    return result.stdout.strip()


def _verify_integrity(name: str, cache_path: Path, expected_commit: str) -> None:
    actual = _compute_commit(cache_path)
    if actual != expected_commit:
        raise ResolveError(
            f"integrity check failed for '{name}': expected commit {expected_commit}, "
            f"got {actual}. Run --update to refetch."
        )


def _cache_dir() -> Path:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if home is None:
        raise ResolveError("cannot determine home directory. Set $HOME or %USERPROFILE%.")
    cache = Path(home) / ".azurite" / "cache"
    try:
        cache.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ResolveError(f"cannot create cache directory at {cache}: {err}") from err
    return cache


def _sanitize_name(name: str) -> str:
    return "".join(c if c.isalnum() or c in "-_" else "_" for c in name)


def _fetch_git(
    name: str,
    git_url: str,
    rev: str | None,
    dep_cache: Path,
    expected_commit: str | None,
    force_update: bool,
) -> LockEntry:
    if not dep_cache.exists():
        _warn(f"  fetching {name} from {git_url} ...")
        status = _run_git(
            ["clone", "--depth", "1", git_url, str(dep_cache)], "failed to run git"
        )
        if status != 0:
            shutil.rmtree(dep_cache, ignore_errors=True)
            raise ResolveError(
                f"failed to clone dependency '{name}' from {git_url}.\n"
                "Check that the URL is correct and the repository exists."
            )
    elif force_update:
        _warn(f"  updating {name} ...")
        if _run_git(["fetch", "origin"], "failed to run git fetch", dep_cache) != 0:
            raise ResolveError(f"failed to fetch updates for '{name}'")
        if _run_git(["reset", "--hard", "origin/HEAD"], "failed to reset", dep_cache) != 0:
            raise ResolveError(f"failed to reset '{name}' to origin/HEAD")
    elif expected_commit is not None:
        try:
            _verify_integrity(name, dep_cache, expected_commit)
        except ResolveError as err:
            _warn(f"  warning: {err}")
            _warn("  hint: use --update to refresh dependencies")

    if rev is not None:
        if _run_git(["checkout", rev], "failed to run git checkout", dep_cache) != 0:
            raise ResolveError(
                f"failed to checkout revision '{rev}' for '{name}'. The revision may not exist."
            )

    try:
        commit: str | None = _compute_commit(dep_cache)
    except ResolveError:
        commit = None
    return LockEntry(name=name, git=git_url, commit=commit, rev=rev)


def resolve_dependencies(
    manifest: Manifest,
    project_dir: str | os.PathLike,
    force_update: bool = False,
) -> tuple[dict[str, Path], list[LockEntry]]:
    """Make every dependency available locally and rewrite the lockfile.

    Returns the directory of each dependency by name, and the new lock entries.
    """
    project_dir = Path(project_dir)
    cache_dir = _cache_dir()
    lock = load_lockfile(project_dir)
    dep_map: dict[str, Path] = {}
    lock_entries: list[LockEntry] = []

    for name, dep in manifest.dependencies.items():
        if dep.path is not None:
            resolved = project_dir / dep.path
            if not resolved.exists():
                raise ResolveError(
                    f"dependency '{name}': path '{resolved}' does not exist"
                )
            entry = LockEntry(name=name, path=dep.path)
        elif dep.git is not None:
            resolved = cache_dir / _sanitize_name(name)
            expected_commit = next(
                (e.commit for e in lock if e.name == name), None
            )
            entry = _fetch_git(
                name, dep.git, dep.rev, resolved, expected_commit, force_update
            )
        else:
            raise ResolveError(
                f"dependency '{name}' has no 'git' or 'path' field.\n"
                f'Example: {name} = {{ git = "https://github.com/AzuriteLang/string" }}'
            )
        dep_map[name] = resolved
        lock_entries.append(entry)

    try:
        save_lockfile(project_dir, lock_entries)
    except ResolveError as err:
        _warn(f"  warning: could not save lockfile: {err}")

    return dep_map, lock_entries


def find_dep_entry(dep_path: str | os.PathLike) -> Path:
    """Locate the source file a dependency starts from."""
    dep_path = Path(dep_path)
    candidates = (
        dep_path / "src" / "lib.az",
        dep_path / "main.az",
        dep_path / "src" / "main.az",
    )
    for candidate in candidates:
        if candidate.exists():
            return candidate
    raise ResolveError(
        f"dependency at {dep_path} has no entry point.\n"
        "Expected one of:\n"
        f"- {dep_path}/src/lib.az\n"
        f"- {dep_path}/main.az"
    )