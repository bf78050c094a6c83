"""Reading the ``azurite.toml`` project manifest."""

from __future__ import annotations

from dataclasses import dataclass, field


class ManifestError(ValueError):
    """Raised when a manifest holds a value that cannot be read."""


@dataclass
class Package:
    """The ``[package]`` section of a manifest."""

    name: str = ""
    version: str = ""


@dataclass
class DependencySpec:
    """Where a dependency comes from: a git URL (optionally pinned) or a local path."""

    git: str | None = None
    path: str | None = None
    rev: str | None = None


@dataclass
class Manifest:
    """A parsed manifest: the package and its dependencies in file order."""

    package: Package = field(default_factory=Package)
    dependencies: dict[str, DependencySpec] = field(default_factory=dict)


def _strip_comment(line: str) -> str:
    """Cut a ``#`` comment off a line, leaving ``#`` inside double quotes alone."""
    in_string = False
    prev_was_backslash = False
    for i, ch in enumerate(line):
        if ch == '"' and not prev_was_backslash:
            in_string = not in_string
        prev_was_backslash = ch == "\\" and not prev_was_backslash
        if ch == "#" and not in_string:
            return line[:i]
    return line


def _parse_string(text: str) -> str:
    s = text.strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in "\"'":
        return s[1:-1]
    raise ManifestError(f"expected quoted string, got: {s}")


def _split_inline_table(text: str) -> list[str]:
    """Split the inside of an inline table on commas that are not nested."""
    parts: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(text[start:i].strip())
            start = i + 1
    last = text[start:].strip()
    if last:
        parts.append(last)
    return parts


def _parse_dependency(value: str) -> DependencySpec:
    inner = value.lstrip("{").rstrip("}").strip()
    spec = DependencySpec()
    for part in _split_inline_table(inner):
        key, sep, raw = part.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key in ("git", "path", "rev"):
            setattr(spec, key, _parse_string(raw))
    return spec


def parse_manifest(content: str) -> Manifest:
    """Parse manifest text; raises ManifestError on an unquoted string value."""
    manifest = Manifest()
    section = ""
    for line in content.splitlines():
        trimmed = _strip_comment(line).strip()
        if not trimmed:
            continue
        if trimmed.startswith("["):
            end = trimmed.find("]")
            if end != -1:
                section = trimmed[1:end].strip()
            continue
        key, sep, value = trimmed.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if section == "package":
            if key == "name":
                manifest.package.name = _parse_string(value)
            elif key == "version":
                manifest.package.version = _parse_string(value)
        elif section == "dependencies" and value.startswith("{"):
            manifest.dependencies[key] = _parse_dependency(value)
    return manifest