"""
Path validation against a fixed base directory.

Every request that touches the filesystem resolves its user-supplied path
through ``PathValidator`` first. Results are never cached: handlers validate
immediately before reading, writing or deleting and perform the operation in
the same call. The gap between the ``stat`` done here and the later ``open``
is a known, accepted race.
"""
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path


class PathError(Exception):
    """Base class for rejected paths."""


class Escapes(PathError):
    pass


class NotFound(PathError):
    pass


class NotAFile(PathError):
    pass


class NotADirectory(PathError):
    pass


class Unreadable(PathError):
    pass


@dataclass(frozen=True)
class ValidatedPath:
    """A canonical path that was a regular file inside the base at check time."""

    path: Path
    relative: str

    @property
    def name(self) -> str:
        return self.path.name

    def stat(self) -> os.stat_result:
        try:
            return self.path.stat()
        except OSError as e:
            raise Unreadable(str(e)) from e

    def read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise Unreadable(str(e)) from e

    def read_text(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise Unreadable(str(e)) from e


class PathValidator:
    def __init__(self, base_dir: Path):
        base = Path(base_dir).resolve(strict=True)
        if not base.is_dir():
            raise NotADirectory(f"{base} is not a directory")
        self.base_dir = base

    def _resolve(self, rel: str) -> Path:
        if "\x00" in rel:
            raise NotFound("null byte in path")

        rel = rel.replace("\\", "/")
        try:
            target = (self.base_dir / rel).resolve()
        except (OSError, RuntimeError) as e:
            # RuntimeError: symlink loop on older interpreters
            raise NotFound(str(e)) from e

        if target != self.base_dir and self.base_dir not in target.parents:
            raise Escapes(rel)
        return target

    def _stat(self, target: Path) -> os.stat_result:
        try:
            return target.stat()
        except OSError as e:
            raise NotFound(str(e)) from e

    def relative_to_base(self, target: Path) -> str:
        rel = target.relative_to(self.base_dir).as_posix()
        return "" if rel == "." else rel

    def validate(self, rel: str) -> ValidatedPath:
        if not rel:
            raise NotFound("empty path")

        target = self._resolve(rel)
        st = self._stat(target)
        if not stat.S_ISREG(st.st_mode):
            raise NotAFile(rel)
        return ValidatedPath(target, self.relative_to_base(target))

    def validate_directory(self, rel: str) -> Path:
        """Like ``validate`` but for directories; an empty path is the base."""
        target = self._resolve(rel or ".")
        st = self._stat(target)
        if not stat.S_ISDIR(st.st_mode):
            raise NotADirectory(rel)
        return target


# ----------------------------
# NEW FILE NAMES
# ----------------------------
_STEM_RE = re.compile(r"[A-Za-z0-9._-]+")


class InvalidFilename(ValueError):
    pass


def normalize_markdown_filename(filename: str) -> str:
    """Turn user input into ``<stem>.md`` or raise InvalidFilename.

    The stem must be git-friendly ASCII: letters, digits, ``-``, ``_`` and
    ``.``, without a leading or trailing dot and without ``..``.
    """
    stem = (filename or "").strip()
    if not stem:
        raise InvalidFilename("Filename is required")

    lower = stem.lower()
    for suffix in (".markdown", ".md"):
        if lower.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    stem = stem.strip()

    if (
        not _STEM_RE.fullmatch(stem)
        or stem.startswith(".")
        or stem.endswith(".")
        or ".." in stem
    ):
        raise InvalidFilename(
            "Filename must use only ASCII letters, numbers, '-', '_', or '.'"
        )
    return f"{stem}.md"
