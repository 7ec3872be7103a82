from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable

from pathspec.gitignore import GitIgnoreSpec

IGNORE_FILE_NAMES = (".ignore", ".gitignore")


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as e:
        logging.getLogger(__name__).debug("Skipping unreadable ignore file %s: %s", path, e)
        return []


class GitIgnoreEngine:
    """
    Git-ignore style matcher that aggregates patterns from:
    - ~/.config/git/ignore (global)
    - Per-directory: .ignore, .gitignore
    - Repo-specific: .git/info/exclude (if present under the root)
    - Extra patterns passed by the caller (e.g. --exclude), evaluated last

    Semantics:
    - Patterns are interpreted using Git's wildmatch rules (via pathspec)
    - Deeper directories override ancestor patterns (last match wins)
    - Negations ("!") are honored
    - Matching is done against paths relative to the configured root
    """

    def __init__(self, root: Path, *, extra: Iterable[str] = (), use_vcs_ignores: bool = True) -> None:
        # Absolute and normalized by the caller; symlinks stay unresolved so relative_to() agrees with the walk.
        self.root = Path(root)
        self.use_vcs_ignores = use_vcs_ignores
        self._dir_spec_cache: dict[Path, GitIgnoreSpec] = {}
        self._global_spec: GitIgnoreSpec | None = self._load_global_spec() if use_vcs_ignores else None
        self._extra_spec = GitIgnoreSpec.from_lines(list(extra))

    def _load_global_spec(self) -> GitIgnoreSpec | None:
        global_path = Path.home() / ".config" / "git" / "ignore"
        lines = _read_lines(global_path)
        if not lines:
            return None
        return GitIgnoreSpec.from_lines(lines)

    @staticmethod
    def _prefixed_lines(lines: list[str], prefix: str) -> list[str]:
        """
        Prefix every non-comment, non-empty pattern line with the directory prefix so
        that patterns are evaluated relative to the engine root while keeping the
        per-file scoping semantics.
        """
        if prefix and not prefix.endswith("/"):
            prefix = prefix + "/"
        out: list[str] = []
        for raw in lines:
            stripped = raw.strip()
            if not stripped or stripped.startswith("#"):
                continue
            negate = stripped.startswith("!")
            body = stripped[1:] if negate else stripped
            if body.startswith("/"):
                body = body[1:]
            elif prefix and "/" not in body.rstrip("/"):
                # Slash-less patterns match at any depth below their own directory.
                body = "**/" + body
            scoped = f"{prefix}{body}" if prefix else body
            out.append(("!" + scoped) if negate else scoped)
        return out

    def _load_dir_spec(self, directory: Path) -> GitIgnoreSpec:
        if directory in self._dir_spec_cache:
            return self._dir_spec_cache[directory]

        if directory != self.root:
            parent_spec = self._load_dir_spec(directory.parent)
            spec = GitIgnoreSpec(list(parent_spec.patterns))
        else:
            spec = self._global_spec or GitIgnoreSpec.from_lines([])

        rel_dir = "" if directory == self.root else directory.relative_to(self.root).as_posix()
        lines_here: list[str] = []
        for name in IGNORE_FILE_NAMES:
            lines_here += self._prefixed_lines(_read_lines(directory / name), rel_dir)
        lines_here += self._prefixed_lines(_read_lines(directory / ".git" / "info" / "exclude"), rel_dir)
        if lines_here:
            spec += GitIgnoreSpec.from_lines(lines_here)

        self._dir_spec_cache[directory] = spec
        return spec

    def is_ignored(self, abs_path: Path, *, is_dir: bool = False) -> bool:
        """Return True if abs_path should be skipped. Paths outside the root are never ignored."""
        abs_path = Path(abs_path)
        try:
            rel = abs_path.relative_to(self.root).as_posix()
        except ValueError:
            return False
        if rel == ".":
            return False
        if is_dir:
            rel += "/"

        if self._extra_spec.match_file(rel):
            return True
        if not self.use_vcs_ignores:
            return False
        # Last matching pattern wins, so a "!" negation re-includes.
        return self._load_dir_spec(abs_path.parent).match_file(rel)


def is_hidden(rel_path: PurePosixPath) -> bool:
    """
    Any dot-prefixed segment makes the path hidden.
    >>> is_hidden(PurePosixPath("a/.cache/b.bin"))
    True
    >>> is_hidden(PurePosixPath("./a/b.bin"))
    False
    """
    return any(part.startswith(".") and part not in (".", "..") for part in rel_path.parts)
