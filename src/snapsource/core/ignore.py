# src/snapsource/core/ignore.py
import logging
from pathlib import Path, PurePath
from typing import Iterable, Iterator, List, Optional, Union

import pathspec

from snapsource.config import DOTFILE_PATTERN

logger = logging.getLogger(__name__)

PathLike = Union[str, PurePath]


def read_gitignore(root_dir: Path) -> Optional[str]:
    """
    Returns the text of <root_dir>/.gitignore, or None when it is missing or
    unreadable. Never raises: a bad ignore file must not abort a run.
    """
    gitignore_file = Path(root_dir) / ".gitignore"
    try:
        return gitignore_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(".gitignore not found or not readable: %s", e)
        return None


def normalize_rel_path(path: PathLike, root_dir: Optional[Path] = None) -> str:
    """Root-relative, forward-slash form of `path`, without leading './' or trailing '/'."""
    if isinstance(path, PurePath):
        if root_dir is not None and path.is_absolute():
            path = path.relative_to(root_dir)
        rel = path.as_posix()
    else:
        rel = str(path).replace("\\", "/")
        if root_dir is not None and Path(rel).is_absolute():
            rel = Path(rel).relative_to(root_dir).as_posix()

    while rel.startswith("./"):
        rel = rel[2:]
    rel = rel.rstrip("/")
    return "" if rel == "." else rel


def _valid_lines(lines: Iterable[str]) -> Iterator[str]:
    """Drops lines pathspec cannot compile; the rest of the rule set still applies."""
    for line in lines:
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except ValueError as e:
            logger.warning("Skipping invalid ignore pattern %r: %s", line, e)
            continue
        yield line


class IgnoreMatcher:
    """
    Gitignore-style predicate over root-relative paths.
    Rules are evaluated in order; the last matching rule wins and `!` rules
    re-include. The dot-file rule is always part of the set.
    """

    def __init__(self, patterns: Iterable[str], root_dir: Optional[Path] = None):
        self._patterns = tuple(_valid_lines(patterns))
        self._root_dir = root_dir
        self._spec = pathspec.GitIgnoreSpec.from_lines(self._patterns)

    @classmethod
    def build(cls, explicit_patterns: Iterable[str], gitignore_content: Optional[str] = None,
              root_dir: Optional[Path] = None) -> "IgnoreMatcher":
        lines: List[str] = list(explicit_patterns)
        lines.append(DOTFILE_PATTERN)
        if gitignore_content:
            lines.extend(gitignore_content.splitlines())
        return cls(lines, root_dir=root_dir)

    @classmethod
    def for_root(cls, root_dir: Path, exclude_patterns: Iterable[str], use_gitignore: bool) -> "IgnoreMatcher":
        gitignore_content = read_gitignore(root_dir) if use_gitignore else None
        return cls.build(exclude_patterns, gitignore_content, root_dir=Path(root_dir))

    @property
    def patterns(self):
        return self._patterns

    def matches(self, rel_path: PathLike, is_dir: bool = False) -> bool:
        """
        True if the path is ignored. Directories are tested with a trailing
        slash so that `build/`-style rules apply to them.
        """
        rel = normalize_rel_path(rel_path, self._root_dir)
        if not rel:
            return False
        if is_dir:
            rel += "/"
        return self._spec.match_file(rel)
