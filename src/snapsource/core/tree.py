# src/snapsource/core/tree.py
import errno
import logging
import os
import stat
from pathlib import Path
from typing import Iterator, Set, Tuple

from snapsource.core.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_PREFIX = "│   "
SPACE_PREFIX = "    "


def _error_code(e: OSError) -> str:
    if e.errno is not None:
        return errno.errorcode.get(e.errno, "unknown")
    return "unknown"


def _is_dir_entry(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def iter_tree_lines(root_dir: Path, matcher: IgnoreMatcher, max_depth: int) -> Iterator[str]:
    """
    Yields the lines of the project tree (each ending in a newline),
    depth-first and pre-order. Depth 0 is the root's direct children.
    """
    root_dir = Path(root_dir)
    try:
        root_stat = os.stat(root_dir)
        active = {(root_stat.st_dev, root_stat.st_ino)}
    except OSError:
        active = set()
    yield from _walk(root_dir, root_dir, matcher, max_depth, 0, "", active)


def _walk(directory: Path, root_dir: Path, matcher: IgnoreMatcher, max_depth: int,
          depth: int, prefix: str, active: Set[Tuple[int, int]]) -> Iterator[str]:
    if depth > max_depth:
        return

    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        logger.warning("Error reading directory %s: %s", directory, e)
        yield f"{prefix}(error: {_error_code(e)})\n"
        return

    if not entries:
        yield f"{prefix}(empty directory)\n"
        return

    # Ignore rules are always evaluated against the path from the root
    visible = [
        entry for entry in entries
        if not matcher.matches(Path(entry.path).relative_to(root_dir), is_dir=_is_dir_entry(entry))
    ]
    if not visible:
        yield f"{prefix}(all files ignored)\n"
        return

    for i, entry in enumerate(visible):
        try:
            st = os.stat(entry.path)
        except PermissionError:
            yield f"{prefix}{entry.name} (access denied)\n"
            continue
        except OSError as e:
            logger.warning("Error reading %s: %s", entry.path, e)
            yield f"{prefix}{entry.name} (error reading)\n"
            continue

        is_last = i == len(visible) - 1
        yield f"{prefix}{LAST_BRANCH if is_last else BRANCH}{entry.name}\n"

        if stat.S_ISDIR(st.st_mode):
            child_prefix = prefix + (SPACE_PREFIX if is_last else PIPE_PREFIX)
            key = (st.st_dev, st.st_ino)
            if key in active:
                # A link back to a directory we are already inside
                if depth + 1 <= max_depth:
                    yield f"{child_prefix}(symlink loop)\n"
                continue
            active.add(key)
            try:
                yield from _walk(Path(entry.path), root_dir, matcher, max_depth, depth + 1, child_prefix, active)
            finally:
                active.discard(key)


def render_tree(root_dir: Path, matcher: IgnoreMatcher, max_depth: int) -> str:
    """Renders the ASCII tree of root_dir, honoring the ignore rules and the depth limit."""
    return "".join(iter_tree_lines(root_dir, matcher, max_depth))
