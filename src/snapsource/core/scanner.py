# src/snapsource/core/scanner.py
import codecs
import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Set, Tuple, Union

from snapsource.config import BINARY_SNIFF_BYTES
from snapsource.core.ignore import IgnoreMatcher
from snapsource.core.transform import transform_content
from snapsource.errors import OperationCancelled
from snapsource.models import FileRecord

logger = logging.getLogger(__name__)

BINARY_PLACEHOLDER = "[Binary file content not included]"

# Longest first: the UTF-32-LE mark starts with the UTF-16-LE one
_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def oversized_placeholder(size: int, limit: int) -> str:
    return (
        f"[File content not included. Size ({size} bytes) "
        f"exceeds the maximum allowed size ({limit} bytes)]"
    )


def read_error_placeholder(e: OSError) -> str:
    if isinstance(e, FileNotFoundError):
        reason = "File not found"
    elif isinstance(e, PermissionError):
        reason = "Permission denied"
    else:
        reason = e.strerror or str(e)
    return f"[Error reading file: {reason}]"


def _is_suspicious(ch: str) -> bool:
    code = ord(ch)
    return code < 7 or 14 < code < 32 or ch == "\ufffd"


def looks_binary(chunk: bytes) -> bool:
    """
    Classifies a leading chunk of a file by its bytes.
    NUL bytes mean binary; otherwise the chunk is binary when more than 10%
    of it is control characters or invalid UTF-8.
    """
    if not chunk:
        return False
    if any(chunk.startswith(bom) for bom, _ in _BOMS):
        return False
    if b"\x00" in chunk:
        return True

    try:
        text = chunk.decode("utf-8")
    except UnicodeDecodeError as e:
        if e.reason == "unexpected end of data":
            # Multi-byte character cut at the chunk boundary
            text = chunk[:e.start].decode("utf-8", errors="replace")
        else:
            text = chunk.decode("utf-8", errors="replace")

    if not text:
        return False
    suspicious = sum(1 for ch in text if _is_suspicious(ch))
    return suspicious * 10 > len(text)


def is_binary_file(path: Path, sniff_bytes: int = BINARY_SNIFF_BYTES) -> bool:
    """Reads the first `sniff_bytes` bytes of the file. OSError propagates."""
    with Path(path).open("rb") as f:
        return looks_binary(f.read(sniff_bytes))


def decode_text(data: bytes) -> str:
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return data.decode(encoding, errors="replace")
    return data.decode("utf-8", errors="replace")


class FileCollector:
    """
    Walks the selected paths and turns every non-ignored file into a
    FileRecord. Unlike the tree, collection has no depth limit.
    """

    def __init__(self, root_dir: Path, matcher: IgnoreMatcher, max_file_size: int,
                 remove_comments: bool = False, compress_code: bool = False):
        self.root_dir = Path(root_dir)
        self.matcher = matcher
        self.max_file_size = max_file_size
        self.remove_comments = remove_comments
        self.compress_code = compress_code

    def _rel_path(self, path: Path) -> str:
        return path.relative_to(self.root_dir).as_posix()

    def collect(self, paths: Iterable[Union[str, Path]],
                cancelled: Optional[Callable[[], bool]] = None) -> List[FileRecord]:
        """
        Records for all selections, in the order they were given.
        `cancelled` is polled before each top-level selection.
        """
        records: List[FileRecord] = []
        for path in paths:
            if cancelled is not None and cancelled():
                raise OperationCancelled()
            records.extend(self.collect_path(Path(path)))
        return records

    def collect_path(self, path: Path) -> Iterator[FileRecord]:
        if path.is_dir():
            yield from self._collect_directory(path, active=set())
        else:
            record = self.collect_file(path)
            if record is not None:
                yield record

    def _collect_directory(self, directory: Path, active: Set[Tuple[int, int]]) -> Iterator[FileRecord]:
        try:
            st = os.stat(directory)
            key = (st.st_dev, st.st_ino)
            if key in active:
                # A link back to a directory we are already inside
                logger.warning("Skipping %s: symlink loop", directory)
                return
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as e:
            logger.warning("Error processing directory %s: %s", directory, e)
            return

        active.add(key)
        try:
            yield from self._walk_entries(entries, active)
        finally:
            active.discard(key)

    def _walk_entries(self, entries, active: Set[Tuple[int, int]]) -> Iterator[FileRecord]:
        for entry in entries:
            entry_path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False

            if self.matcher.matches(self._rel_path(entry_path), is_dir=is_dir):
                continue

            if is_dir:
                yield from self._collect_directory(entry_path, active)
            else:
                record = self.collect_file(entry_path)
                if record is not None:
                    yield record

    def collect_file(self, path: Path) -> Optional[FileRecord]:
        """
        Ignored files yield None. Oversized, binary and unreadable files
        yield a record whose content is a placeholder.
        """
        rel_path = self._rel_path(path)
        if self.matcher.matches(rel_path):
            return None

        try:
            size = path.stat().st_size
            if size > self.max_file_size:
                return FileRecord(rel_path, oversized_placeholder(size, self.max_file_size))

            if is_binary_file(path):
                return FileRecord(rel_path, BINARY_PLACEHOLDER)

            content = decode_text(path.read_bytes())
        except OSError as e:
            logger.warning("Error processing file %s: %s", rel_path, e)
            return FileRecord(rel_path, read_error_placeholder(e))

        if self.remove_comments or self.compress_code:
            content = transform_content(content, self.remove_comments, self.compress_code)
        return FileRecord(rel_path, content)
