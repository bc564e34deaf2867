# src/snapsource/core/formatter.py
"""
Output encoders. Each format is an independent pure function over the tree
text and the collected records; `format_output` only dispatches.
"""
import re
from typing import Callable, Dict, Sequence, Union

from snapsource.models import FileRecord, OutputFormat

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
XML_ROOT_TAG = "snapsource"

_XML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
    "\u00a0": "&#160;",
    "\u2028": "&#8232;",
    "\u2029": "&#8233;",
}
_XML_ESCAPE_TABLE = str.maketrans(_XML_ENTITIES)

# Characters XML 1.0 does not allow anywhere, not even in CDATA
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _replace_illegal(text: str) -> str:
    return _XML_ILLEGAL.sub("\ufffd", text)


def escape_xml(value) -> str:
    """Escapes the five XML specials plus NBSP and the Unicode line/paragraph separators."""
    if value is None:
        return ""
    return _replace_illegal(str(value)).translate(_XML_ESCAPE_TABLE)


def escape_cdata(content: str) -> str:
    """
    Splits every `]]>` so it cannot close the surrounding CDATA section.
    Control characters XML cannot carry become U+FFFD.
    """
    return _replace_illegal(content).replace("]]>", "]]]]><![CDATA[>")


def language_tag(path: str) -> str:
    """Extension of the file name without the dot, or "" when there is none."""
    name = path.rsplit("/", 1)[-1]
    stem, dot, ext = name.rpartition(".")
    # Dot-files such as `.env` have no extension
    if not dot or not stem:
        return ""
    return ext


def format_plaintext(tree: str, records: Sequence[FileRecord]) -> str:
    parts = []
    if tree:
        parts.append(f"Project Structure:\n\n{tree}\n\n")
    parts.append("File Contents:\n\n")
    for record in records:
        parts.append(f"File: {record.rel_path}\n\n{record.content}\n\n")
    return "".join(parts)


def format_markdown(tree: str, records: Sequence[FileRecord]) -> str:
    parts = []
    if tree:
        parts.append(f"# Project Structure\n\n```\n{tree}```\n\n")
    parts.append("# File Contents\n\n")
    for record in records:
        lang = language_tag(record.rel_path)
        parts.append(f"## {record.rel_path}\n\n```{lang}\n{record.content}\n```\n\n")
    return "".join(parts)


def _xml_structure_block(tree: str) -> str:
    lines = "\n".join("    " + escape_xml(line) for line in tree.split("\n"))
    return f"  <project_structure>\n{lines}\n  </project_structure>\n"


def format_xml(tree: str, records: Sequence[FileRecord]) -> str:
    parts = [f"{XML_DECLARATION}\n<{XML_ROOT_TAG}>\n"]
    if tree:
        parts.append(_xml_structure_block(tree) + "\n")
    parts.append("  <file_contents>\n")
    for record in records:
        parts.append(f'    <file path="{escape_xml(record.rel_path)}">\n')
        parts.append(f"      <![CDATA[{escape_cdata(record.content)}]]>\n")
        parts.append("    </file>\n")
    parts.append("  </file_contents>\n")
    parts.append(f"</{XML_ROOT_TAG}>")
    return "".join(parts)


_FORMATTERS: Dict[OutputFormat, Callable[[str, Sequence[FileRecord]], str]] = {
    OutputFormat.PLAINTEXT: format_plaintext,
    OutputFormat.MARKDOWN: format_markdown,
    OutputFormat.XML: format_xml,
}


def format_output(kind: Union[OutputFormat, str], tree: str, records: Sequence[FileRecord]) -> str:
    """Unknown kinds are rendered as plaintext."""
    return _FORMATTERS[OutputFormat.parse(kind)](tree, records)


def format_project_structure(kind: Union[OutputFormat, str], tree: str) -> str:
    """The tree on its own, without a file-contents section."""
    kind = OutputFormat.parse(kind)
    if kind is OutputFormat.MARKDOWN:
        return f"# Project Structure\n\n```\n{tree}```\n"
    if kind is OutputFormat.XML:
        return f"{XML_DECLARATION}\n<{XML_ROOT_TAG}>\n{_xml_structure_block(tree)}</{XML_ROOT_TAG}>"
    return f"Project Structure:\n\n{tree}\n"
