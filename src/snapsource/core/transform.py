# src/snapsource/core/transform.py
"""
Text transforms applied to file contents before formatting.

Comment removal is a lexical heuristic, not a parser: it knows nothing about
string literals, so `//` inside a URL or `/*` inside a regex literal is
stripped as well. Content containing such sequences can be damaged when
remove_comments is enabled.
"""
import re

# `// ...` to end of line, or `/* ... */` across lines (non-greedy)
COMMENT_PATTERN = re.compile(r"//.*|/\*[\s\S]*?\*/")


def remove_code_comments(content: str) -> str:
    return COMMENT_PATTERN.sub("", content)


def compress_code_content(content: str) -> str:
    """Trims every line and drops the ones left empty."""
    return "\n".join(line.strip() for line in content.split("\n") if line.strip())


def transform_content(content: str, remove_comments: bool = False, compress_code: bool = False) -> str:
    """Comment removal always runs before compression."""
    if remove_comments:
        content = remove_code_comments(content)
    if compress_code:
        content = compress_code_content(content)
    return content
