# src/snapsource/models.py
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from snapsource.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_LLM_MODEL,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_OUTPUT_FORMAT,
)
from snapsource.errors import ConfigurationError


class OutputFormat(str, Enum):
    PLAINTEXT = "plaintext"
    MARKDOWN = "markdown"
    XML = "xml"

    @classmethod
    def parse(cls, value) -> "OutputFormat":
        """Unknown names fall back to plaintext."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.PLAINTEXT


@dataclass(frozen=True)
class FileRecord:
    """Immutable data class holding one collected file."""
    rel_path: str
    content: str


# Settings keys as a host editor stores them
_SETTING_KEYS = {
    "ignoreGitIgnore": "ignore_gitignore",
    "maxDepth": "max_depth",
    "excludePatterns": "exclude_patterns",
    "outputFormat": "output_format",
    "maxFileSize": "max_file_size",
    "compressCode": "compress_code",
    "removeComments": "remove_comments",
    "includeProjectTree": "include_project_tree",
    "llmModel": "llm_model",
    "maxTokens": "max_tokens",
    "enableTokenWarning": "enable_token_warning",
    "enableTokenCounting": "enable_token_counting",
}


@dataclass(frozen=True)
class Configuration:
    """Snapshot of the options for a single run. Never mutated by the core."""
    ignore_gitignore: bool = True
    max_depth: int = DEFAULT_MAX_DEPTH
    exclude_patterns: Tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    output_format: OutputFormat = OutputFormat(DEFAULT_OUTPUT_FORMAT)
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    compress_code: bool = False
    remove_comments: bool = False
    include_project_tree: bool = True
    llm_model: str = DEFAULT_LLM_MODEL
    max_tokens: Optional[int] = None
    enable_token_warning: bool = True
    enable_token_counting: bool = False

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "output_format", OutputFormat.parse(self.output_format))
        if isinstance(self.exclude_patterns, str):
            raise ConfigurationError(
                f"exclude_patterns must be a list of patterns, not a string: {self.exclude_patterns!r}"
            )
        object.__setattr__(self, "exclude_patterns", tuple(self.exclude_patterns or ()))

        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int) or self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be a non-negative integer, got {self.max_depth!r}")
        if isinstance(self.max_file_size, bool) or not isinstance(self.max_file_size, int) or self.max_file_size <= 0:
            raise ConfigurationError(f"max_file_size must be a positive integer, got {self.max_file_size!r}")
        if self.max_tokens is not None and (not isinstance(self.max_tokens, int) or self.max_tokens < 0):
            raise ConfigurationError(f"max_tokens must be a non-negative integer or None, got {self.max_tokens!r}")

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "Configuration":
        """
        Builds a configuration from a settings mapping.
        Accepts both camelCase keys (ignoreGitIgnore, maxDepth, ...) and the
        field names. Missing or None values keep the defaults; unknown keys
        are ignored.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in settings.items():
            name = _SETTING_KEYS.get(key, key)
            if name not in known or value is None:
                continue
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class TokenEstimate:
    model: str
    tokens: int
    cost: float
    limit: int = 0

    @property
    def exceeds_limit(self) -> bool:
        return self.limit > 0 and self.tokens > self.limit


@dataclass(frozen=True)
class PipelineResult:
    text: str
    output_format: OutputFormat
    tree: str = ""
    records: Tuple[FileRecord, ...] = field(default_factory=tuple)
    tokens: Optional[TokenEstimate] = None
