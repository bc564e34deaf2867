# src/snapsource/config.py
from types import MappingProxyType

DEFAULT_EXCLUDE_PATTERNS = (
    "node_modules/",
    "venv/",
    "__pycache__/",
    "dist/",
    "build/",
    "*.log",
    "*.pyc",
    "*.lock",
    "package-lock.json",
)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_MAX_DEPTH = 5
DEFAULT_OUTPUT_FORMAT = "markdown"
DEFAULT_LLM_MODEL = "gpt-4"

# Always ignored, on top of the user's patterns
DOTFILE_PATTERN = ".*"

# Bytes sniffed when deciding whether a file is binary
BINARY_SNIFF_BYTES = 1024

MODEL_MAX_TOKENS = MappingProxyType({
    "gpt-4": 8192,
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "claude-3-5-sonnet-20240620": 200000,
    "claude-3-opus-20240229": 200000,
})

# USD per million input tokens
MODEL_PRICING = MappingProxyType({
    "gpt-4": 30.00,
    "gpt-4o": 2.50,
    "gpt-4o-mini": 0.15,
    "claude-3-5-sonnet-20240620": 3.00,
    "claude-3-opus-20240229": 15.00,
})
