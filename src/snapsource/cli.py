# src/snapsource/cli.py
import argparse
import logging
import sys
from pathlib import Path

import pyperclip

from snapsource.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_LLM_MODEL,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_OUTPUT_FORMAT,
)
from snapsource.errors import OperationCancelled, SnapSourceError
from snapsource.models import Configuration, OutputFormat
from snapsource.pipeline import generate
from snapsource.utils.tokenizer import token_warning


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="snapsource",
        description="Copy files, folders and the project tree into one LLM-ready prompt (plaintext, Markdown or XML).",
    )
    parser.add_argument("paths", nargs="*", help="Files and/or directories to include")
    parser.add_argument("-r", "--root", type=str, default=None, help="Project root (default: current directory)")
    parser.add_argument(
        "-f", "--format",
        choices=[f.value for f in OutputFormat],
        default=DEFAULT_OUTPUT_FORMAT,
        help=f"Output format (default: {DEFAULT_OUTPUT_FORMAT})",
    )
    parser.add_argument("--max-depth", type=int, default=DEFAULT_MAX_DEPTH, help="Maximum depth of the project tree")
    parser.add_argument(
        "-x", "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra gitignore-style pattern to exclude (repeatable)",
    )
    parser.add_argument("--no-default-excludes", action="store_true", help="Do not apply the built-in exclude patterns")
    parser.add_argument("--no-gitignore", action="store_true", help="Do not apply the root .gitignore")
    parser.add_argument(
        "--max-file-size",
        type=int,
        default=DEFAULT_MAX_FILE_SIZE,
        help=f"Files larger than this many bytes are replaced by a note (default: {DEFAULT_MAX_FILE_SIZE})",
    )
    parser.add_argument("--compress", action="store_true", help="Trim indentation and drop blank lines")
    parser.add_argument("--remove-comments", action="store_true", help="Strip // and /* */ comments")

    tree_group = parser.add_mutually_exclusive_group()
    tree_group.add_argument("--no-tree", action="store_true", help="Leave out the project tree")
    tree_group.add_argument("--tree-only", action="store_true", help="Only output the project tree")

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument("-o", "--output", type=str, default=None, help="Write to this file instead of stdout")
    output_group.add_argument("-c", "--clipboard", action="store_true", help="Copy the result to the clipboard")

    parser.add_argument("--count-tokens", action="store_true", help="Report token count and estimated cost")
    parser.add_argument("--model", type=str, default=DEFAULT_LLM_MODEL, help=f"Model for token counting (default: {DEFAULT_LLM_MODEL})")
    parser.add_argument("--max-tokens", type=int, default=None, help="Token limit for the warning (default: the model's context size)")
    parser.add_argument("--no-token-warning", action="store_true", help="Do not warn when the token limit is exceeded")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def build_configuration(args) -> Configuration:
    patterns = [] if args.no_default_excludes else list(DEFAULT_EXCLUDE_PATTERNS)
    patterns.extend(args.exclude)
    return Configuration(
        ignore_gitignore=not args.no_gitignore,
        max_depth=args.max_depth,
        exclude_patterns=tuple(patterns),
        output_format=OutputFormat(args.format),
        max_file_size=args.max_file_size,
        compress_code=args.compress,
        remove_comments=args.remove_comments,
        include_project_tree=not args.no_tree,
        llm_model=args.model,
        max_tokens=args.max_tokens,
        enable_token_warning=not args.no_token_warning,
        enable_token_counting=args.count_tokens,
    )


def deliver(text: str, args) -> str:
    """Writes the result where the user asked for it; returns a short description."""
    if args.clipboard:
        pyperclip.copy(text)
        return "copied to clipboard"
    if args.output:
        output_file = Path(args.output)
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(text)
        return f"written to {output_file.name}"
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")
    return "written to stdout"


def main(argv=None):
    parser = create_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_configuration(args)

        paths = args.paths
        if args.tree_only and not paths:
            # The structure is always drawn from the root
            paths = [args.root or "."]

        result = generate(config, paths, args.root, project_tree_only=args.tree_only)

        try:
            where = deliver(result.text, args)
        except (OSError, pyperclip.PyperclipException) as e:
            print(f"Error: Failed to deliver output: {e}", file=sys.stderr)
            sys.exit(1)

        prefix = "Project structure " if args.tree_only else ""
        message = f"{prefix}{where}: {config.output_format.value} format"
        message = message[:1].upper() + message[1:]
        if result.tokens is not None:
            message += f", {result.tokens.tokens} tokens, ${result.tokens.cost:.4f} est. cost"
        print(message, file=sys.stderr)

        if result.tokens is not None and config.enable_token_warning:
            warning = token_warning(result.tokens)
            if warning:
                print(warning, file=sys.stderr)

    except (OperationCancelled, KeyboardInterrupt):
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except SnapSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
