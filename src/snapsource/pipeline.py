# src/snapsource/pipeline.py
"""
Orchestrates one run: ignore rules -> tree -> file records -> formatted text.
This is the only module external callers (the CLI, an editor host) need.
"""
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from snapsource.core.formatter import format_output, format_project_structure
from snapsource.core.ignore import IgnoreMatcher
from snapsource.core.scanner import FileCollector
from snapsource.core.tree import render_tree
from snapsource.errors import NoInputPathsError, OperationCancelled, RootResolutionError
from snapsource.models import Configuration, PipelineResult
from snapsource.utils.tokenizer import estimate

logger = logging.getLogger(__name__)

PathArg = Union[str, os.PathLike]


def resolve_inputs(paths: Sequence[PathArg], root: Optional[PathArg] = None) -> Tuple[Path, List[Path]]:
    """
    Absolute root and input paths. The root defaults to the current
    directory and must contain every input. Symlinks are not resolved, so
    relative paths are computed from where the entries appear.
    """
    if not paths:
        raise NoInputPathsError()

    root_dir = Path(os.path.abspath(root if root is not None else os.getcwd()))
    if not root_dir.is_dir():
        raise RootResolutionError(f"Root directory '{root_dir}' does not exist or is not a directory")

    inputs = []
    for path in paths:
        abs_path = Path(os.path.abspath(path))
        if abs_path != root_dir and root_dir not in abs_path.parents:
            raise RootResolutionError(f"Unable to determine workspace folder: '{abs_path}' is outside '{root_dir}'")
        inputs.append(abs_path)
    return root_dir, inputs


def generate(config: Configuration, paths: Sequence[PathArg], root: Optional[PathArg] = None, *,
             project_tree_only: bool = False,
             cancelled: Optional[Callable[[], bool]] = None) -> PipelineResult:
    """
    Produces the formatted text for `paths`.

    Raises NoInputPathsError / RootResolutionError before any work is done,
    and OperationCancelled when `cancelled()` turns true mid-run; in both
    cases no partial output is returned.
    """
    root_dir, inputs = resolve_inputs(paths, root)
    logger.debug("Root: %s, inputs: %d, format: %s", root_dir, len(inputs), config.output_format.value)

    if cancelled is not None and cancelled():
        raise OperationCancelled()

    matcher = IgnoreMatcher.for_root(root_dir, config.exclude_patterns, config.ignore_gitignore)

    tree = ""
    if project_tree_only or config.include_project_tree:
        tree = render_tree(root_dir, matcher, config.max_depth)

    if project_tree_only:
        text = format_project_structure(config.output_format, tree)
        return PipelineResult(text=text, output_format=config.output_format, tree=tree)

    collector = FileCollector(
        root_dir,
        matcher,
        config.max_file_size,
        remove_comments=config.remove_comments,
        compress_code=config.compress_code,
    )
    records = collector.collect(inputs, cancelled=cancelled)
    logger.debug("Collected %d file(s)", len(records))

    text = format_output(config.output_format, tree, records)

    tokens = None
    if config.enable_token_counting:
        tokens = estimate(text, config.llm_model, config.max_tokens)

    return PipelineResult(
        text=text,
        output_format=config.output_format,
        tree=tree,
        records=tuple(records),
        tokens=tokens,
    )
