"""
Build configuration resolver for refdocs.

Flattens a generator configuration file (a Doxyfile) by textually
inlining its ``@INCLUDE = path`` directives. No other configuration
semantics are interpreted.
"""

import logging
from pathlib import Path
from typing import List, Tuple, Union

from ..exit_codes import ConfigurationError

logger = logging.getLogger(__name__)

INCLUDE_KEYWORD = "@include"
DEFAULT_OUTPUT_KEY = "OUTPUT_DIRECTORY"


def is_include_line(line: str) -> bool:
    return line.lower().startswith(INCLUDE_KEYWORD)


def load_flattened_config(path: Union[str, Path]) -> str:
    """
    Load a configuration file and resolve all include directives.

    Included paths are relative to the directory of the file that
    includes them. Each directive is replaced by the included file's own
    flattened text followed by a newline; every other line is kept as is.

    Args:
        path: Configuration file to load

    Returns:
        The flattened configuration text

    Raises:
        ConfigurationError: a file cannot be read, an include line has no
            ``=``, or includes form a cycle
    """
    return _flatten(Path(path), ())


def _flatten(path: Path, chain: Tuple[Path, ...]) -> str:
    try:
        path = path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ConfigurationError(f"can't resolve configuration file {path}") from e

    if path in chain:
        cycle = " -> ".join(str(p) for p in (*chain, path))
        raise ConfigurationError(f"include cycle detected: {cycle}")

    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"failed to read configuration file {path}") from e

    logger.debug(f"Flattening {path}")
    chain = (*chain, path)

    combined = []
    for line in _split_lines(text):
        if not is_include_line(line):
            combined.append(line)
            combined.append("\n")
            continue

        _, sep, rhs = line.partition("=")
        if not sep:
            raise ConfigurationError(f"{path}: include directive is missing '=': {line.strip()}")
        include_path = path.parent / rhs.strip()
        combined.append(_flatten(include_path, chain))
        combined.append("\n")

    return "".join(combined)


def _split_lines(text: str) -> List[str]:
    """Split on line feeds only, dropping a carriage return that ends a line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def compose_build_config(base: str, output_dir: Union[str, Path],
                         output_key: str = DEFAULT_OUTPUT_KEY) -> str:
    """
    Derive the per-reference configuration from the flattened base.

    The override goes on the last line so it wins over any earlier
    assignment of the same key.
    """
    return f"{base}\n{output_key} = {output_dir}"
