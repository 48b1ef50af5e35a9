"""
Output file writing.

Generated files start with the generator's header block. A file whose
content on disk is already byte-identical is left untouched so that
watchers and build tools do not see a spurious change.
"""

from pathlib import Path
from typing import Union

from .logging_config import get_logger

logger = get_logger(__name__)


class WriterError(Exception):
    """Exception raised when the output file cannot be written."""

    pass


def render_file(header: str, code: str, line_ending: str = "\n") -> str:
    """Join the header and generated code into file content."""
    content = f"{header}\n{code}\n"
    if line_ending != "\n":
        # Generated code already uses line_ending, the header and joins do not
        content = content.replace(line_ending, "\n").replace("\n", line_ending)
    return content


def write_output(path: Union[str, Path], content: str) -> bool:
    """
    Write ``content`` to ``path`` unless the file already holds it.

    Args:
        path: Destination file; missing parent directories are created
        content: Complete file content

    Returns:
        True if the file was written, False if it was already up to date

    Raises:
        WriterError: If the file cannot be read or written
    """
    path = Path(path)
    data = content.encode("utf-8")

    try:
        if path.is_file() and path.read_bytes() == data:
            logger.info("%s is up to date, skipping write", path)
            return False

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise WriterError(f"Failed to write {path}: {e}") from e

    logger.info("Wrote %d bytes to %s", len(data), path)
    return True
