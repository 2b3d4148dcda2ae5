"""Filesystem helpers for report and log output."""

from pathlib import Path


def create_directory(directory_path: str | Path) -> Path:
    """Create a directory and any missing parents.

    :param directory_path: Directory to create; an existing one is left as is
    :type directory_path: str | Path
    :return: Absolute path of the directory
    :rtype: Path
    :raises ValueError: If directory_path is None
    """
    if directory_path is None:
        raise ValueError("Directory path cannot be None")

    path = Path(directory_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def prepare_output_file(output_path: str | Path) -> Path:
    """Make sure an output file's directory exists and return its absolute path."""
    path = Path(output_path).resolve()
    create_directory(path.parent)
    return path
