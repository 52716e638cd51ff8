"""Recognise files written by the synchronization subsystem itself"""
import re
from typing import Iterable, List, Tuple, TypeVar

from git_sync_keeper.models.repository import FileStatusEntry

# Notes are created as "<epoch-ms>-<slug>.md", e.g. 1762323118666-new-note.md
TIMESTAMP_FILE_PATTERN = re.compile(r"^\d{13}-")
# Folders are created as "folder-<epoch-ms>", e.g. folder-1762232030505/
TIMESTAMP_FOLDER_PATTERN = re.compile(r"folder-\d{13}")

T = TypeVar("T", bound=FileStatusEntry)


def split_path(path: str) -> Tuple[str, str]:
    """Split a repository path into (folder_path, file_name)."""
    parts = path.replace("\\", "/").split("/")
    return "/".join(parts[:-1]), parts[-1]


def is_generated_file(path: str) -> bool:
    """Check if a path looks like a file produced by automatic sync.

    A user file that happens to match the naming scheme is also reported as
    generated; there is no way to tell them apart by name alone.
    """
    folder_path, file_name = split_path(path)
    if TIMESTAMP_FILE_PATTERN.match(file_name):
        return True
    return TIMESTAMP_FOLDER_PATTERN.search(folder_path) is not None


def filter_generated(entries: Iterable[T]) -> List[T]:
    """Drop status entries whose path is a generated file."""
    return [entry for entry in entries if not is_generated_file(entry.path)]
