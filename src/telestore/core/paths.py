"""Path helpers and the directory view derived from flat index keys."""

import posixpath
from collections.abc import Iterable

ROOT = "."


def clean_path(path: str) -> str:
    """
    Normalize a virtual path.

    Redundant separators and dot segments are collapsed, the leading "/" is
    dropped, and an empty path (or "/") becomes the root marker ".".
    """
    cleaned = posixpath.normpath(path or ROOT).lstrip("/")
    return cleaned or ROOT


def parent_dir(key: str) -> str:
    """Parent directory of a key, "." for top-level keys."""
    return posixpath.dirname(clean_path(key)) or ROOT


def join_path(root: str, remote: str) -> str:
    """Join a remote path onto the filesystem root."""
    root = clean_path(root)
    if root == ROOT:
        return clean_path(remote)
    return clean_path(posixpath.join(root, clean_path(remote)))


def is_within(root: str, key: str) -> bool:
    """Whether a cleaned key is root itself or lies below it."""
    root = clean_path(root)
    if key == ".." or key.startswith("../"):
        return False
    return root == ROOT or key == root or key.startswith(root + "/")


def relative_to(root: str, key: str) -> str:
    """Express an index key relative to the filesystem root."""
    root = clean_path(root)
    if root == ROOT:
        return key
    if key == root:
        return ROOT
    return key.removeprefix(root + "/")


def files_in_directory(
    keys: Iterable[str], query_dir: str
) -> tuple[set[str], set[str]]:
    """
    Split index keys into the files and subdirectories of one directory.

    Args:
        keys: Full index keys
        query_dir: Directory to list ("" or "/" for the root)

    Returns:
        (files, subdirectories) - files are full keys directly inside
        query_dir, subdirectories are the inferred child directory names.
    """
    query_dir = clean_path(query_dir)
    prefix = "" if query_dir == ROOT else query_dir + "/"

    files: set[str] = set()
    directories: set[str] = set()

    for key in keys:
        if parent_dir(key) == query_dir:
            files.add(key)
            continue

        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        if "/" in remainder:
            directory = remainder.split("/", 1)[0]
            if directory:
                directories.add(directory)

    return files, directories
