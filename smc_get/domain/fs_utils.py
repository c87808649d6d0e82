from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def copy_directory_contents(source: Path, target: Path) -> int:
    """
    Copy every child of ``source`` into ``target``, merging into existing
    sub-directories and overwriting files with the same name.

    Returns the number of files copied. A missing source copies nothing.
    """
    if not source.is_dir():
        logger.debug(f"Nothing to copy, {source} does not exist")
        return 0

    target.mkdir(parents=True, exist_ok=True)
    copied = 0
    for child in sorted(source.iterdir()):
        destination = target / child.name
        if child.is_dir():
            shutil.copytree(child, destination, dirs_exist_ok=True)
            copied += sum(1 for p in child.rglob("*") if p.is_file())
        else:
            shutil.copy2(child, destination)
            copied += 1
    return copied


def find_empty_directories(root: Path) -> List[Path]:
    """
    All directories below ``root`` (never ``root`` itself) that have no
    children. Symlinked directories are neither followed nor reported.
    """
    empty: List[Path] = []
    for dirpath, dirnames, _ in os.walk(root):
        for dirname in dirnames:
            path = Path(dirpath) / dirname
            if path.is_symlink():
                continue
            if not any(path.iterdir()):
                empty.append(path)
    return empty


def prune_empty_directories(root: Path) -> int:
    """
    Remove empty directories below ``root`` until none are left.

    Removing a leaf can leave its parent empty, so the tree is scanned again
    after every round of deletions. Each round removes at least one level,
    which bounds the loop by the depth of the tree. Returns the number of
    directories removed.
    """
    removed = 0
    while True:
        empty_dirs = find_empty_directories(root)
        if not empty_dirs:
            break
        for path in empty_dirs:
            logger.debug(f"Removing empty directory {path}")
            path.rmdir()
        removed += len(empty_dirs)
    return removed
