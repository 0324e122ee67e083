"""
Mirroring rewritten documents into an output directory.

Each document lands at its path relative to the working directory, under the
output root. Directories are created first; once a directory exists, all of its
files are written concurrently, independently of other directories.
"""

from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from bs4 import BeautifulSoup
from strif import atomic_output_file

from htmlentry.logging import get_logger

log = get_logger("output")


def destination_for(document: Path, output_root: Path, cwd: Path) -> Path:
    """Path `document` is mirrored to: its location relative to `cwd`, under `output_root`."""
    root = output_root if output_root.is_absolute() else cwd / output_root
    return Path(os.path.normpath(root / os.path.relpath(document, cwd)))


def ensure_directory(directory: Path) -> Path:
    """Create `directory` and any missing ancestors. Existing directories are fine."""
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def write_document(destination: Path, document: BeautifulSoup) -> Path:
    """Serialize `document` back to markup and write it atomically."""
    with atomic_output_file(destination) as tmp_path:
        Path(tmp_path).write_text(str(document), encoding="utf-8")
    log.debug("Wrote %s", destination)
    return destination


def write_documents(
    documents: Mapping[Path, BeautifulSoup],
    output_root: Path,
    *,
    cwd: Path | None = None,
    max_workers: int | None = None,
) -> list[Path]:
    """
    Write every document under `output_root`, mirroring its relative path.

    Any directory or write failure is raised once in-flight work has finished;
    there is no partial result. Returns the written paths, sorted.
    """
    cwd = cwd if cwd is not None else Path.cwd()

    by_directory: dict[Path, list[tuple[Path, BeautifulSoup]]] = defaultdict(list)
    for path, document in documents.items():
        destination = destination_for(path, output_root, cwd)
        by_directory[destination.parent].append((destination, document))

    written: list[Path] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        directory_futures = {
            executor.submit(ensure_directory, directory): directory for directory in by_directory
        }
        write_futures: list[Future[Path]] = []
        for future in as_completed(directory_futures):
            directory = directory_futures[future]
            future.result()
            for destination, document in by_directory[directory]:
                write_futures.append(executor.submit(write_document, destination, document))
        for future in write_futures:
            written.append(future.result())

    log.info("Wrote %d document(s) to %s", len(written), output_root)
    return sorted(written)
