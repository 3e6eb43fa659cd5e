"""File discovery and collection for schema directories."""

import asyncio
import logging
import stat
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = {".graphql", ".gql"}
DEFAULT_EXCLUDE_DIRS = {
    ".git", ".hg", ".svn",
    "node_modules", "__pycache__", ".tox", ".nox",
    "venv", ".venv", "env", ".env",
    ".idea", ".vscode",
    "build", "dist", ".eggs", "*.egg-info",
}


class FileDecodeError(OSError):
    """Raised when a collected file's contents are not valid text."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode {path} as text: {reason}")


class FileTable:
    """
    In-memory table of collected files, keyed by path.

    Insertions go through an asyncio lock, one entry per critical section,
    so workers walking sibling subtrees can share a table. Inserting a path
    twice keeps the last contents.
    """

    def __init__(self, files: Optional[Dict[Path, str]] = None):
        self._files: Dict[Path, str] = dict(files or {})
        self._lock = asyncio.Lock()

    async def insert(self, path: Path, contents: str) -> None:
        """Insert or replace the contents of a path."""
        async with self._lock:
            self._files[path] = contents

    def get(self, path: Path) -> Optional[str]:
        return self._files.get(path)

    def paths(self) -> List[Path]:
        """Return all collected paths, sorted."""
        return sorted(self._files)

    def items(self) -> List[Tuple[Path, str]]:
        """Return (path, contents) pairs sorted by path."""
        return sorted(self._files.items())

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: Path) -> bool:
        return path in self._files

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths())

    def __repr__(self) -> str:
        return f"FileTable(files={len(self._files)})"


def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
    """Lower-case extensions and make sure each starts with a dot."""
    normalized = set()
    for ext in extensions:
        if not ext.startswith("."):
            ext = "." + ext
        normalized.add(ext.lower())
    return normalized


def is_extension_allowed(path: Path, include_ext: Set[str]) -> bool:
    """Check a file's suffix against the allow-list. Files without a suffix never match."""
    suffix = path.suffix.lower()
    return bool(suffix) and suffix in include_ext


def is_excluded_dir(name: str, exclude_dirs: Set[str]) -> bool:
    """Check if a directory name matches an exclusion, including ``*suffix`` patterns."""
    if name in exclude_dirs:
        return True
    return any(name.endswith(pat.lstrip("*")) for pat in exclude_dirs if pat.startswith("*"))


async def collect_files(
    root: Path,
    table: Optional[FileTable] = None,
    include_ext: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
    max_depth: Optional[int] = None,
    workers: int = 1,
) -> FileTable:
    """
    Walk a directory tree and load every allowed file into a table.

    Directories are processed from a shared worklist by ``workers``
    cooperating tasks. Every filesystem call runs in a thread so the event
    loop is never blocked.

    Args:
        root: Directory to walk. A regular file is collected on its own if
              its extension is allowed.
        table: Table to fill. A new one is created if None.
        include_ext: Allowed extensions (e.g., {'.graphql'}).
                    If None, uses DEFAULT_EXTENSIONS.
        exclude_dirs: Directory names to skip.
                     If None, every subdirectory is walked; pass
                     DEFAULT_EXCLUDE_DIRS to skip VCS and build folders.
        max_depth: Maximum depth to descend. None means unlimited.
        workers: Number of tasks draining the worklist.

    Returns:
        The filled table.

    Raises:
        OSError: If the root doesn't exist, or metadata or a directory
            can't be read. The walk stops at the first failure; entries
            already inserted stay in the table.
        FileDecodeError: If an allowed file isn't valid UTF-8 text.
    """
    if table is None:
        table = FileTable()
    include_ext = DEFAULT_EXTENSIONS if include_ext is None else normalize_extensions(include_ext)
    if exclude_dirs is None:
        exclude_dirs = set()
    if workers < 1:
        raise ValueError("workers must be at least 1")

    root = Path(root)
    root_stat = await asyncio.to_thread(root.stat)

    if not stat.S_ISDIR(root_stat.st_mode):
        if stat.S_ISREG(root_stat.st_mode) and is_extension_allowed(root, include_ext):
            await _collect_file(root, table)
        return table

    queue: "asyncio.Queue[Tuple[Path, int]]" = asyncio.Queue()
    visited: Set[Tuple[int, int]] = {(root_stat.st_dev, root_stat.st_ino)}
    queue.put_nowait((root, 0))

    async def worker() -> None:
        while True:
            directory, depth = await queue.get()
            try:
                await _walk_directory(
                    directory, depth, queue, visited, table,
                    include_ext, exclude_dirs, max_depth,
                )
            finally:
                queue.task_done()

    await _run_workers(queue, worker, workers)

    logger.info("Collected %d file(s) under %s", len(table), root)
    return table


async def _walk_directory(
    directory: Path,
    depth: int,
    queue: asyncio.Queue,
    visited: Set[Tuple[int, int]],
    table: FileTable,
    include_ext: Set[str],
    exclude_dirs: Set[str],
    max_depth: Optional[int],
) -> None:
    """Process the entries of one directory, queueing subdirectories."""
    entries = await asyncio.to_thread(_list_dir, directory)

    for entry in entries:
        entry_stat = await asyncio.to_thread(entry.stat)

        if stat.S_ISDIR(entry_stat.st_mode):
            if is_excluded_dir(entry.name, exclude_dirs):
                logger.debug("Skipping excluded directory %s", entry)
                continue
            if max_depth is not None and depth + 1 > max_depth:
                continue
            # Symlinked directories can loop back on themselves
            key = (entry_stat.st_dev, entry_stat.st_ino)
            if key in visited:
                continue
            visited.add(key)
            queue.put_nowait((entry, depth + 1))
        elif stat.S_ISREG(entry_stat.st_mode):
            if is_extension_allowed(entry, include_ext):
                await _collect_file(entry, table)
            else:
                logger.debug("Skipping %s", entry)


async def _collect_file(path: Path, table: FileTable) -> None:
    contents = await asyncio.to_thread(_read_text, path)
    await table.insert(path, contents)
    logger.debug("Collected %s", path)


async def _run_workers(queue: asyncio.Queue, worker, count: int) -> None:
    """Run workers until the queue is drained or one of them fails."""
    tasks = [asyncio.create_task(worker()) for _ in range(count)]
    joined = asyncio.create_task(queue.join())
    try:
        await asyncio.wait([joined, *tasks], return_when=asyncio.FIRST_COMPLETED)
        for task in tasks:
            if task.done():
                # Workers only finish by raising
                task.result()
    finally:
        for task in (joined, *tasks):
            task.cancel()
        await asyncio.gather(joined, *tasks, return_exceptions=True)


def _list_dir(directory: Path) -> List[Path]:
    return sorted(directory.iterdir())


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise FileDecodeError(path, str(e)) from e
