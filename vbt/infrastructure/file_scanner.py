import os
from pathlib import Path
from typing import Iterable, Iterator, Set

class FileScanner:
    """Recursively finds media files, skipping any directory used for outputs."""

    def __init__(self, extensions: Iterable[str], excluded_dir_names: Iterable[str] = ()):
        self.extensions: Set[str] = {e.lower() if e.startswith(".") else f".{e.lower()}" for e in extensions}
        self.excluded_dir_names: Set[str] = set(excluded_dir_names)

    def _matches(self, name: str) -> bool:
        return os.path.splitext(name)[1].lower() in self.extensions

    def scan(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            # Prune in place so os.walk never descends into excluded dirs
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dir_names)
            for name in sorted(filenames):
                if not self._matches(name):
                    continue
                path = Path(dirpath) / name
                if path.is_file():
                    yield path
