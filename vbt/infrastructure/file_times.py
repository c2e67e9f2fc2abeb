import os
from pathlib import Path
from typing import Optional

def get_mtime(path: Path) -> int:
    """Modification time in whole seconds, as `stat` reports it."""
    return int(os.stat(path).st_mtime)

def get_birthtime(path: Path) -> Optional[int]:
    """Creation time in whole seconds, or None where the filesystem does not expose it."""
    birthtime = getattr(os.stat(path), "st_birthtime", None)
    if birthtime is None:
        return None
    return int(birthtime)

def copy_file_times(source: Path, target: Path):
    """Sets target atime/mtime to the source's (touch -r)."""
    st = os.stat(source)
    os.utime(target, ns=(st.st_atime_ns, st.st_mtime_ns))
