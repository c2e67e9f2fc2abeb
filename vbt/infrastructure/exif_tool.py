import logging
import exiftool
from exiftool.exceptions import ExifToolException
from pathlib import Path
from typing import List
from vbt.infrastructure.file_times import copy_file_times

logger = logging.getLogger(__name__)

class ExifToolAdapter:
    """Wrapper around pyexiftool that carries tags and timestamps from an input to its output."""

    def __init__(self, executable: str = "exiftool"):
        self.et = None
        try:
            self.et = exiftool.ExifTool(executable=executable)
        except FileNotFoundError as e:
            # Tags are lost but outputs still get the input's mtime
            logger.warning(f"exiftool unavailable, only copying file times: {e}")

    def start(self):
        if self.et is not None and not self.et.running:
            self.et.run()

    def stop(self):
        if self.et is not None and self.et.running:
            self.et.terminate()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def _execute(self, params: List[str], target: Path) -> bool:
        if self.et is None:
            return False
        self.start()
        try:
            self.et.execute(*params)
        except ExifToolException as e:
            logger.warning(f"exiftool failed on {target.name}: {e}")
            return False
        # execute() returns output regardless of exiftool's exit status
        if self.et.last_status != 0:
            logger.warning(
                f"exiftool exited with status {self.et.last_status} on {target.name}: "
                f"{(self.et.last_stderr or '').strip()}"
            )
            return False
        return True

    def sync_metadata(self, source: Path, target: Path) -> bool:
        """
        Copies all tags, the container create/modify dates and finally the
        filesystem mtime from source to target. Every step runs even if an
        earlier one failed; safe to repeat on an already synced output.
        """
        ok = self._execute([
            "-api", "largefilesupport=1",
            "-overwrite_original",
            "-TagsFromFile", str(source),
            "-All:All",
            str(target)
        ], target)

        ok = self._execute([
            "-api", "largefilesupport=1",
            "-overwrite_original",
            "-TagsFromFile", str(source),
            "-FileCreateDate<FileCreateDate",
            "-FileModifyDate<FileModifyDate",
            str(target)
        ], target) and ok

        try:
            copy_file_times(source, target)
        except OSError as e:
            logger.warning(f"Could not copy timestamps to {target}: {e}")
            ok = False

        if ok:
            logger.info(f"Metadata synced: {source.name} -> {target.name}")
        return ok
