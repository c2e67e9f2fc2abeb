from pathlib import Path

class NoMediaFilesFound(Exception):
    """No file under the scan root matched the configured extensions."""

    def __init__(self, directory: Path):
        self.directory = directory
        super().__init__(f"No video files found under {directory}")
