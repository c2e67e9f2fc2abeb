import logging
from pathlib import Path

LOG_FILE_NAME = "transcode.log"
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def setup_logging(output_dir: Path, debug: bool = False) -> logging.Logger:
    """File-only logging inside the output root; the console belongs to rich."""
    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = output_dir / LOG_FILE_NAME

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    return logging.getLogger("vbt")
