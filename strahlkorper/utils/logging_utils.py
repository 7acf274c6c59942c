import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logging(log_level: str = "INFO", log_file: Optional[Union[str, Path]] = None):
    """Setup logging for scripts using the package."""
    level = getattr(logging, log_level.upper())

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format=LOG_FORMAT,
        force=True
    )

    # Reduce noise from external libraries
    logging.getLogger('healpy').setLevel(logging.WARNING)
    logging.getLogger('h5py').setLevel(logging.WARNING)


def setup_logging_from_config(config=None):
    """Apply ``log_level`` and ``log_file`` from a SurfaceConfig (global one by default)."""
    from ..core.config import get_config

    config = config or get_config()
    setup_logging(config.log_level, config.log_file)
