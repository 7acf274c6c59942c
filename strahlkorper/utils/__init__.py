from .io import load_strahlkorper, save_strahlkorper
from .logging_utils import setup_logging, setup_logging_from_config

__all__ = [
    "load_strahlkorper",
    "save_strahlkorper",
    "setup_logging",
    "setup_logging_from_config",
]
