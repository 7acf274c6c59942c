"""
Configuration loaders for different file formats.

This module provides loaders for JSON and YAML configuration files and a
helper that builds a :class:`SurfaceConfig` from either.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Union
import json
import logging

import yaml

from ..base.exceptions import ConfigurationError
from .settings import SurfaceConfig


class ConfigLoader(ABC):
    """Abstract base class for configuration loaders.

    This class defines the interface that all configuration loaders must implement,
    ensuring consistent behavior across different file formats.
    """

    @abstractmethod
    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from file.

        Parameters
        ----------
        path : str or Path
            Path to configuration file

        Returns
        -------
        dict
            Configuration data

        Raises
        ------
        ConfigurationError
            If loading fails
        """
        pass

    @abstractmethod
    def save(self, data: Dict[str, Any], path: Union[str, Path]) -> None:
        """Save configuration to file.

        Raises
        ------
        ConfigurationError
            If saving fails
        """
        pass

    @property
    @abstractmethod
    def supported_extensions(self) -> List[str]:
        """List of supported file extensions (including the dot)."""
        pass

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Human-readable format name."""
        pass

    def validate_data(self, data: Dict[str, Any]) -> bool:
        """Validate configuration data before saving."""
        return isinstance(data, dict)

    def preprocess_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Preprocess data before saving (e.g., convert Path objects)."""
        def convert_paths(obj):
            """Recursively convert Path objects to strings."""
            if isinstance(obj, Path):
                return str(obj)
            elif isinstance(obj, dict):
                return {k: convert_paths(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [convert_paths(item) for item in obj]
            else:
                return obj

        return convert_paths(data)


class JSONConfigLoader(ConfigLoader):
    """JSON configuration loader."""

    @property
    def supported_extensions(self) -> List[str]:
        return ['.json']

    @property
    def format_name(self) -> str:
        return "JSON"

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load JSON configuration file.

        Raises
        ------
        ConfigurationError
            If file cannot be loaded or parsed
        """
        path = Path(path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}", config_file=str(path))
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}", config_file=str(path))
        except PermissionError:
            raise ConfigurationError(f"Permission denied reading {path}", config_file=str(path))

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"JSON file must contain an object/dictionary, got {type(data).__name__}",
                config_file=str(path),
            )

        logging.debug(f"Successfully loaded JSON config from {path}")
        return data

    def save(self, data: Dict[str, Any], path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        path = Path(path)

        if not self.validate_data(data):
            raise ConfigurationError("Data must be a dictionary for JSON format")

        processed_data = self.preprocess_data(data)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(processed_data, f, indent=2, ensure_ascii=False, sort_keys=True)
        except PermissionError:
            raise ConfigurationError(f"Permission denied writing to {path}", config_file=str(path))

        logging.debug(f"Successfully saved JSON config to {path}")


class YAMLConfigLoader(ConfigLoader):
    """YAML configuration loader (PyYAML)."""

    @property
    def supported_extensions(self) -> List[str]:
        return ['.yaml', '.yml']

    @property
    def format_name(self) -> str:
        return "YAML"

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Load YAML configuration file.

        Raises
        ------
        ConfigurationError
            If file cannot be loaded or parsed
        """
        path = Path(path)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=str(path))
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}", config_file=str(path))
        except PermissionError:
            raise ConfigurationError(f"Permission denied reading {path}", config_file=str(path))

        # Handle empty files
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"YAML file must contain a mapping/dictionary, got {type(data).__name__}",
                config_file=str(path),
            )

        logging.debug(f"Successfully loaded YAML config from {path}")
        return data

    def save(self, data: Dict[str, Any], path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        path = Path(path)

        if not self.validate_data(data):
            raise ConfigurationError("Data must be a dictionary for YAML format")

        processed_data = self.preprocess_data(data)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(processed_data, f, default_flow_style=False, indent=2,
                               allow_unicode=True, sort_keys=True)
        except PermissionError:
            raise ConfigurationError(f"Permission denied writing to {path}", config_file=str(path))

        logging.debug(f"Successfully saved YAML config to {path}")


def get_config_loader(file_path: Union[str, Path]) -> ConfigLoader:
    """Get appropriate config loader for file extension.

    Raises
    ------
    ConfigurationError
        If file format is not supported
    """
    suffix = Path(file_path).suffix.lower()

    loaders = {
        '.json': JSONConfigLoader,
        '.yaml': YAMLConfigLoader,
        '.yml': YAMLConfigLoader,
    }

    if suffix not in loaders:
        available = list(loaders.keys())
        raise ConfigurationError(
            f"Unsupported configuration file format: {suffix}. Available: {available}",
            config_file=str(file_path),
        )

    return loaders[suffix]()


def load_config_file(file_path: Union[str, Path]) -> SurfaceConfig:
    """Build a SurfaceConfig from a JSON or YAML file.

    A top-level ``strahlkorper`` section is used when present, so the
    settings can live inside a larger configuration file.
    """
    data = get_config_loader(file_path).load(file_path)
    if isinstance(data.get('strahlkorper'), dict):
        data = data['strahlkorper']
    try:
        return SurfaceConfig.from_dict(data)
    except ConfigurationError as e:
        raise e.add_detail('config_file', str(file_path))
    except TypeError as e:
        raise ConfigurationError(f"Malformed configuration in {file_path}: {e}",
                                 config_file=str(file_path), cause=e)


def save_config_file(config: SurfaceConfig, file_path: Union[str, Path]) -> None:
    """Write a SurfaceConfig to a JSON or YAML file."""
    get_config_loader(file_path).save(config.to_dict(), file_path)
