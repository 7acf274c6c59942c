"""
Base provider implementation with common functionality.

Providers wrap optional third-party backends. The backend module is
imported on first use, so the core package works without it and a missing
backend surfaces as a ProviderError at the call site.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional
import importlib
import logging
import time

from ..base.exceptions import ProviderError


class BaseProvider(ABC):
    """Base implementation for all providers.

    Tracks initialization and usage and gives each provider its own logger.
    Subclasses implement :meth:`_check_dependencies` and may override
    :meth:`_initialize_backend`.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._initialized = False
        self._logger = logging.getLogger(self.__class__.__name__)
        self._initialization_time: Optional[float] = None
        self._usage_count = 0

    @property
    def name(self) -> str:
        """Provider name (derived from class name)."""
        return self.__class__.__name__

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def usage_count(self) -> int:
        return self._usage_count

    def is_available(self) -> bool:
        """Whether the backend can be imported."""
        try:
            self._check_dependencies()
        except ProviderError as e:
            self._logger.debug(f"Provider {self.name} unavailable: {e}")
            return False
        return True

    @abstractmethod
    def _check_dependencies(self) -> None:
        """Import the backend.

        Raises
        ------
        ProviderError
            If the backend is not installed
        """

    def _initialize_backend(self, **kwargs) -> None:
        """Backend-specific setup, run once after the dependency check."""

    def initialize(self, **kwargs) -> None:
        """Initialize the provider.

        Raises
        ------
        ProviderError
            If the backend is missing or fails to initialize
        """
        if self._initialized:
            self._logger.debug(f"Provider {self.name} already initialized")
            return

        start_time = time.perf_counter()
        self._check_dependencies()
        try:
            self._initialize_backend(**kwargs)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"Failed to initialize provider {self.name}: {e}",
                                provider=self.name, operation="initialize", cause=e)
        self._initialized = True
        self._initialization_time = time.perf_counter() - start_time
        self._logger.info(
            f"Provider {self.name} initialized in {self._initialization_time:.3f}s"
        )

    def ensure_initialized(self) -> None:
        """Ensure provider is initialized, initializing if necessary."""
        if not self._initialized:
            self.initialize()

    def _track_usage(self) -> None:
        self._usage_count += 1

    def get_info(self) -> Dict[str, Any]:
        """Provider information dictionary."""
        info = {
            'name': self.name,
            'available': self.is_available(),
            'initialized': self._initialized,
            'usage_count': self._usage_count,
        }
        if self._initialization_time is not None:
            info['initialization_time'] = self._initialization_time
        return info

    def __enter__(self):
        self.ensure_initialized()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


class LazyProvider(BaseProvider):
    """Provider that imports its backend modules on demand."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._modules: Dict[str, Any] = {}

    def _lazy_import(self, module_name: str) -> Any:
        """Import ``module_name`` once and remember it.

        Raises
        ------
        ProviderError
            If the module cannot be imported
        """
        if module_name not in self._modules:
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise ProviderError(f"Failed to import {module_name}: {e}",
                                    provider=self.name, operation="import", cause=e)
            self._modules[module_name] = module
            version = getattr(module, '__version__', 'unknown')
            self._logger.debug(f"Lazy imported {module_name} (v{version})")
        return self._modules[module_name]

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info['modules'] = {
            name: getattr(module, '__version__', 'unknown')
            for name, module in self._modules.items()
        }
        return info


class CachedProvider(BaseProvider):
    """Provider with a small LRU cache for expensive backend results.

    Parameters
    ----------
    cache_size : int
        Maximum number of cached items
    """

    def __init__(self, cache_size: int = 16, **kwargs):
        super().__init__(**kwargs)
        self._cache: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._cache_size = cache_size
        self._cache_hits = 0
        self._cache_misses = 0

    def _cache_get(self, key: Hashable) -> Optional[Any]:
        if key not in self._cache:
            self._cache_misses += 1
            return None
        self._cache.move_to_end(key)
        self._cache_hits += 1
        return self._cache[key]

    def _cache_set(self, key: Hashable, value: Any) -> None:
        self._cache[key] = value
        self._cache.move_to_end(key)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)

    def cache_clear(self) -> None:
        self._cache.clear()

    def get_cache_info(self) -> Dict[str, Any]:
        """Cache statistics."""
        total = self._cache_hits + self._cache_misses
        return {
            'size': len(self._cache),
            'max_size': self._cache_size,
            'hits': self._cache_hits,
            'misses': self._cache_misses,
            'hit_rate': self._cache_hits / total if total > 0 else 0,
        }

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info['cache'] = self.get_cache_info()
        return info
