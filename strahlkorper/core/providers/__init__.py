"""
Providers for optional heavy dependencies.

Backends such as healpy are imported only when a provider is first used,
so the rest of the package does not depend on them.

Usage:
    from strahlkorper.core.providers import get_provider

    healpix = get_provider('healpix')
    radius = healpix.radius_map(surface, nside=32)
"""

from typing import Dict, Type

from ..base.exceptions import ProviderError
from .base_provider import BaseProvider, CachedProvider, LazyProvider
from .healpix_provider import HealpixProvider

_PROVIDERS: Dict[str, Type[BaseProvider]] = {
    'healpix': HealpixProvider,
}

_instances: Dict[str, BaseProvider] = {}


def get_provider(name: str) -> BaseProvider:
    """Shared provider instance by registered name.

    Raises
    ------
    ProviderError
        If no provider is registered under ``name``
    """
    if name not in _PROVIDERS:
        raise ProviderError(f"Unknown provider: {name}. Available: {sorted(_PROVIDERS)}",
                            provider=name)
    if name not in _instances:
        _instances[name] = _PROVIDERS[name]()
    return _instances[name]


def list_available_providers() -> Dict[str, bool]:
    """Registered provider names mapped to whether their backend imports."""
    return {name: get_provider(name).is_available() for name in _PROVIDERS}


__all__ = [
    "BaseProvider",
    "LazyProvider",
    "CachedProvider",
    "HealpixProvider",
    "get_provider",
    "list_available_providers",
]
