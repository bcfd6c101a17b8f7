"""Placeholder registry factory.

Provides get_registry() / set_registry() to swap implementations.
"""

from checkout.reconciliation.registry.port import PlaceholderRegistry

_current_registry: PlaceholderRegistry | None = None


def get_registry() -> PlaceholderRegistry:
    """Return the current registry. Defaults to the EventAttendee-backed one."""
    global _current_registry
    if _current_registry is None:
        from checkout.reconciliation.registry.protean_adapter import ProteanPlaceholderRegistry

        _current_registry = ProteanPlaceholderRegistry()
    return _current_registry


def set_registry(registry: PlaceholderRegistry) -> None:
    """Override the active registry (useful for tests)."""
    global _current_registry
    _current_registry = registry


def reset_registry() -> None:
    global _current_registry
    _current_registry = None
