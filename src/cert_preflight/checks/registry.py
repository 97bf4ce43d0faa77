"""Check registry for managing and discovering checks."""

from typing import Iterator

from cert_preflight.checks.base import Check
from cert_preflight.models.check import CheckLevel


class CheckRegistry:
    """Ordered registry of certification checks.

    Checks run in registration order.

    Example:
        registry = CheckRegistry()
        registry.register(HasLicenseCheck())
        results = CheckRunner().run(image_ref, registry.checks)
    """

    def __init__(self) -> None:
        self._checks: dict[str, Check] = {}

    def register(self, check: Check) -> None:
        """Register a check.

        Raises:
            ValueError: If a check with the same name is already registered
        """
        if check.name in self._checks:
            raise ValueError(f"Check '{check.name}' is already registered")
        self._checks[check.name] = check

    def unregister(self, name: str) -> None:
        """Unregister a check by name.

        Raises:
            KeyError: If no check with that name is registered
        """
        if name not in self._checks:
            raise KeyError(f"No check named '{name}' is registered")
        del self._checks[name]

    def get(self, name: str) -> Check | None:
        return self._checks.get(name)

    def __getitem__(self, name: str) -> Check:
        if name not in self._checks:
            raise KeyError(f"No check named '{name}' is registered")
        return self._checks[name]

    def __contains__(self, name: str) -> bool:
        return name in self._checks

    def __iter__(self) -> Iterator[Check]:
        return iter(self._checks.values())

    def __len__(self) -> int:
        return len(self._checks)

    @property
    def names(self) -> list[str]:
        """Names of all registered checks, in registration order."""
        return list(self._checks.keys())

    @property
    def checks(self) -> list[Check]:
        """All registered checks, in registration order."""
        return list(self._checks.values())

    def at_level(self, level: CheckLevel) -> list[Check]:
        """Registered checks with the given enforcement level."""
        return [c for c in self._checks.values() if c.metadata.level == level]

    def clear(self) -> None:
        """Remove all registered checks."""
        self._checks.clear()


# Global default registry
_default_registry: CheckRegistry | None = None


def get_default_registry() -> CheckRegistry:
    """Get the default global check registry.

    Returns:
        The default CheckRegistry instance
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = CheckRegistry()
    return _default_registry
