"""Unit tests for checks and the check registry."""

import pytest

from cert_preflight.checks import Check, CheckRegistry, GenericCheck, get_default_registry
from cert_preflight.models.check import CheckLevel, CheckMetadata


class TestGenericCheck:
    """Tests for GenericCheck."""

    def test_defaults(self):
        check = GenericCheck("HasLicense", lambda ref: True)
        assert isinstance(check, Check)
        assert check.metadata.description == "HasLicense"
        assert check.metadata.level == CheckLevel.GOOD
        assert check.help_text.message == "Check HasLicense did not pass"

    def test_validate_delegates(self, image_ref):
        seen = []
        check = GenericCheck("Spy", lambda ref: seen.append(ref) or True)
        assert check.validate(image_ref) is True
        assert seen == [image_ref]


class TestCheckRegistry:
    """Tests for CheckRegistry."""

    def test_register_and_get(self, always_pass):
        registry = CheckRegistry()
        registry.register(always_pass)

        assert "AlwaysPass" in registry
        assert registry.get("AlwaysPass") is always_pass
        assert registry["AlwaysPass"] is always_pass
        assert registry.get("Missing") is None
        assert len(registry) == 1

    def test_duplicate_rejected(self, always_pass):
        registry = CheckRegistry()
        registry.register(always_pass)
        with pytest.raises(ValueError, match="already registered"):
            registry.register(always_pass)

    def test_unregister(self, always_pass):
        registry = CheckRegistry()
        registry.register(always_pass)
        registry.unregister("AlwaysPass")
        assert "AlwaysPass" not in registry
        with pytest.raises(KeyError):
            registry.unregister("AlwaysPass")
        with pytest.raises(KeyError):
            registry["AlwaysPass"]

    def test_registration_order(self, always_fail, always_pass, always_error):
        registry = CheckRegistry()
        for check in (always_fail, always_pass, always_error):
            registry.register(check)

        assert registry.names == ["AlwaysFail", "AlwaysPass", "AlwaysError"]
        assert [c.name for c in registry] == registry.names
        assert [c.name for c in registry.checks] == registry.names

    def test_at_level(self, always_pass):
        registry = CheckRegistry()
        registry.register(always_pass)
        registry.register(
            GenericCheck("Best", lambda ref: True, metadata=CheckMetadata(description="b", level=CheckLevel.BEST))
        )
        assert [c.name for c in registry.at_level(CheckLevel.BEST)] == ["Best"]

    def test_clear(self, always_pass):
        registry = CheckRegistry()
        registry.register(always_pass)
        registry.clear()
        assert len(registry) == 0

    def test_default_registry_is_shared(self):
        assert get_default_registry() is get_default_registry()
