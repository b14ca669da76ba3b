"""
Unit tests for cycle_audit/registry.py
"""

from unittest.mock import MagicMock

import pytest

from cycle_audit.exceptions import ExecutionEnvironmentError, ValidationError
from cycle_audit.registry import TokenRegistry


@pytest.fixture
def environment():
    env = MagicMock()
    env.create_token.side_effect = ["0xsynth1", "0xsynth2", "0xsynth3"]
    return env


class TestTokenRegistry:
    """Test idempotent token registration."""

    def test_same_id_creates_once(self, environment):
        registry = TokenRegistry(environment)

        first = registry.get_or_create("0xweth")
        second = registry.get_or_create("0xweth")

        assert first == second == "0xsynth1"
        assert environment.create_token.call_count == 1
        assert registry.creations == 1

    def test_distinct_ids(self, environment):
        registry = TokenRegistry(environment)

        assert registry.get_or_create("0xweth") == "0xsynth1"
        assert registry.get_or_create("0xusdc") == "0xsynth2"
        assert len(registry) == 2
        assert registry.address_map == {"0xweth": "0xsynth1", "0xusdc": "0xsynth2"}

    def test_address_map_is_a_copy(self, environment):
        registry = TokenRegistry(environment)
        registry.get_or_create("0xweth")

        registry.address_map["0xweth"] = "0xother"

        assert registry.resolve("0xweth") == "0xsynth1"

    def test_failed_creation_is_not_recorded(self):
        env = MagicMock()
        env.create_token.side_effect = [
            ExecutionEnvironmentError("deploy failed", operation="create_token"),
            "0xsynth1",
        ]
        registry = TokenRegistry(env)

        with pytest.raises(ExecutionEnvironmentError):
            registry.get_or_create("0xweth")
        assert "0xweth" not in registry

        # retry is possible
        assert registry.get_or_create("0xweth") == "0xsynth1"

    def test_foreign_errors_are_wrapped(self):
        env = MagicMock()
        env.create_token.side_effect = RuntimeError("node down")
        registry = TokenRegistry(env)

        with pytest.raises(ExecutionEnvironmentError) as exc_info:
            registry.get_or_create("0xweth")
        assert exc_info.value.operation == "create_token"

    def test_resolve_unknown(self, environment):
        registry = TokenRegistry(environment)
        with pytest.raises(ValidationError):
            registry.resolve("0xmissing")

    def test_translate(self, environment):
        registry = TokenRegistry(environment)
        for real_id in ["0xweth", "0xusdc"]:
            registry.get_or_create(real_id)

        assert registry.translate(["0xweth", "0xusdc", "0xweth"]) == [
            "0xsynth1",
            "0xsynth2",
            "0xsynth1",
        ]
