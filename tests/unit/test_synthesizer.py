"""
Unit tests for cycle_audit/synthesizer.py

Verifies direction-agnostic pool lookup, orientation of reserves and
decimals, and the silent/strict pool-miss policies.
"""

from unittest.mock import MagicMock

import pytest

from cycle_audit.exceptions import ExecutionEnvironmentError, MalformedDecimal, PoolNotFound
from cycle_audit.registry import TokenRegistry
from cycle_audit.synthesizer import PoolReserveSynthesizer
from cycle_audit.types import PoolRecord

WETH = "0xweth"
USDC = "0xusdc"
DAI = "0xdai"

WETH_USDC = PoolRecord(
    token_a=WETH,
    token_b=USDC,
    reserve_a="1000.5",
    reserve_b="2000000.25",
    decimals_a=18,
    decimals_b=6,
    pair_id="0xpair1",
)


@pytest.fixture
def environment():
    env = MagicMock()
    env.create_token.side_effect = ["0xS_WETH", "0xS_USDC", "0xS_DAI"]
    return env


@pytest.fixture
def registry(environment):
    registry = TokenRegistry(environment)
    for token in (WETH, USDC, DAI):
        registry.get_or_create(token)
    return registry


class TestPoolLookup:
    """Test direction-agnostic lookup."""

    def test_find_both_directions(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        assert synth.find_pool(WETH, USDC) is WETH_USDC
        assert synth.find_pool(USDC, WETH) is WETH_USDC
        assert synth.find_pool(WETH, DAI) is None

    def test_first_duplicate_wins(self, environment, registry):
        duplicate = PoolRecord(USDC, WETH, "1", "1", pair_id="0xdup")
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC, duplicate])

        assert len(synth) == 1
        assert synth.find_pool(USDC, WETH).pair_id == "0xpair1"


class TestProvision:
    """Test reserve provisioning."""

    def test_canonical_orientation(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        assert synth.provision(WETH, USDC) is True

        environment.set_reserve.assert_called_once_with(
            "0xS_WETH", "0xS_USDC", 1000500000000000000000, 2000000250000
        )

    def test_reverse_orientation_swaps_reserves_and_decimals(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        assert synth.provision(USDC, WETH) is True

        environment.set_reserve.assert_called_once_with(
            "0xS_USDC", "0xS_WETH", 2000000250000, 1000500000000000000000
        )

    def test_missing_pool_is_silently_skipped(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        assert synth.provision(WETH, DAI) is False
        environment.set_reserve.assert_not_called()

    def test_missing_pool_strict(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC], strict=True)

        with pytest.raises(PoolNotFound) as exc_info:
            synth.provision(WETH, DAI)
        assert exc_info.value.token_a == WETH
        assert exc_info.value.token_b == DAI

    def test_reprovisioning_resets_reserves(self, environment, registry):
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        synth.provision(WETH, USDC)
        synth.provision(WETH, USDC)

        assert environment.set_reserve.call_count == 2

    def test_malformed_reserve(self, environment, registry):
        bad = PoolRecord(WETH, DAI, "lots", "100.0")
        synth = PoolReserveSynthesizer(environment, registry, [bad])

        with pytest.raises(MalformedDecimal):
            synth.provision(WETH, DAI)
        environment.set_reserve.assert_not_called()

    def test_set_reserve_failure_is_environment_error(self, environment, registry):
        environment.set_reserve.side_effect = RuntimeError("rpc timeout")
        synth = PoolReserveSynthesizer(environment, registry, [WETH_USDC])

        with pytest.raises(ExecutionEnvironmentError) as exc_info:
            synth.provision(WETH, USDC)
        assert exc_info.value.operation == "set_reserve"
