"""
Provisions per-hop pool reserves in the environment from real pool data.
"""

from typing import Dict, FrozenSet, Iterable, Optional

from .environment import ExecutionEnvironment
from .exceptions import ExecutionEnvironmentError, PoolNotFound
from .registry import TokenRegistry
from .types import PoolRecord
from .units import to_minor_units
from .utils import get_logger, short_id

logger = get_logger(__name__)


class PoolReserveSynthesizer:
    """
    Mirrors real reserves onto the synthetic pool for each hop.

    Lookup is direction-agnostic: a record stored as (A, B) serves a hop
    B -> A with its reserves and decimals swapped. Reserves are set again on
    every cycle that uses the pair, so cycles never see each other's swaps.
    """

    def __init__(
        self,
        environment: ExecutionEnvironment,
        registry: TokenRegistry,
        pools: Iterable[PoolRecord],
        strict: bool = False,
    ):
        """
        Args:
            environment: Execution environment to provision
            registry: Token registry holding the synthetic handles
            pools: Real pool dataset
            strict: Raise PoolNotFound for unmatched hops instead of skipping
        """
        self.environment = environment
        self.registry = registry
        self.strict = strict
        self._index: Dict[FrozenSet[str], PoolRecord] = {}

        for pool in pools:
            key = pool.pair_key
            if key in self._index:
                # First record wins, same as a linear search
                logger.debug(f"Ignoring duplicate pool record {pool.pair_id}")
                continue
            self._index[key] = pool

    def __len__(self) -> int:
        return len(self._index)

    def find_pool(self, token_a: str, token_b: str) -> Optional[PoolRecord]:
        return self._index.get(frozenset((token_a, token_b)))

    def provision(self, hop_from: str, hop_to: str) -> bool:
        """
        Set reserves for the hop hop_from -> hop_to.

        Returns:
            True if reserves were set, False if no record matched and the hop
            was left at the environment's default reserves

        Raises:
            PoolNotFound: If no record matched and strict mode is on
            MalformedDecimal: If a reserve value cannot be parsed
            ExecutionEnvironmentError: If set_reserve fails
        """
        pool = self.find_pool(hop_from, hop_to)
        if pool is None:
            if self.strict:
                raise PoolNotFound(hop_from, hop_to)
            logger.debug(
                f"No pool for {short_id(hop_from)} -> {short_id(hop_to)}, "
                f"keeping default reserves"
            )
            return False

        reserve_from, reserve_to, dec_from, dec_to = pool.oriented(hop_from)
        units_from = to_minor_units(reserve_from, dec_from)
        units_to = to_minor_units(reserve_to, dec_to)

        handle_from = self.registry.resolve(hop_from)
        handle_to = self.registry.resolve(hop_to)

        try:
            self.environment.set_reserve(handle_from, handle_to, units_from, units_to)
        except ExecutionEnvironmentError:
            raise
        except Exception as e:
            raise ExecutionEnvironmentError(
                f"set_reserve failed for {hop_from} -> {hop_to}: {e}",
                operation="set_reserve",
            ) from e

        logger.debug(
            f"Reserves {short_id(hop_from)}={units_from} "
            f"{short_id(hop_to)}={units_to}"
        )
        return True
