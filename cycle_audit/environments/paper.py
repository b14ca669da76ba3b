"""
Paper Execution Environment

In-memory stand-in for a local chain with a mock router and arbitrage
contract. Pools are integer constant-product pools with the fee taken from
the input amount, balances and allowances behave like ERC20, and a swap
path that returns less than min_profit reverts without side effects.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..exceptions import ExecutionEnvironmentError
from ..types import Receipt
from ..utils import get_logger

logger = get_logger(__name__)

BPS = 10_000


@dataclass
class PaperToken:
    """Balances and allowances of a synthetic ERC20 token."""

    address: str
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)


def amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """
    Constant-product output in integer units, rounded down:

        amountInWithFee = amountIn * (10000 - fee_bps)
        amountOut = amountInWithFee * reserveOut / (reserveIn * 10000 + amountInWithFee)
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    amount_in_with_fee = amount_in * (BPS - fee_bps)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS + amount_in_with_fee
    return numerator // denominator


class PaperEnvironment:
    """
    Deterministic execution environment for offline audits and tests.

    Features:
    - Unlimited token deployment with sequential addresses
    - Per-pair reserves, overwritten by set_reserve
    - Break-even floor enforcement on execute_arbitrage
    - Fixed gas model: base_gas + gas_per_hop * hops
    """

    OPERATOR = "0x" + "a" * 40
    EXECUTOR = "0x" + "b" * 40

    def __init__(
        self,
        fee_bps: int = 30,
        base_gas: int = 60_000,
        gas_per_hop: int = 45_000,
        default_reserve: int = 0,
    ):
        """
        Args:
            fee_bps: Pool fee in basis points applied on every hop
            base_gas: Gas charged for any execute_arbitrage call
            gas_per_hop: Additional gas per swap in the path
            default_reserve: Reserve on both sides of a pair that was never
                set (0 leaves unprovisioned pairs dry)
        """
        self.fee_bps = fee_bps
        self.base_gas = base_gas
        self.gas_per_hop = gas_per_hop
        self.default_reserve = default_reserve

        self.tokens: Dict[str, PaperToken] = {}
        self.reserves: Dict[FrozenSet[str], Dict[str, int]] = {}
        self._tx_count = 0

        self.metrics = {
            "tokens_created": 0,
            "reserves_set": 0,
            "executions": 0,
            "reverts": 0,
        }

    @property
    def operator(self) -> str:
        return self.OPERATOR

    def _token(self, address: str) -> PaperToken:
        try:
            return self.tokens[address]
        except KeyError:
            raise ExecutionEnvironmentError(
                f"Unknown token {address}", operation="token"
            ) from None

    def _next_tx_hash(self) -> str:
        self._tx_count += 1
        return f"0x{self._tx_count:064x}"

    def create_token(self) -> str:
        address = f"0x{len(self.tokens) + 1:040x}"
        self.tokens[address] = PaperToken(address)
        self.metrics["tokens_created"] += 1
        return address

    def set_reserve(
        self, token_a: str, token_b: str, reserve_a: int, reserve_b: int
    ) -> None:
        self._token(token_a)
        self._token(token_b)
        if reserve_a < 0 or reserve_b < 0:
            raise ExecutionEnvironmentError(
                "Reserves must be non-negative", operation="set_reserve"
            )
        self.reserves[frozenset((token_a, token_b))] = {
            token_a: int(reserve_a),
            token_b: int(reserve_b),
        }
        self.metrics["reserves_set"] += 1

    def _default_pool(self, token_a: str, token_b: str) -> Optional[Dict[str, int]]:
        if self.default_reserve <= 0:
            return None
        return {token_a: self.default_reserve, token_b: self.default_reserve}

    def get_reserves(self, token_in: str, token_out: str) -> Tuple[int, int]:
        pool = self.reserves.get(
            frozenset((token_in, token_out))
        ) or self._default_pool(token_in, token_out)
        if pool is None:
            return 0, 0
        return pool[token_in], pool[token_out]

    def mint(self, token: str, account: str, amount: int) -> None:
        tok = self._token(token)
        tok.balances[account] = tok.balances.get(account, 0) + int(amount)

    def approve(self, token: str, amount: int, spender: Optional[str] = None) -> None:
        tok = self._token(token)
        tok.allowances[(self.operator, spender or self.EXECUTOR)] = int(amount)

    def balance_of(self, token: str, account: str) -> int:
        return self._token(token).balances.get(account, 0)

    def quote_path(self, path: Sequence[str], amount_in: int) -> List[int]:
        """Amounts after each hop, without touching state."""
        reserves = {key: dict(pool) for key, pool in self.reserves.items()}
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            pair = frozenset((token_in, token_out))
            if pair not in reserves:
                default = self._default_pool(token_in, token_out)
                if default is None:
                    amounts.append(0)
                    continue
                reserves[pair] = default
            pool = reserves[pair]
            out = amount_out(amounts[-1], pool[token_in], pool[token_out], self.fee_bps)
            pool[token_in] += amounts[-1]
            pool[token_out] -= out
            amounts.append(out)
        return amounts

    def execute_arbitrage(
        self, path: Sequence[str], amount_in: int, min_profit: int
    ) -> Receipt:
        """
        Pull amount_in of path[0] from the operator, swap along the path and
        pay the final output back.

        Raises:
            ExecutionEnvironmentError: On missing allowance/balance, a dry
                hop, or output below min_profit (state is left untouched)
        """
        self.metrics["executions"] += 1
        if len(path) < 2:
            return self._revert("path too short")

        start = self._token(path[0])
        for address in path[1:]:
            self._token(address)

        key = (self.operator, self.EXECUTOR)
        if start.allowances.get(key, 0) < amount_in:
            return self._revert("insufficient allowance")
        if start.balances.get(self.operator, 0) < amount_in:
            return self._revert("insufficient balance")

        amounts = self.quote_path(path, amount_in)
        if any(a <= 0 for a in amounts[1:]):
            return self._revert("insufficient output amount")

        final = amounts[-1]
        if final < min_profit:
            return self._revert(f"output {final} below minimum {min_profit}")

        # Commit: pool reserves, allowance, balances
        for (token_in, token_out), a_in, a_out in zip(
            zip(path, path[1:]), amounts, amounts[1:]
        ):
            pool = self.reserves.setdefault(
                frozenset((token_in, token_out)),
                self._default_pool(token_in, token_out),
            )
            pool[token_in] += a_in
            pool[token_out] -= a_out

        start.allowances[key] -= amount_in
        start.balances[self.operator] -= amount_in
        end = self.tokens[path[-1]]
        end.balances[self.operator] = end.balances.get(self.operator, 0) + final

        gas_used = self.base_gas + self.gas_per_hop * (len(path) - 1)
        return Receipt(gas_used=gas_used, status=1, tx_hash=self._next_tx_hash())

    def _revert(self, reason: str) -> Receipt:
        self.metrics["reverts"] += 1
        logger.debug(f"PAPER: execute_arbitrage reverted: {reason}")
        raise ExecutionEnvironmentError(
            f"execution reverted: {reason}", operation="execute_arbitrage"
        )
