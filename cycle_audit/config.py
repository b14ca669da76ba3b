"""
Configuration loading and validation for the cycle audit.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError, MalformedDecimal
from .units import DEFAULT_DECIMALS, gwei_to_price_per_unit

ENVIRONMENTS = ("paper", "web3")
MIN_PROFIT_MODES = ("break_even", "zero")

DEFAULT_GAS_PRICE_GWEI = 32


def check_gas_price(price: Decimal) -> Decimal:
    """
    Reject gas prices that would break the accounting.

    Raises:
        ConfigError: If the price is NaN, infinite or negative
    """
    if not price.is_finite():
        raise ConfigError(f"Gas price must be a finite number, got {price}")
    if price < 0:
        raise ConfigError(f"Gas price must be non-negative, got {price}")
    return price


class AuditConfig:
    """
    Parsed and validated configuration for an audit run.

    Attributes:
        pools_file: JSON pool dataset
        opportunities_file: JSON list of candidate cycles
        environment: "paper" (in-memory) or "web3" (JSON-RPC node)
        gas_price_per_unit: Price of one gas unit in the profit asset (Decimal)
        default_decimals: Decimals used when a token's are unspecified
        profit_decimals: Decimals of the profit asset (start token)
        strict_pools: Fail a cycle when a hop has no pool record
        min_profit_mode: "break_even" (floor = input) or "zero" (no floor)
        limit: Audit only the first N opportunities
        rpc_url: Node endpoint for the web3 environment
        rpc_timeout_sec: HTTP request timeout for the node
        private_key_env: Env var holding a signing key (optional)
        artifacts: Compiled contract artifacts {router, bot, token}
        paper: Paper environment settings
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config

        Raises:
            ConfigError: If fields are invalid
        """
        config_dict = config_dict or {}

        # Inputs
        self.pools_file: str = config_dict.get("pools_file", "v2pools.json")
        self.opportunities_file: str = config_dict.get(
            "opportunities_file", "weth_opportunities.json"
        )
        self.limit: Optional[int] = self._parse_limit(config_dict.get("limit"))

        # Environment
        self.environment: str = config_dict.get("environment", "paper")
        if self.environment not in ENVIRONMENTS:
            raise ConfigError(
                f"Invalid environment '{self.environment}' (must be one of {', '.join(ENVIRONMENTS)})"
            )

        # Accounting policy
        self.gas_price_per_unit: Decimal = self._parse_gas_price(config_dict)
        self.default_decimals: int = self._parse_decimals(
            config_dict, "default_decimals"
        )
        self.profit_decimals: int = self._parse_decimals(config_dict, "profit_decimals")
        self.strict_pools: bool = bool(config_dict.get("strict_pools", False))

        self.min_profit_mode: str = config_dict.get("min_profit_mode", "break_even")
        if self.min_profit_mode not in MIN_PROFIT_MODES:
            raise ConfigError(
                f"Invalid min_profit_mode '{self.min_profit_mode}' (must be break_even or zero)"
            )

        # Web3 environment
        self.rpc_url: Optional[str] = os.getenv("AUDIT_RPC_URL") or config_dict.get(
            "rpc_url"
        )
        self.rpc_timeout_sec: int = int(config_dict.get("rpc_timeout_sec", 30))
        self.private_key_env: str = config_dict.get(
            "private_key_env", "AUDIT_PRIVATE_KEY"
        )
        self.artifacts: Dict[str, str] = self._parse_artifacts(
            config_dict.get("artifacts", {})
        )

        # Paper environment
        self.paper: Dict[str, int] = self._parse_paper(config_dict.get("paper", {}))

    @staticmethod
    def _parse_limit(limit: Any) -> Optional[int]:
        if limit is None:
            return None
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ConfigError(f"limit must be an integer, got {limit!r}") from None
        if limit <= 0:
            raise ConfigError(f"limit must be positive, got {limit}")
        return limit

    @staticmethod
    def _parse_gas_price(d: Dict[str, Any]) -> Decimal:
        """Gas price per unit from gas_price_per_unit or gas_price_gwei."""
        try:
            if "gas_price_per_unit" in d:
                price = Decimal(str(d["gas_price_per_unit"]))
            else:
                price = gwei_to_price_per_unit(
                    d.get("gas_price_gwei", DEFAULT_GAS_PRICE_GWEI)
                )
        except (InvalidOperation, ValueError, MalformedDecimal) as e:
            raise ConfigError(f"Invalid gas price: {e}") from e
        return check_gas_price(price)

    @staticmethod
    def _parse_decimals(d: Dict[str, Any], key: str) -> int:
        val = d.get(key, DEFAULT_DECIMALS)
        try:
            val = int(val)
        except (TypeError, ValueError):
            raise ConfigError(f"Config field '{key}' must be an integer") from None
        if not 0 <= val <= 77:
            raise ConfigError(f"Config field '{key}' out of range: {val}")
        return val

    @staticmethod
    def _parse_artifacts(artifacts_raw: Dict[str, Any]) -> Dict[str, str]:
        if not isinstance(artifacts_raw, dict):
            raise ConfigError("artifacts must be a dict")
        artifacts = {
            "router": "artifacts/MockRouter.json",
            "bot": "artifacts/ArbitrageBot.json",
            "token": "artifacts/MockERC20.json",
        }
        for name, path in artifacts_raw.items():
            if name not in artifacts:
                raise ConfigError(f"Unknown artifact '{name}'")
            artifacts[name] = str(path)
        return artifacts

    @staticmethod
    def _parse_paper(paper_raw: Dict[str, Any]) -> Dict[str, int]:
        if not isinstance(paper_raw, dict):
            raise ConfigError("paper must be a dict")
        try:
            paper = {
                "fee_bps": int(paper_raw.get("fee_bps", 30)),
                "base_gas": int(paper_raw.get("base_gas", 60_000)),
                "gas_per_hop": int(paper_raw.get("gas_per_hop", 45_000)),
                "default_reserve": int(paper_raw.get("default_reserve", 0)),
            }
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid paper settings: {e}") from e
        if not 0 <= paper["fee_bps"] < 10_000:
            raise ConfigError(f"paper.fee_bps out of range: {paper['fee_bps']}")
        if paper["default_reserve"] < 0:
            raise ConfigError(
                f"paper.default_reserve must be non-negative, got {paper['default_reserve']}"
            )
        return paper

    def validate_web3(self) -> None:
        """Check that the web3 environment can be built."""
        if not self.rpc_url:
            raise ConfigError("rpc_url is required for the web3 environment")

    @property
    def gas_price_gwei(self) -> Decimal:
        return self.gas_price_per_unit.scaleb(9)

    @property
    def private_key(self) -> Optional[str]:
        return os.getenv(self.private_key_env) or None


def load_config(config_path: Optional[str] = None) -> AuditConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file, None for defaults

    Returns:
        Validated AuditConfig instance

    Raises:
        ConfigError: If config invalid or file not found
    """
    if config_path is None:
        return AuditConfig({})

    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError("Config file must contain a YAML dictionary")

    return AuditConfig(config_dict)
