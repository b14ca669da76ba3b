"""
Loading of the pool dataset and the opportunity list from JSON files.

Pool records are accepted in the subgraph shape

    {"id": "0x..", "token0": {"id": "0x..", "decimals": "18"},
     "token1": {...}, "reserve0": "123.45", "reserve1": "678.9"}

or the flat shape {"tokenA", "tokenB", "reserveA", "reserveB",
"decimalsA", "decimalsB"}. Opportunities are {"path": [...], "inputAmount": "1.5"},
optionally with the "expectedProfit" predicted by the search.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import DataError, MalformedDecimal, ValidationError
from .types import Opportunity, PoolRecord
from .units import DEFAULT_DECIMALS, to_minor_units
from .utils import get_logger

logger = get_logger(__name__)


def read_json(path: Union[str, Path]) -> Any:
    """
    Read a JSON file.

    Raises:
        DataError: If the file is missing, unreadable or not valid JSON
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise DataError(f"Input file not found: {path}", source=str(path)) from None
    except json.JSONDecodeError as e:
        raise DataError(f"Invalid JSON in {path}: {e}", source=str(path)) from e
    except OSError as e:
        raise DataError(f"Cannot read {path}: {e}", source=str(path)) from e


def _unwrap(data: Any, keys: List[str], source: str) -> List[Any]:
    """Accept a bare list or a list nested under one of keys."""
    if isinstance(data, dict):
        if "data" in data and isinstance(data["data"], dict):
            data = data["data"]
        for key in keys:
            if key in data:
                data = data[key]
                break
    if not isinstance(data, list):
        raise DataError(f"Expected a list of records in {source}", source=source)
    return data


def _token_id(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("id")
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Invalid token identifier: {value!r}")
    return value.strip().lower()


def _decimals(value: Any, default: int) -> int:
    # falsy decimals (missing, null, "", 0) fall back to the default
    if not value:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid decimals: {value!r}") from None


def _amount(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_pool(raw: Dict[str, Any], default_decimals: int = DEFAULT_DECIMALS) -> PoolRecord:
    """
    Build a PoolRecord from either supported record shape.

    Raises:
        ValidationError: If required fields are missing or invalid
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"Pool record must be an object, got {type(raw).__name__}")

    if "token0" in raw and "token1" in raw:
        token0, token1 = raw["token0"], raw["token1"]
        return PoolRecord(
            token_a=_token_id(token0),
            token_b=_token_id(token1),
            reserve_a=_amount(raw.get("reserve0")),
            reserve_b=_amount(raw.get("reserve1")),
            decimals_a=_decimals(
                token0.get("decimals") if isinstance(token0, dict) else None,
                default_decimals,
            ),
            decimals_b=_decimals(
                token1.get("decimals") if isinstance(token1, dict) else None,
                default_decimals,
            ),
            pair_id=raw.get("id"),
        )

    if "tokenA" in raw and "tokenB" in raw:
        return PoolRecord(
            token_a=_token_id(raw["tokenA"]),
            token_b=_token_id(raw["tokenB"]),
            reserve_a=_amount(raw.get("reserveA")),
            reserve_b=_amount(raw.get("reserveB")),
            decimals_a=_decimals(raw.get("decimalsA"), default_decimals),
            decimals_b=_decimals(raw.get("decimalsB"), default_decimals),
            pair_id=raw.get("id"),
        )

    raise ValidationError("Pool record has neither token0/token1 nor tokenA/tokenB")


def parse_opportunity(raw: Dict[str, Any], index: int = 0) -> Opportunity:
    """
    Build an Opportunity from a {"path", "inputAmount"} record.

    Raises:
        ValidationError: If the path is missing or shorter than 2 tokens
    """
    if not isinstance(raw, dict):
        raise ValidationError(
            f"Opportunity {index} must be an object, got {type(raw).__name__}"
        )

    path = raw.get("path")
    if not isinstance(path, list) or len(path) < 2:
        raise ValidationError(f"Opportunity {index} needs a path of at least 2 tokens")

    input_amount = raw.get("inputAmount", raw.get("input_amount"))
    expected_profit = raw.get("expectedProfit", raw.get("expected_profit"))
    if expected_profit is not None:
        expected_profit = _amount(expected_profit)
        try:
            to_minor_units(expected_profit, DEFAULT_DECIMALS)
        except MalformedDecimal as e:
            raise ValidationError(f"Opportunity {index}: {e}") from e
    return Opportunity(
        path=tuple(_token_id(t) for t in path),
        input_amount=_amount(input_amount),
        index=index,
        expected_profit=expected_profit,
    )


def load_pools(
    path: Union[str, Path], default_decimals: int = DEFAULT_DECIMALS
) -> List[PoolRecord]:
    """
    Load the pool dataset.

    Raises:
        DataError: If the file cannot be read or a record is invalid
    """
    source = str(path)
    records = _unwrap(read_json(path), ["pools", "pairs"], source)

    pools = []
    for i, raw in enumerate(records):
        try:
            pools.append(parse_pool(raw, default_decimals))
        except ValidationError as e:
            raise DataError(f"Pool record {i} in {source}: {e}", source=source) from e

    logger.info(f"Loaded {len(pools)} pools from {source}")
    return pools


def load_opportunities(
    path: Union[str, Path], limit: Optional[int] = None
) -> List[Opportunity]:
    """
    Load the candidate cycles, keeping input order.

    Args:
        path: JSON file
        limit: Keep only the first N cycles

    Raises:
        DataError: If the file cannot be read or a record is invalid
    """
    source = str(path)
    records = _unwrap(read_json(path), ["opportunities", "cycles"], source)
    if limit is not None:
        records = records[:limit]

    opportunities = []
    for i, raw in enumerate(records):
        try:
            opportunities.append(parse_opportunity(raw, i))
        except ValidationError as e:
            raise DataError(f"{e} ({source})", source=source) from e

    logger.info(f"Loaded {len(opportunities)} cycles to audit from {source}")
    return opportunities
