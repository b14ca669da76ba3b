"""
JSON-RPC execution environment backed by web3.

Deploys the mock router, the arbitrage contract and one mock ERC20 per real
token on a local development node (Anvil, Hardhat, Ganache) and drives them
with blocking transactions. The operator is the node's first unlocked
account, or a local account when a private key is supplied.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import ContractLogicError, Web3Exception

from ..exceptions import ExecutionEnvironmentError, RunFatalError
from ..types import Receipt
from ..utils import get_logger

logger = get_logger(__name__)


def load_artifact(path: Union[str, Path]) -> Tuple[list, str]:
    """
    Read ABI and bytecode from a compiled contract artifact.

    Supports Remix ({abi, data.bytecode.object}), Hardhat ({abi, bytecode})
    and Foundry ({abi, bytecode.object}) layouts.

    Raises:
        RunFatalError: If the file is missing or has no ABI/bytecode
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            meta = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RunFatalError(f"Cannot load artifact {path}: {e}") from e

    abi = meta.get("abi")
    bytecode: Any = meta.get("bytecode")
    if bytecode is None and isinstance(meta.get("data"), dict):
        bytecode = meta["data"].get("bytecode")
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")

    if not abi or not bytecode:
        raise RunFatalError(f"Artifact {path} is missing abi or bytecode")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return abi, bytecode


class Web3Environment:
    """
    Execution environment on a live development chain.

    Every state-changing call waits for its receipt. A failed receipt or a
    contract revert surfaces as ExecutionEnvironmentError.
    """

    def __init__(
        self,
        web3: Web3,
        artifacts: Dict[str, str],
        private_key: Optional[str] = None,
    ):
        """
        Initialize the environment and deploy router and arbitrage contract.

        Args:
            web3: Connected Web3 instance
            artifacts: Paths of the router, bot and token artifacts
            private_key: Sign transactions locally with this key

        Raises:
            RunFatalError: If no account is available or deployment fails
        """
        self.web3 = web3

        self.account: Optional[LocalAccount] = None
        if private_key:
            try:
                self.account = Account.from_key(private_key)
            except (ValueError, TypeError) as e:
                raise RunFatalError(f"Invalid private key: {e}") from e
            self._operator = self.account.address
        else:
            accounts = web3.eth.accounts
            if not accounts:
                raise RunFatalError("Node exposes no unlocked accounts")
            self._operator = accounts[0]
        logger.info(f"Operating account: {self._operator}")

        self.token_abi, self.token_bytecode = load_artifact(artifacts["token"])
        router_abi, router_bytecode = load_artifact(artifacts["router"])
        bot_abi, bot_bytecode = load_artifact(artifacts["bot"])

        try:
            self.router = self._deploy(router_abi, router_bytecode)
            self.bot = self._deploy(bot_abi, bot_bytecode, self.router.address)
        except ExecutionEnvironmentError as e:
            raise RunFatalError(f"Contract deployment failed: {e}") from e

        logger.info(f"Router: {self.router.address} | Bot: {self.bot.address}")
        self._tokens: Dict[str, Contract] = {}

    @classmethod
    def connect(
        cls,
        rpc_url: str,
        artifacts: Dict[str, str],
        private_key: Optional[str] = None,
        timeout_sec: int = 30,
    ) -> "Web3Environment":
        """
        Connect to a node and build the environment.

        Raises:
            RunFatalError: If the node is unreachable
        """
        web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_sec}))
        if not web3.is_connected():
            raise RunFatalError(f"Web3 not connected; bad rpc_url? ({rpc_url})")
        logger.info(f"Connected to {rpc_url} (chain id {web3.eth.chain_id})")
        return cls(web3, artifacts, private_key=private_key)

    @property
    def operator(self) -> str:
        return self._operator

    # Transactions

    def _send(self, operation: str, call) -> Dict[str, Any]:
        """Send a contract call or constructor and wait for the receipt."""
        try:
            if self.account is None:
                tx_hash = call.transact({"from": self._operator})
            else:
                tx = call.build_transaction(
                    {
                        "from": self._operator,
                        "nonce": self.web3.eth.get_transaction_count(self._operator),
                        "chainId": self.web3.eth.chain_id,
                    }
                )
                signed = self.account.sign_transaction(tx)
                tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash)
        except ContractLogicError as e:
            raise ExecutionEnvironmentError(
                f"{operation} reverted: {e}", operation=operation
            ) from e
        except (Web3Exception, ValueError, OSError) as e:
            raise ExecutionEnvironmentError(
                f"{operation} failed: {e}", operation=operation
            ) from e

        if receipt["status"] == 0:
            raise ExecutionEnvironmentError(
                f"{operation} reverted (status 0)", operation=operation
            )
        return receipt

    def _deploy(self, abi: list, bytecode: str, *args) -> Contract:
        factory = self.web3.eth.contract(abi=abi, bytecode=bytecode)
        receipt = self._send("deploy", factory.constructor(*args))
        return self.web3.eth.contract(address=receipt["contractAddress"], abi=abi)

    def _token(self, address: str) -> Contract:
        token = self._tokens.get(address)
        if token is None:
            token = self.web3.eth.contract(address=address, abi=self.token_abi)
            self._tokens[address] = token
        return token

    # ExecutionEnvironment operations

    def create_token(self) -> str:
        token = self._deploy(self.token_abi, self.token_bytecode)
        self._tokens[token.address] = token
        return token.address

    def set_reserve(
        self, token_a: str, token_b: str, reserve_a: int, reserve_b: int
    ) -> None:
        self._send(
            "set_reserve",
            self.router.functions.setReserve(token_a, token_b, reserve_a, reserve_b),
        )

    def mint(self, token: str, account: str, amount: int) -> None:
        self._send("mint", self._token(token).functions.mint(account, amount))

    def approve(self, token: str, amount: int, spender: Optional[str] = None) -> None:
        spender = spender or self.bot.address
        self._send("approve", self._token(token).functions.approve(spender, amount))

    def balance_of(self, token: str, account: str) -> int:
        try:
            return int(self._token(token).functions.balanceOf(account).call())
        except (Web3Exception, ValueError, OSError) as e:
            raise ExecutionEnvironmentError(
                f"balance_of failed: {e}", operation="balance_of"
            ) from e

    def execute_arbitrage(
        self, path: Sequence[str], amount_in: int, min_profit: int
    ) -> Receipt:
        params = (list(path), amount_in, min_profit)
        receipt = self._send(
            "execute_arbitrage", self.bot.functions.executeArbitrage(params)
        )
        return Receipt(
            gas_used=int(receipt["gasUsed"]),
            status=int(receipt["status"]),
            tx_hash=self.web3.to_hex(receipt["transactionHash"]),
        )
