"""
Unit tests for the web3 execution environment.

Web3 is mocked; these tests cover artifact parsing, transaction flow and
the mapping of reverts to ExecutionEnvironmentError.
"""

import json
from itertools import count
from unittest.mock import MagicMock

import pytest
from web3 import Web3
from web3.exceptions import ContractLogicError

from cycle_audit.environment import ExecutionEnvironment
from cycle_audit.environments.web3_env import Web3Environment, load_artifact
from cycle_audit.exceptions import ExecutionEnvironmentError, RunFatalError

ABI = [{"type": "function", "name": "noop", "inputs": [], "outputs": []}]


@pytest.fixture
def artifacts(tmp_path):
    paths = {}
    for name in ("router", "bot", "token"):
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps({"abi": ABI, "data": {"bytecode": {"object": "6080"}}}))
        paths[name] = str(path)
    return paths


def make_web3(status=1, gas_used=123456):
    web3 = MagicMock()
    web3.eth.accounts = ["0x" + "1" * 40]
    addresses = count(1)

    def contract(**kwargs):
        c = MagicMock()
        c.address = kwargs.get("address")
        c.constructor.return_value.build_transaction.return_value = {
            "to": "0x" + "2" * 40,
            "data": "0x6080",
            "value": 0,
            "gas": 500_000,
            "gasPrice": 10**9,
            "nonce": 0,
            "chainId": 31337,
        }
        return c

    def receipt(tx_hash):
        return {
            "status": status,
            "gasUsed": gas_used,
            "contractAddress": f"0x{next(addresses):040x}",
            "transactionHash": b"\x01" * 32,
        }

    web3.eth.contract.side_effect = contract
    web3.eth.wait_for_transaction_receipt.side_effect = receipt
    web3.to_hex.side_effect = Web3.to_hex
    return web3


class TestLoadArtifact:
    """Test the supported artifact layouts."""

    @pytest.mark.parametrize(
        "meta",
        [
            {"abi": ABI, "data": {"bytecode": {"object": "6080"}}},  # Remix
            {"abi": ABI, "bytecode": "0x6080"},  # Hardhat
            {"abi": ABI, "bytecode": {"object": "0x6080"}},  # Foundry
        ],
    )
    def test_layouts(self, tmp_path, meta):
        path = tmp_path / "a.json"
        path.write_text(json.dumps(meta))

        abi, bytecode = load_artifact(path)

        assert abi == ABI
        assert bytecode == "0x6080"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RunFatalError):
            load_artifact(tmp_path / "missing.json")

    def test_missing_bytecode(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text(json.dumps({"abi": ABI}))
        with pytest.raises(RunFatalError, match="bytecode"):
            load_artifact(path)


class TestWeb3Environment:
    """Test transaction flow against a mocked node."""

    def test_deploys_router_and_bot(self, artifacts):
        web3 = make_web3()

        env = Web3Environment(web3, artifacts)

        assert isinstance(env, ExecutionEnvironment)
        assert env.operator == "0x" + "1" * 40
        assert env.router.address == f"0x{1:040x}"
        assert env.bot.address == f"0x{2:040x}"

    def test_no_accounts(self, artifacts):
        web3 = make_web3()
        web3.eth.accounts = []
        with pytest.raises(RunFatalError):
            Web3Environment(web3, artifacts)

    def test_deploy_failure_is_fatal(self, artifacts):
        with pytest.raises(RunFatalError, match="deployment"):
            Web3Environment(make_web3(status=0), artifacts)

    def test_create_token(self, artifacts):
        env = Web3Environment(make_web3(), artifacts)

        assert env.create_token() == f"0x{3:040x}"
        assert env.create_token() == f"0x{4:040x}"

    def test_execute_arbitrage_receipt(self, artifacts):
        web3 = make_web3(gas_used=187654)
        env = Web3Environment(web3, artifacts)

        receipt = env.execute_arbitrage(["0xa", "0xb", "0xa"], 10, 10)

        env.bot.functions.executeArbitrage.assert_called_once_with((["0xa", "0xb", "0xa"], 10, 10))
        assert receipt.gas_used == 187654
        assert receipt.status == 1
        assert receipt.tx_hash == "0x" + "01" * 32

    def test_contract_revert(self, artifacts):
        env = Web3Environment(make_web3(), artifacts)
        env.bot.functions.executeArbitrage.return_value.transact.side_effect = ContractLogicError(
            "execution reverted: Arbitrage not profitable"
        )

        with pytest.raises(ExecutionEnvironmentError) as exc_info:
            env.execute_arbitrage(["0xa", "0xb"], 10, 10)
        assert exc_info.value.operation == "execute_arbitrage"
        assert "not profitable" in str(exc_info.value)

    def test_approve_defaults_to_bot(self, artifacts):
        env = Web3Environment(make_web3(), artifacts)
        token = env.create_token()

        env.approve(token, 500)

        env._token(token).functions.approve.assert_called_once_with(env.bot.address, 500)

    def test_balance_of(self, artifacts):
        env = Web3Environment(make_web3(), artifacts)
        token = env.create_token()
        env._token(token).functions.balanceOf.return_value.call.return_value = 42

        assert env.balance_of(token, env.operator) == 42

    def test_signed_transactions(self, artifacts):
        web3 = make_web3()
        web3.eth.get_transaction_count.return_value = 0
        web3.eth.chain_id = 31337
        key = "0x" + "4c" * 32

        env = Web3Environment(web3, artifacts, private_key=key)

        assert env.account is not None
        assert env.operator == env.account.address
        web3.eth.send_raw_transaction.assert_called()

    def test_invalid_private_key(self, artifacts):
        with pytest.raises(RunFatalError, match="private key"):
            Web3Environment(make_web3(), artifacts, private_key="0x1234")
