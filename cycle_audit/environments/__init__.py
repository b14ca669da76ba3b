"""
Execution environment adapters.
"""

from ..config import AuditConfig
from ..environment import ExecutionEnvironment
from .paper import PaperEnvironment
from .web3_env import Web3Environment


def build_environment(config: AuditConfig) -> ExecutionEnvironment:
    """
    Create the environment selected by config.environment.

    Raises:
        ConfigError: If the web3 environment is missing its rpc_url
        RunFatalError: If the node cannot be reached or contracts not deployed
    """
    if config.environment == "paper":
        return PaperEnvironment(**config.paper)

    config.validate_web3()
    return Web3Environment.connect(
        config.rpc_url,
        config.artifacts,
        private_key=config.private_key,
        timeout_sec=config.rpc_timeout_sec,
    )


__all__ = ["build_environment", "PaperEnvironment", "Web3Environment"]
