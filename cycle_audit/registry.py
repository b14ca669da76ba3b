"""
Mapping of real token identifiers to synthetic tokens in the environment.
"""

from typing import Dict, List, Sequence

from .environment import ExecutionEnvironment
from .exceptions import ExecutionEnvironmentError, ValidationError
from .utils import get_logger, short_id

logger = get_logger(__name__)


class TokenRegistry:
    """
    Idempotent token registration for one audit run.

    Each distinct real identifier triggers exactly one create_token request;
    the resulting handle is reused by every later cycle. Entries are never
    replaced or removed.
    """

    def __init__(self, environment: ExecutionEnvironment):
        self.environment = environment
        self._handles: Dict[str, str] = {}
        self.creations = 0

    def __contains__(self, real_id: str) -> bool:
        return real_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    @property
    def address_map(self) -> Dict[str, str]:
        return dict(self._handles)

    def get_or_create(self, real_id: str) -> str:
        """
        Return the synthetic handle for real_id, creating it on first use.

        Raises:
            ExecutionEnvironmentError: If token creation fails; nothing is
                recorded so a later call can retry
        """
        handle = self._handles.get(real_id)
        if handle is not None:
            return handle

        self.creations += 1
        try:
            handle = self.environment.create_token()
        except ExecutionEnvironmentError:
            raise
        except Exception as e:
            raise ExecutionEnvironmentError(
                f"Token creation failed for {real_id}: {e}",
                operation="create_token",
            ) from e

        self._handles[real_id] = handle
        logger.debug(f"Mapped {short_id(real_id)} -> {handle}")
        return handle

    def resolve(self, real_id: str) -> str:
        """Handle for an already registered token."""
        try:
            return self._handles[real_id]
        except KeyError:
            raise ValidationError(f"Token {real_id} has not been registered") from None

    def translate(self, path: Sequence[str]) -> List[str]:
        """Map a real path to its synthetic equivalent."""
        return [self.resolve(real_id) for real_id in path]
