"""Per-family transaction executors and their registry."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from ....providers.evm_rpc import EvmRpcClient
from ....providers.solana_rpc import SolanaRpcClient, get_solana_rpc
from ...chains import ChainFamily
from ...errors import UnknownChainError
from .base import ChainTipExecutor, SigningContext
from .bitcoin import BitcoinTipExecutor
from .evm import EvmTipExecutor
from .solana import SolanaTipExecutor
from .sui import SuiTipExecutor


class ExecutorRegistry:
    """One executor per chain family, looked up once per attempt."""

    def __init__(self, executors: Iterable[ChainTipExecutor] = ()):
        self._executors: Dict[ChainFamily, ChainTipExecutor] = {}
        for executor in executors:
            self.register(executor)

    def register(self, executor: ChainTipExecutor) -> None:
        self._executors[executor.family] = executor

    def for_family(self, family: ChainFamily) -> ChainTipExecutor:
        try:
            return self._executors[family]
        except KeyError:
            raise UnknownChainError(f"No executor registered for {family.value}") from None


def default_registry(
    *,
    evm_rpc: Optional[EvmRpcClient] = None,
    solana_rpc: Optional[SolanaRpcClient] = None,
) -> ExecutorRegistry:
    return ExecutorRegistry(
        [
            EvmTipExecutor(evm_rpc or EvmRpcClient()),
            SolanaTipExecutor(solana_rpc or get_solana_rpc()),
            BitcoinTipExecutor(),
            SuiTipExecutor(),
        ]
    )


__all__ = [
    "BitcoinTipExecutor",
    "ChainTipExecutor",
    "EvmTipExecutor",
    "ExecutorRegistry",
    "SigningContext",
    "SolanaTipExecutor",
    "SuiTipExecutor",
    "default_registry",
]
