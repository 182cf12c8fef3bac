"""Transaction construction interface.

A construction backend turns a transaction intent into an unsigned
transaction blob for the target chain, or reads a balance. It NEVER signs
and NEVER broadcasts.
"""

from abc import ABC, abstractmethod

from ethential.pipeline.types import OperationKind, TransactionIntent


class TxConstructionClient(ABC):
    """Abstract base class for construction backends.

    Every method raises ConstructionError when the backend cannot serve the
    request; the message is shown to the caller as is.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name identifier."""
        pass

    @abstractmethod
    async def build_transfer_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        """Build an unsigned ``transfer(address,uint256)`` transaction."""
        pass

    @abstractmethod
    async def build_approve_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        """Build an unsigned ``approve(address,uint256)`` transaction."""
        pass

    @abstractmethod
    async def build_swap_tx(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> str:
        """Build an unsigned ``swap(uint256)`` transaction."""
        pass

    @abstractmethod
    async def get_balance(
        self, credential: str, intent: TransactionIntent, chain_id: int
    ) -> int:
        """Read the token balance of the intent's ``account`` parameter."""
        pass

    async def build_tx(
        self,
        kind: OperationKind,
        credential: str,
        intent: TransactionIntent,
        chain_id: int,
    ) -> str:
        """Dispatch to the builder for ``kind``.

        Raises:
            ValueError: For operations that do not produce a transaction
        """
        if kind is OperationKind.TRANSFER:
            return await self.build_transfer_tx(credential, intent, chain_id)
        if kind is OperationKind.APPROVE:
            return await self.build_approve_tx(credential, intent, chain_id)
        if kind is OperationKind.SWAP:
            return await self.build_swap_tx(credential, intent, chain_id)
        raise ValueError(f"{kind.value} does not build a transaction")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name})"
