"""
Settlement error taxonomy.

Every failure of a settlement attempt surfaces as one ``SettlementError``
subclass. None of them are retried automatically: the caller shows
``user_message`` and the viewer resubmits from scratch.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional


class SettlementErrorKind(str, Enum):
    """Categories of settlement failures."""

    WALLET_NOT_CONNECTED = "wallet_not_connected"
    QUOTE_FAILED = "quote_failed"
    APPROVAL_FAILED = "approval_failed"
    USER_REJECTED = "user_rejected"
    BROADCAST_FAILED = "broadcast_failed"
    ON_CHAIN_FAILURE = "on_chain_failure"
    CONFIRMATION_TIMEOUT = "confirmation_timeout"
    UNSUPPORTED_WALLET_OPERATION = "unsupported_wallet_operation"


class SettlementError(Exception):
    """Base class for errors that terminate a settlement attempt."""

    kind: SettlementErrorKind
    default_user_message = "Transaction failed"

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        tx_id: Optional[str] = None,
        chain_id: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message or self.default_user_message
        self.tx_id = tx_id
        self.chain_id = chain_id


class WalletNotConnected(SettlementError):
    """The wallet adapter reported disconnected before dispatch."""

    kind = SettlementErrorKind.WALLET_NOT_CONNECTED
    default_user_message = "Connect your wallet first"

    def __init__(self, message: str = "Wallet not connected", **kwargs: Any):
        super().__init__(message, **kwargs)


class QuoteFailed(SettlementError):
    """The aggregator returned no usable route."""

    kind = SettlementErrorKind.QUOTE_FAILED
    default_user_message = "Failed to fetch quote"

    def __init__(self, message: str = "Failed to fetch quote", *, status_code: Optional[int] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ApprovalFailed(SettlementError):
    """Token allowance could not be raised; no swap funds moved."""

    kind = SettlementErrorKind.APPROVAL_FAILED
    default_user_message = "Token approval failed"

    def __init__(self, message: str = "Token approval failed", *, rejected: bool = False, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.rejected = rejected


class UserRejected(SettlementError):
    """The signer declined a wallet prompt."""

    kind = SettlementErrorKind.USER_REJECTED
    default_user_message = "Request rejected"

    def __init__(self, message: str = "Request rejected", **kwargs: Any):
        kwargs.setdefault("user_message", "Request rejected")
        super().__init__(message, **kwargs)


class BroadcastFailed(SettlementError):
    """The network or provider refused the signed transaction."""

    kind = SettlementErrorKind.BROADCAST_FAILED
    default_user_message = "Transaction could not be broadcast"


class OnChainFailure(SettlementError):
    """The transaction was included but failed on-chain."""

    kind = SettlementErrorKind.ON_CHAIN_FAILURE
    default_user_message = "Transaction failed on-chain"

    def __init__(self, message: str = "Transaction failed on-chain", *, reason: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.reason = reason


class ConfirmationTimeout(SettlementError):
    """The transaction was broadcast but confirmation was not observed in time.

    ``tx_id`` is always set so the viewer can look the transaction up instead
    of resubmitting a second tip.
    """

    kind = SettlementErrorKind.CONFIRMATION_TIMEOUT
    default_user_message = "Transaction sent but not yet confirmed"


class UnsupportedWalletOperation(SettlementError):
    """The connected wallet cannot perform the required step."""

    kind = SettlementErrorKind.UNSUPPORTED_WALLET_OPERATION
    default_user_message = "This wallet does not support this operation"


class InvalidTipRequest(ValueError):
    """A tip request violated one of its invariants."""


class UnknownChainError(LookupError):
    """A chain id outside the registry: a configuration error."""


_REJECTION_RE = re.compile(
    r"user rejected|user denied|rejected the request|request rejected|user cancel|cancelled by user|canceled by user|declined",
    re.IGNORECASE,
)

# EIP-1193 "User Rejected Request"
USER_REJECTED_CODE = 4001


def is_user_rejection(exc: BaseException) -> bool:
    """Return True if a wallet error means the user declined the prompt."""

    if isinstance(exc, UserRejected):
        return True
    code = getattr(exc, "code", None)
    if code == USER_REJECTED_CODE:
        return True
    return bool(_REJECTION_RE.search(str(exc)))


def classify_wallet_error(exc: Exception, *, chain_id: Optional[int] = None) -> SettlementError:
    """Map an arbitrary wallet/provider exception onto the taxonomy."""

    if isinstance(exc, SettlementError):
        return exc
    if is_user_rejection(exc):
        return UserRejected(str(exc) or "Request rejected", chain_id=chain_id)
    return BroadcastFailed(str(exc) or "Transaction could not be broadcast", chain_id=chain_id)


__all__ = [
    "SettlementErrorKind",
    "SettlementError",
    "WalletNotConnected",
    "QuoteFailed",
    "ApprovalFailed",
    "UserRejected",
    "BroadcastFailed",
    "OnChainFailure",
    "ConfirmationTimeout",
    "UnsupportedWalletOperation",
    "InvalidTipRequest",
    "UnknownChainError",
    "USER_REJECTED_CODE",
    "is_user_rejection",
    "classify_wallet_error",
]
