"""
Wallet identity sessions.

A session attributes tips to the sender's account on the backend. It is
obtained by signing a canonical JSON message with the connected wallet and
exchanging the signature at ``/auth/wallet-login``. Sessions are cached per
(chain family, address) and refreshed shortly before they expire.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from ..config import settings
from ..providers.backend import AuthClient, BackendError
from .chains import ChainFamily
from .wallets.base import WalletAdapter, WalletCapability


logger = logging.getLogger(__name__)


class WalletSession(BaseModel):
    """Bearer session issued for one wallet address."""
    address: str
    family: ChainFamily
    token: str
    issued_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        return now < self.expires_at - margin


def canonical_identity_message(address: str, timestamp: int) -> str:
    """``{"address":"<addr>","timestamp":<unix>}`` with no whitespace."""
    return json.dumps({"address": address, "timestamp": timestamp}, separators=(",", ":"))


class SessionStore:
    """In-memory sessions keyed by (family, address)."""

    def __init__(self) -> None:
        self._sessions: Dict[Tuple[ChainFamily, str], WalletSession] = {}

    def get(self, family: ChainFamily, address: str) -> Optional[WalletSession]:
        return self._sessions.get((family, address))

    def put(self, session: WalletSession) -> None:
        self._sessions[(session.family, session.address)] = session

    def __len__(self) -> int:
        return len(self._sessions)


class IdentityProver:
    """Obtain or reuse a session for the connected wallet."""

    def __init__(
        self,
        auth_client: Optional[AuthClient] = None,
        store: Optional[SessionStore] = None,
        *,
        lifetime: Optional[timedelta] = None,
        refresh_margin: Optional[timedelta] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.auth_client = auth_client or AuthClient()
        self.store = store if store is not None else SessionStore()
        self.lifetime = lifetime or timedelta(hours=settings.session_lifetime_hours)
        self.refresh_margin = (
            refresh_margin
            if refresh_margin is not None
            else timedelta(seconds=settings.session_refresh_margin_seconds)
        )
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def cached(self, adapter: WalletAdapter) -> Optional[WalletSession]:
        address = adapter.current_address
        if not address:
            return None
        session = self.store.get(adapter.family, address)
        if session and session.is_valid(self._now(), self.refresh_margin):
            return session
        return None

    async def ensure_session(self, adapter: WalletAdapter) -> Optional[WalletSession]:
        """
        Return a valid session for the adapter's address.

        Returns None when the wallet cannot sign identity messages or the
        backend asks for signup first. Wallet and backend errors propagate;
        callers treat this step as best-effort.
        """
        session = self.cached(adapter)
        if session is not None:
            return session

        if not adapter.supports(WalletCapability.SIGN_IDENTITY):
            logger.info(f"{adapter.name} cannot sign identity messages; tipping anonymously")
            return None

        address = adapter.require(WalletCapability.SIGN_IDENTITY)
        timestamp = int(self._clock())
        message = canonical_identity_message(address, timestamp)
        signature = await adapter.sign_identity_message(message)

        response = await self.auth_client.wallet_login(address, timestamp, signature)
        token = response.get("token")
        if not token:
            if response.get("status") == "signup_needed":
                logger.info(f"Wallet {address} has no account yet; tipping anonymously")
                return None
            raise BackendError(f"Unexpected wallet-login response: {sorted(response)}")

        issued_at = self._now()
        session = WalletSession(
            address=address,
            family=adapter.family,
            token=token,
            issued_at=issued_at,
            expires_at=issued_at + self.lifetime,
        )
        self.store.put(session)
        logger.info(f"Wallet session issued for {address} until {session.expires_at.isoformat()}")
        return session


__all__ = [
    "IdentityProver",
    "SessionStore",
    "WalletSession",
    "canonical_identity_message",
]
