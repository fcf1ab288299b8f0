"""
Bitcoin wallet adapters.

Bitcoin wallets share no signing API, so each concrete wallet gets its own
adapter and declares what it can do:

- Unisat: identity signing, and ``signPsbt`` followed by ``pushPsbt``.
- Phantom: identity signing and PSBT signing; it exposes no broadcast call,
  so sign-and-send is not declared.
- Xverse / Leather (sats-connect): identity signing only. Their PSBT signing
  needs a map of which inputs belong to which address, which the route
  payload does not carry.
"""

from __future__ import annotations

import base64
import logging
from abc import abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..chains import BITCOIN_CHAIN_ID, ChainFamily
from ..errors import SettlementError, UnsupportedWalletOperation, classify_wallet_error
from ..models import TransactionPayload
from .base import WalletAdapter, WalletCapability


logger = logging.getLogger(__name__)


class BitcoinWalletAdapter(WalletAdapter):
    family = ChainFamily.BITCOIN
    wallet_type: str = "bitcoin"

    def __init__(self, wallet: Any, *, address: Optional[str] = None):
        self._wallet = wallet
        self._address = address

    @property
    def is_connected(self) -> bool:
        return self._address is not None

    @property
    def current_address(self) -> Optional[str]:
        return self._address

    def disconnect(self) -> None:
        self._address = None

    async def connect(self) -> str:
        try:
            address = await self._request_address()
        except SettlementError:
            raise
        except Exception as exc:
            raise classify_wallet_error(exc, chain_id=BITCOIN_CHAIN_ID) from exc
        if not address:
            raise UnsupportedWalletOperation(f"{self.name} returned no Bitcoin address")
        self._address = address
        logger.info(f"Connected {self.wallet_type} Bitcoin wallet")
        return address

    @abstractmethod
    async def _request_address(self) -> Optional[str]:
        """Ask the wallet for its tipping address."""
        pass

    async def _sign_and_send(self, payload: TransactionPayload) -> str:
        raise UnsupportedWalletOperation(
            f"{self.name} cannot sign and broadcast Bitcoin transactions",
            chain_id=BITCOIN_CHAIN_ID,
        )


class UnisatWalletAdapter(BitcoinWalletAdapter):
    """Unisat: ``request_accounts``, ``sign_message``, ``sign_psbt``, ``push_psbt``."""

    name = "Unisat"
    wallet_type = "unisat"
    capabilities = frozenset({WalletCapability.SIGN_IDENTITY, WalletCapability.SIGN_AND_SEND})

    async def _request_address(self) -> Optional[str]:
        accounts: List[str] = await self._wallet.request_accounts()
        return accounts[0] if accounts else None

    async def _sign_identity(self, payload: str) -> str:
        return await self._wallet.sign_message(payload)

    async def _sign_and_send(self, payload: TransactionPayload) -> str:
        signed_psbt = await self._wallet.sign_psbt(payload.data)
        return await self._wallet.push_psbt(signed_psbt)


class PhantomBitcoinWalletAdapter(BitcoinWalletAdapter):
    """Phantom's Bitcoin provider: ``request_accounts``, ``sign_message``, ``sign_psbt``."""

    name = "Phantom"
    wallet_type = "phantom"
    capabilities = frozenset({WalletCapability.SIGN_IDENTITY})

    async def _request_address(self) -> Optional[str]:
        accounts = await self._wallet.request_accounts()
        if not accounts:
            return None
        account = accounts[0]
        # Newer versions return account objects, older ones plain strings
        if isinstance(account, dict):
            return account.get("address")
        return account

    async def _sign_identity(self, payload: str) -> str:
        result = await self._wallet.sign_message(self._address, payload.encode("utf-8"))
        signature = result.get("signature") if isinstance(result, dict) else result
        return base64.b64encode(bytes(signature)).decode("ascii")

    async def sign_psbt(self, psbt_hex: str, signing_indexes: Sequence[int] = (0,)) -> str:
        """Sign ``psbt_hex`` with the connected address; returns the signed PSBT hex.

        Phantom has no broadcast call, so the result still has to be pushed
        elsewhere.
        """
        self.require(WalletCapability.SIGN_IDENTITY)
        options = {
            "inputsToSign": [
                {"address": self._address, "signingIndexes": list(signing_indexes)}
            ]
        }
        try:
            signed = await self._wallet.sign_psbt(bytes.fromhex(psbt_hex), options)
        except SettlementError:
            raise
        except Exception as exc:
            raise classify_wallet_error(exc, chain_id=BITCOIN_CHAIN_ID) from exc
        return bytes(signed).hex()


class SatsConnectWalletAdapter(BitcoinWalletAdapter):
    """Xverse / Leather through the sats-connect ``request(method, params)`` protocol."""

    capabilities = frozenset({WalletCapability.SIGN_IDENTITY})

    def __init__(self, wallet: Any, *, wallet_type: str = "xverse", address: Optional[str] = None):
        super().__init__(wallet, address=address)
        self.wallet_type = wallet_type
        self.name = wallet_type.capitalize()

    async def _request_address(self) -> Optional[str]:
        response: Dict[str, Any] = await self._wallet.request(
            "getAddresses",
            {
                "purposes": ["ordinals", "payment"],
                "message": "Address for receiving Ordinals and Payments",
            },
        )
        addresses = response.get("addresses") or []
        by_purpose = {entry.get("purpose"): entry.get("address") for entry in addresses}
        # Taproot (ordinals) first, then the payment address
        return by_purpose.get("ordinals") or by_purpose.get("payment")

    async def _sign_identity(self, payload: str) -> str:
        response = await self._wallet.request(
            "signMessage",
            {"address": self._address, "message": payload},
        )
        return response["signature"]


__all__ = [
    "BitcoinWalletAdapter",
    "PhantomBitcoinWalletAdapter",
    "SatsConnectWalletAdapter",
    "UnisatWalletAdapter",
]
