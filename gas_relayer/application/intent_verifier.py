"""Detached signature verification for purchase and redeem intents."""

from __future__ import annotations

import logging
from typing import Any

from eth_account import Account
from eth_account.messages import encode_typed_data

from ..domain.models import PurchaseIntent, RedeemIntent, same_address
from ..domain.signing import SigningDomain, purchase_typed_data, redeem_typed_data

logger = logging.getLogger(__name__)


class IntentVerifier:
    """Recovers the signer of an EIP-712 intent and checks it is the claimed user.

    Verification is a pure function of the intent, the signature and the signing
    domain. It never raises: malformed input is a failed verification.
    """

    def __init__(self, domain: SigningDomain):
        self._domain = domain

    @property
    def domain(self) -> SigningDomain:
        return self._domain

    def verify_purchase(self, intent: PurchaseIntent, signature: str) -> bool:
        return self._verify(purchase_typed_data(self._domain, intent), intent.user, signature)

    def verify_redeem(self, intent: RedeemIntent, signature: str) -> bool:
        return self._verify(redeem_typed_data(self._domain, intent), intent.user, signature)

    def _verify(self, typed_data: dict[str, Any], user: str, signature: str) -> bool:
        try:
            signable = encode_typed_data(full_message=typed_data)
            recovered = Account.recover_message(signable, signature=signature)
        except Exception as e:
            logger.debug(f"Signature verification failed for {typed_data['primaryType']}: {e}")
            return False
        return same_address(recovered, user)
