"""
Credit minting collaborator

Minting happens on an external ledger; the API only needs something that turns
(wallet, credits) into a transaction hash.
"""

from utils.exceptions import MintError


class CreditMinter:
    """Interface for the ledger that mints reward credits"""

    def mint(self, wallet_address: str, credits: int) -> str:
        """Mint credits to a wallet and return the transaction hash"""
        raise NotImplementedError


class UnconfiguredMinter(CreditMinter):
    """Used when no ledger credentials are present; every mint fails"""

    def mint(self, wallet_address: str, credits: int) -> str:
        raise MintError("Credit minting is not configured")
