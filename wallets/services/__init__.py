from wallets.services.ledger import LedgerService
from wallets.services.wallet import WalletService
from wallets.services.transaction import TransactionService

__all__ = [
    "LedgerService",
    "WalletService",
    "TransactionService",
]
