from wallets.models.wallet import Wallet
from wallets.models.transaction import Transaction

__all__ = ["Wallet", "Transaction"]
