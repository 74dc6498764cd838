from .auth import User, SessionToken, SignupRequest, PassRequest
from .ledger import Transaction, CatalogItem, Trader
from .activity import ActivityLog

__all__ = [
    'User', 'SessionToken', 'SignupRequest', 'PassRequest',
    'Transaction', 'CatalogItem', 'Trader',
    'ActivityLog',
]
