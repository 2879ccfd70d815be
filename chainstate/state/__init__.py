from .accounts import EMPTY_CODE_HASH, U256_MAX, Account, compute_code_hash
from .journal import Journal
from .storage import StorageView

__all__ = [
    "Account",
    "EMPTY_CODE_HASH",
    "U256_MAX",
    "compute_code_hash",
    "Journal",
    "StorageView",
]
