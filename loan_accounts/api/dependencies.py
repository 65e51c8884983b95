"""
Service wiring and FastAPI dependencies
"""

from typing import Optional

from ..accounts import LoanAccountManager
from ..config import LoanAccountsConfig, get_config
from ..storage import InMemoryStorage, SQLiteStorage, StorageInterface


class LoanAccountSystem:
    """Loan account service with storage and managers initialized"""

    def __init__(self, storage: StorageInterface, application_name: str = "loanAccountsApp"):
        self.storage = storage
        self.application_name = application_name
        self.account_manager = LoanAccountManager(self.storage)

    @classmethod
    def from_config(cls, config: LoanAccountsConfig) -> 'LoanAccountSystem':
        """Build the system for the configured storage backend"""
        backend = config.storage_backend.lower()
        if backend == "memory":
            storage = InMemoryStorage()
        elif backend == "sqlite":
            storage = SQLiteStorage(config.sqlite_path)
        else:
            raise ValueError(f"Unsupported storage backend: {config.storage_backend}")
        return cls(storage, application_name=config.application_name)

    def close(self) -> None:
        self.storage.close()


_system: Optional[LoanAccountSystem] = None


def get_loan_account_system() -> LoanAccountSystem:
    """Dependency returning the process-wide loan account system"""
    global _system
    if _system is None:
        _system = LoanAccountSystem.from_config(get_config())
    return _system
