"""AccountRegistry: every account registered during the session."""

import threading

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from pizzeria.identity.account import Account

logger = structlog.get_logger(__name__)


class AccountRegistry:
    """Append-only account collection keyed by id and indexed by contact number.

    Only the interactive session writes here; the lock keeps the collection
    safe to share should another reader appear.
    """

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._by_contact: dict[str, int] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    def register(self, name: str, contact: str) -> Account:
        contact = (contact or "").strip()
        with self._lock:
            if contact in self._by_contact:
                raise ValidationError({"contact": ["Contact number already exists. Please log in."]})

            account = Account.register(account_id=self._next_id, name=name, contact=contact)
            self._next_id += 1
            self._accounts[account.account_id] = account
            self._by_contact[contact] = account.account_id

        logger.info("Account registered", account_id=account.account_id)
        return account

    def find_by_contact(self, contact: str) -> Account | None:
        with self._lock:
            account_id = self._by_contact.get((contact or "").strip())
            return None if account_id is None else self._accounts[account_id]

    def get(self, account_id: int) -> Account:
        with self._lock:
            try:
                return self._accounts[account_id]
            except KeyError:
                raise ObjectNotFoundError(f"Account {account_id} not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._accounts)
