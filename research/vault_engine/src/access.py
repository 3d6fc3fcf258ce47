"""Role based capabilities for the debt token and the ledger admin surface"""
import logging
from enum import Enum
from typing import Dict, Set

from .errors import AccessControlError

logger = logging.getLogger(__name__)


class Role(Enum):
    ADMIN = "admin"
    MINTER = "minter"
    BURNER = "burner"


class PermissionSet:
    """Maps accounts to the roles they hold."""

    def __init__(self, grants: Dict[str, Set[Role]] = None):
        self._grants: Dict[str, Set[Role]] = {}
        for account, roles in (grants or {}).items():
            for role in roles:
                self.grant(role, account)

    def grant(self, role: Role, account: str) -> None:
        self._grants.setdefault(account, set()).add(role)
        logger.info("Granted %s to %s", role.value, account)

    def revoke(self, role: Role, account: str) -> None:
        roles = self._grants.get(account)
        if roles and role in roles:
            roles.remove(role)
            logger.info("Revoked %s from %s", role.value, account)

    def has(self, role: Role, account: str) -> bool:
        return role in self._grants.get(account, ())

    def require(self, role: Role, account: str) -> None:
        """Raise AccessControlError unless `account` holds `role`"""
        if not self.has(role, account):
            logger.warning("Rejected %s call from %s", role.value, account)
            raise AccessControlError(f"Caller {account} is missing role {role.value}")
