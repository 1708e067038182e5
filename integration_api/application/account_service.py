"""Service for Account queries across the invoking org and an optional alternate org."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from integration_api.domain.entities import OrgConnection
from integration_api.domain.errors import DomainError
from integration_api.domain.ports import ConnectionResolverPort, DataApiPort

logger = logging.getLogger(__name__)

ACCOUNTS_QUERY = "SELECT Id, Name FROM Account"


class AlternateOrgLookup:
    """A named org whose Accounts are also queried; built once at startup."""

    def __init__(
        self,
        org_name: str,
        resolver: ConnectionResolverPort,
        data_api_factory: Callable[[OrgConnection], DataApiPort],
    ) -> None:
        self.org_name = org_name
        self._resolver = resolver
        self._data_api_factory = data_api_factory

    async def count_accounts(self) -> Optional[int]:
        """Query the alternate org; failures are logged and yield None."""
        logger.info(f"Getting {self.org_name} org connection...")
        try:
            connection = await self._resolver.get_connection(self.org_name)
            logger.info(f"Querying org {connection.id} Accounts...")
            accounts = await self._data_api_factory(connection).query(ACCOUNTS_QUERY)
        except DomainError as exc:
            logger.error(str(exc))
            return None

        logger.info(f"For org {connection.id}, found the {len(accounts)} Accounts")
        return len(accounts)


class AccountService:
    def __init__(self, data_api: DataApiPort, alternate_org: Optional[AlternateOrgLookup] = None) -> None:
        self._data_api = data_api
        self._alternate_org = alternate_org

    async def list_accounts(self, org_id: str = "") -> List[Dict[str, Any]]:
        if self._alternate_org is not None:
            await self._alternate_org.count_accounts()

        logger.info(f"Querying org {org_id} Accounts...")
        accounts = await self._data_api.query(ACCOUNTS_QUERY)
        logger.info(f"For org {org_id}, found the following Accounts: {accounts}")
        return accounts
