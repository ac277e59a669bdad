"""Resolve an integration account to a Mercado Livre access token."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import orjson
from supabase import Client, create_client

from src.config import config
from src.errors import CredentialError

logger = logging.getLogger(__name__)

PROVIDER = "mercadolivre"


@dataclass(frozen=True)
class Credential:
    access_token: str
    seller_id: str
    account_name: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credential(seller_id={self.seller_id!r}, account_name={self.account_name!r})"


class CredentialResolver(Protocol):
    async def resolve(self, account_ref: str) -> Credential: ...


class StaticCredentialResolver:
    """Token and seller id fixed up front (CLI and local runs)."""

    def __init__(self, access_token: Optional[str] = None, seller_id: Optional[str] = None):
        self.access_token = access_token or config.ML_ACCESS_TOKEN
        self.seller_id = seller_id or config.ML_SELLER_ID

    async def resolve(self, account_ref: str) -> Credential:
        if not self.access_token or not self.seller_id:
            raise CredentialError("ML_ACCESS_TOKEN and ML_SELLER_ID must both be set")
        return Credential(access_token=self.access_token, seller_id=str(self.seller_id), account_name=account_ref)


class SupabaseCredentialResolver:
    """
    Looks the account up in ``integration_accounts`` and asks the
    ``integrations-get-secret`` function for its token.
    """

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE:
                raise ValueError("Supabase configuration missing")
            client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE)
        self.client = client
        self.accounts_table = config.ACCOUNTS_TABLE
        self.secret_function = config.SECRET_FUNCTION

    async def resolve(self, account_ref: str) -> Credential:
        loop = asyncio.get_event_loop()
        try:
            account = await loop.run_in_executor(None, self._load_account, account_ref)
            secret = await loop.run_in_executor(None, self._load_secret, account_ref)
        except CredentialError:
            raise
        except Exception as e:
            logger.error(f"Credential lookup failed for account {account_ref}: {e}")
            raise CredentialError(f"credential lookup failed: {e}") from e

        token = secret.get("access_token") or (secret.get("secret") or {}).get("access_token")
        if not token:
            raise CredentialError("access token not found")

        logger.info(f"Token obtained for seller {account['account_identifier']}")
        return Credential(
            access_token=token,
            seller_id=str(account["account_identifier"]),
            account_name=account.get("name"),
        )

    def _load_account(self, account_ref: str) -> dict:
        response = (
            self.client.table(self.accounts_table)
            .select("account_identifier, name")
            .eq("id", account_ref)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows or not rows[0].get("account_identifier"):
            raise CredentialError(f"integration account {account_ref} not found")
        return rows[0]

    def _load_secret(self, account_ref: str) -> dict:
        body: Any = self.client.functions.invoke(
            self.secret_function,
            invoke_options={
                "body": {"integration_account_id": account_ref, "provider": PROVIDER},
                "responseType": "json",
            },
        )
        if isinstance(body, (bytes, str)):
            body = orjson.loads(body)
        if not isinstance(body, dict) or not body.get("success"):
            raise CredentialError("access token not available for this account")
        return body
