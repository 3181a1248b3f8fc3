from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.security import ApiKeyParts, generate_api_key
from mcp_registry.models.account import Account
from mcp_registry.models.api_key import ApiKey


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def create_account_with_key(
    db: AsyncSession,
    *,
    email: str,
    display_name: str | None = None,
    role: str = "user",
) -> tuple[Account, ApiKeyParts]:
    """
    Insert an account and its first API key (flushed, not committed).
    Raises IntegrityError when the email is already registered.
    """
    account = Account(email=normalize_email(email), display_name=display_name, role=role)
    db.add(account)
    await db.flush()  # account row first so the key's FK resolves

    key = generate_api_key()
    db.add(
        ApiKey(
            account_id=account.id,
            key_prefix=key.prefix,
            key_hash=key.hashed,
            is_active=True,
        )
    )
    await db.flush()
    return account, key
