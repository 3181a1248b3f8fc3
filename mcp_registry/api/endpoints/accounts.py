import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mcp_registry.core.db import get_db
from mcp_registry.schemas.account import AccountCreate, AccountCreated, MeOut
from mcp_registry.services.accounts import create_account_with_key
from mcp_registry.services.audit import audit
from mcp_registry.services.auth import Actor, get_actor
from mcp_registry.services.internal_admin import require_internal_admin

log = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/accounts",
    status_code=201,
    response_model=AccountCreated,
    dependencies=[Depends(require_internal_admin)],
)
async def create_account(payload: AccountCreate, db: AsyncSession = Depends(get_db)) -> AccountCreated:
    """
    Internal-only account provisioning. Returns the account's first API key;
    the plain key is shown once and only its hash is stored.
    """
    try:
        account, key = await create_account_with_key(
            db, email=payload.email, display_name=payload.display_name
        )
        await audit(db, action="account_created", actor=None, details={"account_id": account.id})
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.warning("create account failed: email already registered")
        raise HTTPException(status_code=409, detail="Account already exists")

    return AccountCreated(account_id=account.id, email=account.email, role=account.role, api_key=key.plain)


@router.get("/me", response_model=MeOut)
async def me(actor: Actor = Depends(get_actor)) -> MeOut:
    return MeOut(
        account_id=actor.account_id,
        api_key_id=actor.api_key_id,
        email=actor.email,
        display_name=actor.display_name,
        role=actor.role,
    )
