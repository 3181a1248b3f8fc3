from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    display_name: str | None = Field(default=None, max_length=120)


class AccountCreated(BaseModel):
    account_id: str
    email: str
    role: str
    api_key: str


class MeOut(BaseModel):
    account_id: str
    api_key_id: str
    email: str
    display_name: str | None
    role: str


class BootstrapOut(BaseModel):
    success: bool
    message: str
    userId: str
