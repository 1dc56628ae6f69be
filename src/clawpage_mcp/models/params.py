"""Pydantic models for tool parameters."""

from __future__ import annotations

from typing import Annotated

from pydantic import AfterValidator, AnyUrl, BaseModel, EmailStr, Field, TypeAdapter, WithJsonSchema

_url_adapter = TypeAdapter(AnyUrl)


def _validate_url(value: str) -> str:
    # Validate only; the caller's string is forwarded unchanged
    _url_adapter.validate_python(value)
    return value


UrlString = Annotated[
    str,
    AfterValidator(_validate_url),
    WithJsonSchema({"type": "string", "format": "uri"}),
]


class RegisterParams(BaseModel):
    """Parameters for the register tool."""

    email: EmailStr = Field(description="Email address for the account")


class ExtractParams(BaseModel):
    """Parameters for the extract_url tool."""

    url: UrlString = Field(description="The URL to extract")
    api_key: str | None = Field(default=None, description="API key from register (cpk_ prefix)")
    sync: bool = Field(default=True, description="Wait for result inline")
    tx_hash: str | None = Field(default=None, description="Transaction hash for x402 payment proof")


class AccountParams(BaseModel):
    """Parameters for the account_info tool."""

    api_key: str = Field(description="API key (cpk_ prefix)")


class AddWalletParams(BaseModel):
    """Parameters for the add_wallet tool."""

    api_key: str = Field(description="API key (cpk_ prefix)")
    wallet_address: str = Field(description="Ethereum wallet address (0x...)")


class DepositParams(BaseModel):
    """Parameters for the deposit tool."""

    api_key: str = Field(description="API key (cpk_ prefix)")
    tx_hash: str = Field(description="Transaction hash of the USDC transfer")
