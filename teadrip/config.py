from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from teadrip.scheduler import OverlapPolicy


DEFAULT_RPC_URL = "https://tea-sepolia.g.alchemy.com/public"
AMOUNT_PLACES = 6
# keeps every amount, and its wei value, inside 28-digit Decimal arithmetic
MAX_NATIVE_AMOUNT = Decimal("1000000000")

ENV_KEYS = (
    "RPC_URL",
    "PRIVATE_KEY",
    "MIN_AMOUNT",
    "MAX_AMOUNT",
    "INTERVAL_MINUTES",
    "ADDRESS_FILE",
    "TOKEN_SYMBOL",
    "CONFIRM_TIMEOUT",
    "OVERLAP_POLICY",
)


class ConfigError(RuntimeError):
    pass


class Config(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rpc_url: str = Field(DEFAULT_RPC_URL, alias="RPC_URL")
    private_key: str = Field(..., alias="PRIVATE_KEY", repr=False)
    min_amount: Decimal = Field(Decimal("0.001"), alias="MIN_AMOUNT", ge=0, le=MAX_NATIVE_AMOUNT)
    max_amount: Decimal = Field(Decimal("0.01"), alias="MAX_AMOUNT", ge=0, le=MAX_NATIVE_AMOUNT)
    interval_minutes: int = Field(1, alias="INTERVAL_MINUTES", ge=1)
    address_file: str = Field("address.txt", alias="ADDRESS_FILE")
    token_symbol: str = Field("TEA", alias="TOKEN_SYMBOL")
    confirm_timeout: float = Field(300, alias="CONFIRM_TIMEOUT", gt=0)
    overlap_policy: OverlapPolicy = Field(OverlapPolicy.SKIP, alias="OVERLAP_POLICY")

    @field_validator("private_key")
    @classmethod
    def _pk_hex(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("0x"):
            v = "0x" + v
        if len(v) != 66:
            raise ValueError("PRIVATE_KEY must be 64 hex characters")
        int(v[2:], 16)  # will raise if invalid
        return v

    @field_validator("min_amount", "max_amount")
    @classmethod
    def _six_places(cls, v: Decimal) -> Decimal:
        try:
            exact = v == v.quantize(Decimal(1).scaleb(-AMOUNT_PLACES))
        except InvalidOperation:
            exact = False
        if not exact:
            raise ValueError(f"at most {AMOUNT_PLACES} decimal places are supported")
        return v

    @field_validator("overlap_policy", mode="before")
    @classmethod
    def _policy_lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def _amount_range(self) -> "Config":
        if self.min_amount > self.max_amount:
            raise ValueError(
                f"MIN_AMOUNT ({self.min_amount}) must not exceed MAX_AMOUNT ({self.max_amount})"
            )
        return self

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{where}: {msg}" if where else msg)
    return "; ".join(parts)


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build the settings from the environment.

    Unset and empty variables fall back to their defaults. Raises
    ConfigError when the credential is missing or any value is invalid.
    """
    source = os.environ if environ is None else environ
    env = {k: source.get(k) for k in ENV_KEYS}
    env = {k: v for k, v in env.items() if v not in (None, "")}
    if not env.get("PRIVATE_KEY", "").strip():
        raise ConfigError("PRIVATE_KEY is required in .env file")
    try:
        return Config.model_validate(env)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc
