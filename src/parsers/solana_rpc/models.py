"""Pydantic models for Solana JSON-RPC responses used by the launch pipeline."""

from pydantic import BaseModel, Field


class TokenBalance(BaseModel):
    """Entry of meta.postTokenBalances."""

    mint: str
    account_index: int | None = Field(default=None, alias="accountIndex")
    owner: str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}


class TransactionMeta(BaseModel):
    """Subset of getTransaction meta, only what mint resolution needs."""

    post_token_balances: list[TokenBalance] = Field(
        default_factory=list, alias="postTokenBalances"
    )
    err: dict | str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}

    @property
    def first_mint(self) -> str | None:
        if not self.post_token_balances:
            return None
        return self.post_token_balances[0].mint or None


class EpochInfo(BaseModel):
    """getEpochInfo result."""

    absolute_slot: int = Field(alias="absoluteSlot")
    epoch: int = 0
    slot_index: int = Field(default=0, alias="slotIndex")

    model_config = {"extra": "ignore", "populate_by_name": True}
