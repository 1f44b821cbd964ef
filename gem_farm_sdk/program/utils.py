"""Utility functions for the Gem Farm program module."""

import hashlib

from solders.pubkey import Pubkey

from .constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from .pda import find_program_address


def sighash(namespace: str, name: str) -> bytes:
    """Anchor 8-byte discriminator: sha256("<namespace>:<name>")[:8]."""
    return hashlib.sha256(f"{namespace}:{name}".encode()).digest()[:8]


def account_discriminator(account_name: str) -> bytes:
    """Discriminator prefixed to an Anchor account, e.g. "Farmer"."""
    return sighash("account", account_name)


def instruction_discriminator(ix_name: str) -> bytes:
    """Discriminator prefixed to Anchor instruction data, e.g. "init_farm"."""
    return sighash("global", ix_name)


def get_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program_id: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    """Token account owned by `owner` for `mint` under the associated token program."""
    return find_program_address(
        [bytes(owner), bytes(token_program_id), bytes(mint)], ASSOCIATED_TOKEN_PROGRAM_ID
    )[0]
