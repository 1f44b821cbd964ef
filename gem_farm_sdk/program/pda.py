"""PDA (Program Derived Address) derivation functions for the Gem Farm SDK.

Every farm-side and bank-side address is derived through `derive`, which
probes bumps from 255 downward and returns the first off-curve candidate.
"""

import hashlib
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from solders.pubkey import Pubkey

from .constants import (
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
    MAX_SEED_LEN,
    MAX_SEEDS,
    PDA_MARKER,
    SEED_AUTHORIZATION_PROOF,
    SEED_EDITION,
    SEED_FARM_AUTHORITY,
    SEED_FARM_TREASURY,
    SEED_FARMER,
    SEED_GEM_BOX,
    SEED_GEM_DEPOSIT_RECEIPT,
    SEED_GEM_RARITY,
    SEED_METADATA,
    SEED_REWARD_POT,
    SEED_TOKEN_RECORD,
    SEED_VAULT,
    SEED_VAULT_AUTHORITY,
    SEED_WHITELIST_PROOF,
    TOKEN_METADATA_PROGRAM_ID,
)
from .errors import DerivationExhaustedError


class PdaNamespace(Enum):
    """Program that owns a derived address."""

    FARM = "farm"
    BANK = "bank"


class PdaKind(Enum):
    """Derived address kinds: (literal tag, owning namespace, address count)."""

    FARM_AUTHORITY = (SEED_FARM_AUTHORITY, PdaNamespace.FARM, 1)
    FARM_TREASURY = (SEED_FARM_TREASURY, PdaNamespace.FARM, 1)
    REWARD_POT = (SEED_REWARD_POT, PdaNamespace.FARM, 2)
    FARMER = (SEED_FARMER, PdaNamespace.FARM, 2)
    AUTHORIZATION_PROOF = (SEED_AUTHORIZATION_PROOF, PdaNamespace.FARM, 2)
    VAULT = (SEED_VAULT, PdaNamespace.BANK, 2)
    VAULT_AUTHORITY = (SEED_VAULT_AUTHORITY, PdaNamespace.BANK, 1)
    GEM_BOX = (SEED_GEM_BOX, PdaNamespace.BANK, 2)
    GEM_DEPOSIT_RECEIPT = (SEED_GEM_DEPOSIT_RECEIPT, PdaNamespace.BANK, 2)
    RARITY = (SEED_GEM_RARITY, PdaNamespace.BANK, 2)
    WHITELIST_PROOF = (SEED_WHITELIST_PROOF, PdaNamespace.BANK, 2)

    def __init__(self, tag: bytes, namespace: PdaNamespace, arity: int):
        self.tag = tag
        self.namespace = namespace
        self.arity = arity

    def default_program_id(self) -> Pubkey:
        if self.namespace is PdaNamespace.FARM:
            return GEM_FARM_PROGRAM_ID
        return GEM_BANK_PROGRAM_ID

    def seeds(self, addresses: Sequence[Pubkey]) -> List[bytes]:
        """Build the ordered seed list for this kind."""
        if len(addresses) != self.arity:
            raise ValueError(
                f"{self.name} takes {self.arity} address seed(s), got {len(addresses)}"
            )
        seeds = [self.tag] if self.tag else []
        seeds.extend(bytes(address) for address in addresses)
        return seeds


def _validate_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) >= MAX_SEEDS:
        raise ValueError(f"Too many seeds: {len(seeds)} (maximum: {MAX_SEEDS - 1})")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"Seed too long: {len(seed)} > {MAX_SEED_LEN}")


def create_program_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> Optional[Pubkey]:
    """Hash seeds into a candidate address; None if it lands on the curve."""
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(bytes(program_id))
    hasher.update(PDA_MARKER)
    candidate = Pubkey.from_bytes(hasher.digest())
    if candidate.is_on_curve():
        return None
    return candidate


def find_program_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> Tuple[Pubkey, int]:
    """Find the canonical (highest-bump) program address for the seeds.

    Raises:
        ValueError: If a seed exceeds 32 bytes or there are too many seeds
        DerivationExhaustedError: If no bump in [0, 255] is off-curve
    """
    seeds = list(seeds)
    _validate_seeds(seeds)
    for bump in range(255, -1, -1):
        address = create_program_address(seeds + [bytes([bump])], program_id)
        if address is not None:
            return address, bump
    raise DerivationExhaustedError(seeds, str(program_id))


def derive(
    kind: PdaKind,
    *addresses: Pubkey,
    program_id: Optional[Pubkey] = None,
) -> Tuple[Pubkey, int]:
    """Derive the address of the given kind from its parent addresses.

    Example:
        farmer, bump = derive(PdaKind.FARMER, farm, identity)
    """
    if program_id is None:
        program_id = kind.default_program_id()
    return find_program_address(kind.seeds(addresses), program_id)


# ============================================================================
# FARM PROGRAM
# ============================================================================


def get_farm_authority_pda(
    farm: Pubkey,
    program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the farm authority PDA.

    Seeds: [farm]
    """
    return derive(PdaKind.FARM_AUTHORITY, farm, program_id=program_id)


def get_farm_treasury_pda(
    farm: Pubkey,
    program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the farm treasury PDA.

    Seeds: ["treasury", farm]
    """
    return derive(PdaKind.FARM_TREASURY, farm, program_id=program_id)


def get_reward_pot_pda(
    farm: Pubkey,
    reward_mint: Pubkey,
    program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the reward pot PDA for a reward mint in a farm.

    Seeds: ["reward_pot", farm, reward_mint]
    """
    return derive(PdaKind.REWARD_POT, farm, reward_mint, program_id=program_id)


def get_farmer_pda(
    farm: Pubkey,
    identity: Pubkey,
    program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the farmer PDA for an identity in a farm.

    Seeds: ["farmer", farm, identity]
    """
    return derive(PdaKind.FARMER, farm, identity, program_id=program_id)


def get_authorization_proof_pda(
    farm: Pubkey,
    funder: Pubkey,
    program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the authorization proof PDA for a funder of a farm.

    Seeds: ["authorization", farm, funder]
    """
    return derive(PdaKind.AUTHORIZATION_PROOF, farm, funder, program_id=program_id)


# ============================================================================
# BANK PROGRAM
# ============================================================================


def get_vault_pda(
    bank: Pubkey,
    creator: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the vault PDA of a creator (farmer identity) in a bank.

    Seeds: ["vault", bank, creator]
    """
    return derive(PdaKind.VAULT, bank, creator, program_id=program_id)


def get_vault_authority_pda(
    vault: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the vault authority PDA.

    Seeds: [vault]
    """
    return derive(PdaKind.VAULT_AUTHORITY, vault, program_id=program_id)


def get_gem_box_pda(
    vault: Pubkey,
    gem_mint: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the gem box (custody token account) PDA.

    Seeds: ["gem_box", vault, gem_mint]
    """
    return derive(PdaKind.GEM_BOX, vault, gem_mint, program_id=program_id)


def get_gem_deposit_receipt_pda(
    vault: Pubkey,
    gem_mint: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the gem deposit receipt PDA.

    Seeds: ["gem_deposit_receipt", vault, gem_mint]
    """
    return derive(PdaKind.GEM_DEPOSIT_RECEIPT, vault, gem_mint, program_id=program_id)


def get_rarity_pda(
    bank: Pubkey,
    gem_mint: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the rarity record PDA for a mint in a bank.

    Seeds: ["gem_rarity", bank, gem_mint]
    """
    return derive(PdaKind.RARITY, bank, gem_mint, program_id=program_id)


def get_whitelist_proof_pda(
    bank: Pubkey,
    whitelisted_address: Pubkey,
    program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Tuple[Pubkey, int]:
    """Derive the whitelist proof PDA for a mint or creator in a bank.

    Seeds: ["whitelist", bank, whitelisted_address]
    """
    return derive(
        PdaKind.WHITELIST_PROOF, bank, whitelisted_address, program_id=program_id
    )


# ============================================================================
# TOKEN METADATA PROGRAM
# ============================================================================


def get_metadata_pda(mint: Pubkey) -> Tuple[Pubkey, int]:
    """Derive the token metadata PDA.

    Seeds: ["metadata", metadata_program, mint]
    """
    return find_program_address(
        [SEED_METADATA, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )


def get_edition_pda(mint: Pubkey) -> Tuple[Pubkey, int]:
    """Derive the master edition PDA.

    Seeds: ["metadata", metadata_program, mint, "edition"]
    """
    return find_program_address(
        [SEED_METADATA, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint), SEED_EDITION],
        TOKEN_METADATA_PROGRAM_ID,
    )


def get_token_record_pda(mint: Pubkey, token_account: Pubkey) -> Tuple[Pubkey, int]:
    """Derive the programmable NFT token record PDA for a token account.

    Seeds: ["metadata", metadata_program, mint, "token_record", token_account]
    """
    return find_program_address(
        [
            SEED_METADATA,
            bytes(TOKEN_METADATA_PROGRAM_ID),
            bytes(mint),
            SEED_TOKEN_RECORD,
            bytes(token_account),
        ],
        TOKEN_METADATA_PROGRAM_ID,
    )
