"""On-chain program interaction module for Gem Farm.

This module provides the client and utilities for interacting with
the gem farm and gem bank programs on Solana.
"""

from .accounts import (
    AUTHORIZATION_PROOF_DISCRIMINATOR,
    FARM_DISCRIMINATOR,
    FARMER_DISCRIMINATOR,
    AccountFilter,
    authorization_proof_filters,
    deserialize_authorization_proof,
    deserialize_farm,
    deserialize_farmer,
    deserialize_token_account,
    farm_filters,
    farmer_filters,
    matches_filters,
)
from .client import GemFarmClient
from .constants import (
    FEE_ACCOUNT,
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
)
from .errors import (
    AccountNotFoundError,
    DerivationExhaustedError,
    GemFarmError,
    InvalidAccountDataError,
    InvalidDiscriminatorError,
    MalformedUnionError,
    QueryRejectedError,
    RemoteRejectionError,
    TransportFailureError,
)
from .instructions import (
    build_add_rarities_to_bank_instruction,
    build_add_to_bank_whitelist_instruction,
    build_authorize_funder_instruction,
    build_cancel_reward_instruction,
    build_claim_instruction,
    build_deauthorize_funder_instruction,
    build_flash_deposit_instruction,
    build_flash_deposit_pnft_instruction,
    build_fund_reward_instruction,
    build_init_farm_instruction,
    build_init_farmer_instruction,
    build_lock_reward_instruction,
    build_payout_from_treasury_instruction,
    build_refresh_farmer_instruction,
    build_remaining_accounts,
    build_remove_from_bank_whitelist_instruction,
    build_stake_instruction,
    build_unstake_instruction,
    build_update_farm_instruction,
)
from .pda import (
    PdaKind,
    derive,
    find_program_address,
    get_authorization_proof_pda,
    get_farm_authority_pda,
    get_farm_treasury_pda,
    get_farmer_pda,
    get_gem_box_pda,
    get_gem_deposit_receipt_pda,
    get_rarity_pda,
    get_reward_pot_pda,
    get_vault_authority_pda,
    get_vault_pda,
    get_whitelist_proof_pda,
)
from .retry import RetryConfig
from .signers import (
    KnownAddress,
    SigningPrincipal,
    collect_signers,
    resolve_principal,
)
from .transaction import (
    KeypairWallet,
    Wallet,
    build_compute_budget_instruction,
    compose_transaction,
)
from .types import (
    AuthorizationProof,
    BuildResult,
    Farm,
    FarmConfig,
    Farmer,
    FarmerState,
    FixedRateConfig,
    FixedRateSchedule,
    MaxCounts,
    ProgramAccount,
    RarityConfig,
    RewardType,
    TierConfig,
    TokenAccount,
    VariableRateConfig,
    WhitelistType,
    parse_farmer_state,
    parse_reward_type,
    parse_union_tag,
)

__all__ = [
    # Client
    "GemFarmClient",
    "KeypairWallet",
    "Wallet",
    "RetryConfig",
    # Constants
    "GEM_FARM_PROGRAM_ID",
    "GEM_BANK_PROGRAM_ID",
    "FEE_ACCOUNT",
    # Accounts
    "FARM_DISCRIMINATOR",
    "FARMER_DISCRIMINATOR",
    "AUTHORIZATION_PROOF_DISCRIMINATOR",
    "AccountFilter",
    "farm_filters",
    "farmer_filters",
    "authorization_proof_filters",
    "matches_filters",
    "deserialize_farm",
    "deserialize_farmer",
    "deserialize_authorization_proof",
    "deserialize_token_account",
    # Errors
    "GemFarmError",
    "DerivationExhaustedError",
    "MalformedUnionError",
    "QueryRejectedError",
    "RemoteRejectionError",
    "TransportFailureError",
    "AccountNotFoundError",
    "InvalidAccountDataError",
    "InvalidDiscriminatorError",
    # Instructions
    "build_init_farm_instruction",
    "build_update_farm_instruction",
    "build_payout_from_treasury_instruction",
    "build_add_to_bank_whitelist_instruction",
    "build_remove_from_bank_whitelist_instruction",
    "build_init_farmer_instruction",
    "build_stake_instruction",
    "build_unstake_instruction",
    "build_claim_instruction",
    "build_flash_deposit_instruction",
    "build_flash_deposit_pnft_instruction",
    "build_refresh_farmer_instruction",
    "build_authorize_funder_instruction",
    "build_deauthorize_funder_instruction",
    "build_fund_reward_instruction",
    "build_cancel_reward_instruction",
    "build_lock_reward_instruction",
    "build_add_rarities_to_bank_instruction",
    "build_remaining_accounts",
    "build_compute_budget_instruction",
    "compose_transaction",
    # PDA
    "PdaKind",
    "derive",
    "find_program_address",
    "get_farm_authority_pda",
    "get_farm_treasury_pda",
    "get_reward_pot_pda",
    "get_farmer_pda",
    "get_authorization_proof_pda",
    "get_vault_pda",
    "get_vault_authority_pda",
    "get_gem_box_pda",
    "get_gem_deposit_receipt_pda",
    "get_rarity_pda",
    "get_whitelist_proof_pda",
    # Signers
    "KnownAddress",
    "SigningPrincipal",
    "resolve_principal",
    "collect_signers",
    # Types
    "RewardType",
    "FarmerState",
    "WhitelistType",
    "FarmConfig",
    "MaxCounts",
    "TierConfig",
    "TokenAccount",
    "FixedRateSchedule",
    "FixedRateConfig",
    "VariableRateConfig",
    "RarityConfig",
    "Farm",
    "Farmer",
    "AuthorizationProof",
    "ProgramAccount",
    "BuildResult",
    "parse_union_tag",
    "parse_reward_type",
    "parse_farmer_state",
]
