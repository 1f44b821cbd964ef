"""Borsh layouts for Gem Farm instruction arguments and accounts.

Account layouts exclude the 8-byte discriminator. Unit enums (reward type,
farmer state, whitelist type) are encoded as their u8 variant index.
"""

from borsh_construct import U8, U16, U32, U64, U128, Bool, CStruct, Option, Vec
from construct import Bytes

PUBKEY = Bytes(32)

# ============================================================================
# SHARED TYPES
# ============================================================================

FARM_CONFIG = CStruct(
    "min_staking_period_sec" / U64,
    "cooldown_period_sec" / U64,
    "unstaking_fee_lamp" / U64,
)

MAX_COUNTS = CStruct(
    "max_farmers" / U32,
    "max_gems" / U32,
    "max_rarity_points" / U32,
)

TIER_CONFIG = CStruct(
    "reward_rate" / U64,
    "required_tenure" / U64,
)

FIXED_RATE_SCHEDULE = CStruct(
    "base_rate" / U64,
    "tier1" / Option(TIER_CONFIG),
    "tier2" / Option(TIER_CONFIG),
    "tier3" / Option(TIER_CONFIG),
    "denominator" / U64,
)

FIXED_RATE_CONFIG = CStruct(
    "schedule" / FIXED_RATE_SCHEDULE,
    "amount" / U64,
    "duration_sec" / U64,
)

VARIABLE_RATE_CONFIG = CStruct(
    "amount" / U64,
    "duration_sec" / U64,
)

RARITY_CONFIG = CStruct(
    "mint" / PUBKEY,
    "rarity_points" / U16,
)

# ============================================================================
# INSTRUCTION ARGUMENTS (bumps first, domain values after)
# ============================================================================

INIT_FARM_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_treasury" / U8,
    "reward_type_a" / U8,
    "reward_type_b" / U8,
    "farm_config" / FARM_CONFIG,
    "max_counts" / Option(MAX_COUNTS),
    "farm_treasury" / PUBKEY,
)

UPDATE_FARM_ARGS = CStruct(
    "config" / Option(FARM_CONFIG),
    "manager" / Option(PUBKEY),
    "max_counts" / Option(MAX_COUNTS),
)

PAYOUT_FROM_TREASURY_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_treasury" / U8,
    "lamports" / U64,
)

ADD_TO_BANK_WHITELIST_ARGS = CStruct(
    "bump_auth" / U8,
    "whitelist_type" / U8,
)

REMOVE_FROM_BANK_WHITELIST_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_wl" / U8,
)

STAKE_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_farmer" / U8,
)

UNSTAKE_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_treasury" / U8,
    "bump_farmer" / U8,
    "skip_rewards" / Bool,
)

CLAIM_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_farmer" / U8,
    "bump_pot_a" / U8,
    "bump_pot_b" / U8,
)

FLASH_DEPOSIT_ARGS = CStruct(
    "bump_farmer" / U8,
    "bump_vault_auth" / U8,
    "bump_rarity" / U8,
    "amount" / U64,
)

FLASH_DEPOSIT_PNFT_ARGS = CStruct(
    "bump_farmer" / U8,
    "bump_vault_auth" / U8,
    "bump_rarity" / U8,
    "amount" / U64,
    "rules_acc_present" / Bool,
)

REFRESH_FARMER_ARGS = CStruct(
    "bump" / U8,
)

REFRESH_FARMER_SIGNED_ARGS = CStruct(
    "bump" / U8,
    "reenroll" / Bool,
)

DEAUTHORIZE_FUNDER_ARGS = CStruct(
    "bump" / U8,
)

FUND_REWARD_ARGS = CStruct(
    "bump_proof" / U8,
    "bump_pot" / U8,
    "variable_rate_config" / Option(VARIABLE_RATE_CONFIG),
    "fixed_rate_config" / Option(FIXED_RATE_CONFIG),
)

CANCEL_REWARD_ARGS = CStruct(
    "bump_auth" / U8,
    "bump_pot" / U8,
)

ADD_RARITIES_TO_BANK_ARGS = CStruct(
    "bump_auth" / U8,
    "rarity_configs" / Vec(RARITY_CONFIG),
)

# ============================================================================
# ACCOUNTS
# ============================================================================

FUNDS_TRACKER = CStruct(
    "total_funded" / U64,
    "total_refunded" / U64,
    "total_accrued_to_stakers" / U64,
)

TIME_TRACKER = CStruct(
    "duration_sec" / U64,
    "reward_end_ts" / U64,
    "lock_end_ts" / U64,
)

FIXED_RATE_REWARD = CStruct(
    "schedule" / FIXED_RATE_SCHEDULE,
    "reserved_amount" / U64,
)

VARIABLE_RATE_REWARD = CStruct(
    "reward_rate" / U128,
    "reward_last_updated_ts" / U64,
    "accrued_reward_per_rarity_point" / U128,
)

FARM_REWARD = CStruct(
    "reward_mint" / PUBKEY,
    "reward_pot" / PUBKEY,
    "reward_type" / U8,
    "fixed_rate" / FIXED_RATE_REWARD,
    "variable_rate" / VARIABLE_RATE_REWARD,
    "funds" / FUNDS_TRACKER,
    "times" / TIME_TRACKER,
)

FARM = CStruct(
    "version" / U16,
    "farm_manager" / PUBKEY,
    "farm_treasury" / PUBKEY,
    "farm_authority" / PUBKEY,
    "farm_authority_seed" / PUBKEY,
    "farm_authority_bump_seed" / U8,
    "bank" / PUBKEY,
    "config" / FARM_CONFIG,
    "farmer_count" / U64,
    "staked_farmer_count" / U64,
    "gems_staked" / U64,
    "rarity_points_staked" / U64,
    "authorized_funder_count" / U64,
    "reward_a" / FARM_REWARD,
    "reward_b" / FARM_REWARD,
    "max_counts" / MAX_COUNTS,
    "reserved" / Bytes(32),
)

FARMER_VARIABLE_RATE_REWARD = CStruct(
    "last_recorded_accrued_reward_per_rarity_point" / U128,
)

FARMER_FIXED_RATE_REWARD = CStruct(
    "begin_staking_ts" / U64,
    "begin_schedule_ts" / U64,
    "last_updated_ts" / U64,
    "promised_schedule" / FIXED_RATE_SCHEDULE,
    "promised_duration" / U64,
)

FARMER_REWARD = CStruct(
    "paid_out_reward" / U64,
    "accrued_reward" / U64,
    "variable_rate" / FARMER_VARIABLE_RATE_REWARD,
    "fixed_rate" / FARMER_FIXED_RATE_REWARD,
)

FARMER = CStruct(
    "farm" / PUBKEY,
    "identity" / PUBKEY,
    "vault" / PUBKEY,
    "state" / U8,
    "gems_staked" / U64,
    "rarity_points_staked" / U64,
    "min_staking_ends_ts" / U64,
    "cooldown_ends_ts" / U64,
    "reward_a" / FARMER_REWARD,
    "reward_b" / FARMER_REWARD,
    "reserved" / Bytes(32),
)

AUTHORIZATION_PROOF = CStruct(
    "authorized_funder" / PUBKEY,
    "farm" / PUBKEY,
    "reserved" / Bytes(32),
)

# ============================================================================
# SPL TOKEN
# ============================================================================

# COption fields carry a u32 tag (0 = None, 1 = Some) before a fixed-size body.
TOKEN_ACCOUNT = CStruct(
    "mint" / PUBKEY,
    "owner" / PUBKEY,
    "amount" / U64,
    "delegate_tag" / U32,
    "delegate" / PUBKEY,
    "state" / U8,
    "is_native_tag" / U32,
    "is_native" / U64,
    "delegated_amount" / U64,
    "close_authority_tag" / U32,
    "close_authority" / PUBKEY,
)
