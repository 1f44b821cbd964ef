"""Instruction builders for the Gem Farm SDK.

Every builder is pure: it derives the addresses it needs and returns a
solders Instruction. Instruction data is the 8-byte Anchor discriminator
followed by the Borsh-encoded arguments.
"""

from typing import List, Optional, Sequence

from construct import Construct
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from . import layouts
from .constants import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    FEE_ACCOUNT,
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
    INSTRUCTIONS_SYSVAR_ID,
    RENT_SYSVAR_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_AUTH_RULES_PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from .pda import (
    get_authorization_proof_pda,
    get_edition_pda,
    get_farm_authority_pda,
    get_farm_treasury_pda,
    get_farmer_pda,
    get_gem_box_pda,
    get_gem_deposit_receipt_pda,
    get_metadata_pda,
    get_rarity_pda,
    get_reward_pot_pda,
    get_token_record_pda,
    get_vault_authority_pda,
    get_vault_pda,
    get_whitelist_proof_pda,
)
from .types import (
    FarmConfig,
    FixedRateConfig,
    FixedRateSchedule,
    MaxCounts,
    RarityConfig,
    RewardType,
    TierConfig,
    VariableRateConfig,
    WhitelistType,
)
from .utils import get_associated_token_address, instruction_discriminator


# ============================================================================
# ENCODING HELPERS
# ============================================================================


def _encode(ix_name: str, layout: Optional[Construct] = None, args: Optional[dict] = None) -> bytes:
    data = bytearray(instruction_discriminator(ix_name))
    if layout is not None:
        data.extend(layout.build(args))
    return bytes(data)


def _meta(pubkey: Pubkey, writable: bool = False, signer: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=signer, is_writable=writable)


def _farm_config_args(config: FarmConfig) -> dict:
    return {
        "min_staking_period_sec": config.min_staking_period_sec,
        "cooldown_period_sec": config.cooldown_period_sec,
        "unstaking_fee_lamp": config.unstaking_fee_lamp,
    }


def _max_counts_args(max_counts: MaxCounts) -> dict:
    return {
        "max_farmers": max_counts.max_farmers,
        "max_gems": max_counts.max_gems,
        "max_rarity_points": max_counts.max_rarity_points,
    }


def _tier_args(tier: Optional[TierConfig]) -> Optional[dict]:
    if tier is None:
        return None
    return {"reward_rate": tier.reward_rate, "required_tenure": tier.required_tenure}


def _schedule_args(schedule: FixedRateSchedule) -> dict:
    return {
        "base_rate": schedule.base_rate,
        "tier1": _tier_args(schedule.tier1),
        "tier2": _tier_args(schedule.tier2),
        "tier3": _tier_args(schedule.tier3),
        "denominator": schedule.denominator,
    }


def build_remaining_accounts(*addresses: Optional[Pubkey]) -> List[AccountMeta]:
    """Read-only, non-signer metas for the addresses that are present.

    Order is preserved; None entries are skipped.
    """
    return [_meta(address) for address in addresses if address is not None]


# ============================================================================
# FARM ADMINISTRATION
# ============================================================================


def build_init_farm_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    payer: Pubkey,
    bank: Pubkey,
    reward_a_mint: Pubkey,
    reward_a_type: RewardType,
    reward_b_mint: Pubkey,
    reward_b_type: RewardType,
    farm_config: FarmConfig,
    max_counts: Optional[MaxCounts] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the init_farm instruction.

    Accounts:
    0. farm (signer, writable)
    1. farm_manager (signer)
    2. farm_authority
    3. payer (signer, writable)
    4. fee_acc (writable)
    5. reward_a_pot (writable)
    6. reward_a_mint
    7. reward_b_pot (writable)
    8. reward_b_mint
    9. bank (signer, writable)
    10. gem_bank
    11. token_program
    12. system_program
    13. rent

    Data: [disc (8), bump_auth, bump_treasury, reward_type_a, reward_type_b,
    farm_config, max_counts (option), farm_treasury (32)]
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    farm_treasury, farm_treasury_bump = get_farm_treasury_pda(farm, farm_program_id)
    reward_a_pot, _ = get_reward_pot_pda(farm, reward_a_mint, farm_program_id)
    reward_b_pot, _ = get_reward_pot_pda(farm, reward_b_mint, farm_program_id)

    data = _encode(
        "init_farm",
        layouts.INIT_FARM_ARGS,
        {
            "bump_auth": farm_auth_bump,
            "bump_treasury": farm_treasury_bump,
            "reward_type_a": reward_a_type.index,
            "reward_type_b": reward_b_type.index,
            "farm_config": _farm_config_args(farm_config),
            "max_counts": _max_counts_args(max_counts) if max_counts is not None else None,
            "farm_treasury": bytes(farm_treasury),
        },
    )

    accounts = [
        _meta(farm, writable=True, signer=True),
        _meta(farm_manager, signer=True),
        _meta(farm_auth),
        _meta(payer, writable=True, signer=True),
        _meta(FEE_ACCOUNT, writable=True),
        _meta(reward_a_pot, writable=True),
        _meta(reward_a_mint),
        _meta(reward_b_pot, writable=True),
        _meta(reward_b_mint),
        _meta(bank, writable=True, signer=True),
        _meta(bank_program_id),
        _meta(TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(RENT_SYSVAR_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_update_farm_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    config: Optional[FarmConfig] = None,
    new_manager: Optional[Pubkey] = None,
    max_counts: Optional[MaxCounts] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the update_farm instruction.

    Accounts:
    0. farm (writable)
    1. farm_manager (signer)

    Data: [disc (8), config (option), manager (option), max_counts (option)]
    """
    data = _encode(
        "update_farm",
        layouts.UPDATE_FARM_ARGS,
        {
            "config": _farm_config_args(config) if config is not None else None,
            "manager": bytes(new_manager) if new_manager is not None else None,
            "max_counts": _max_counts_args(max_counts) if max_counts is not None else None,
        },
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_manager, signer=True),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_payout_from_treasury_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    destination: Pubkey,
    lamports: int,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the payout_from_treasury instruction.

    Accounts:
    0. farm
    1. farm_manager (signer)
    2. farm_authority
    3. farm_treasury (writable)
    4. destination (writable)
    5. system_program
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    farm_treasury, farm_treasury_bump = get_farm_treasury_pda(farm, farm_program_id)

    data = _encode(
        "payout_from_treasury",
        layouts.PAYOUT_FROM_TREASURY_ARGS,
        {
            "bump_auth": farm_auth_bump,
            "bump_treasury": farm_treasury_bump,
            "lamports": lamports,
        },
    )

    accounts = [
        _meta(farm),
        _meta(farm_manager, signer=True),
        _meta(farm_auth),
        _meta(farm_treasury, writable=True),
        _meta(destination, writable=True),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_add_to_bank_whitelist_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    bank: Pubkey,
    address_to_whitelist: Pubkey,
    whitelist_type: WhitelistType,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the add_to_bank_whitelist instruction.

    Accounts:
    0. farm
    1. farm_manager (signer, writable)
    2. farm_authority
    3. bank (writable)
    4. address_to_whitelist
    5. whitelist_proof (writable)
    6. system_program
    7. gem_bank
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    whitelist_proof, _ = get_whitelist_proof_pda(bank, address_to_whitelist, bank_program_id)

    data = _encode(
        "add_to_bank_whitelist",
        layouts.ADD_TO_BANK_WHITELIST_ARGS,
        {"bump_auth": farm_auth_bump, "whitelist_type": int(whitelist_type)},
    )

    accounts = [
        _meta(farm),
        _meta(farm_manager, writable=True, signer=True),
        _meta(farm_auth),
        _meta(bank, writable=True),
        _meta(address_to_whitelist),
        _meta(whitelist_proof, writable=True),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(bank_program_id),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_remove_from_bank_whitelist_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    bank: Pubkey,
    address_to_remove: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the remove_from_bank_whitelist instruction.

    Accounts:
    0. farm
    1. farm_manager (signer, writable)
    2. farm_authority (writable)
    3. bank (writable)
    4. address_to_remove
    5. whitelist_proof (writable)
    6. gem_bank
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    whitelist_proof, whitelist_proof_bump = get_whitelist_proof_pda(
        bank, address_to_remove, bank_program_id
    )

    data = _encode(
        "remove_from_bank_whitelist",
        layouts.REMOVE_FROM_BANK_WHITELIST_ARGS,
        {"bump_auth": farm_auth_bump, "bump_wl": whitelist_proof_bump},
    )

    accounts = [
        _meta(farm),
        _meta(farm_manager, writable=True, signer=True),
        _meta(farm_auth, writable=True),
        _meta(bank, writable=True),
        _meta(address_to_remove),
        _meta(whitelist_proof, writable=True),
        _meta(bank_program_id),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


# ============================================================================
# FARMER LIFECYCLE
# ============================================================================


def build_init_farmer_instruction(
    farm: Pubkey,
    identity: Pubkey,
    payer: Pubkey,
    bank: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the init_farmer instruction.

    Accounts:
    0. farm (writable)
    1. farmer (writable)
    2. identity (signer)
    3. payer (signer, writable)
    4. fee_acc (writable)
    5. bank (writable)
    6. vault (writable)
    7. gem_bank
    8. system_program

    Data: [disc (8)]
    """
    farmer, _ = get_farmer_pda(farm, identity, farm_program_id)
    vault, _ = get_vault_pda(bank, identity, bank_program_id)

    accounts = [
        _meta(farm, writable=True),
        _meta(farmer, writable=True),
        _meta(identity, signer=True),
        _meta(payer, writable=True, signer=True),
        _meta(FEE_ACCOUNT, writable=True),
        _meta(bank, writable=True),
        _meta(vault, writable=True),
        _meta(bank_program_id),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(
        program_id=farm_program_id, accounts=accounts, data=_encode("init_farmer")
    )


def build_stake_instruction(
    farm: Pubkey,
    identity: Pubkey,
    bank: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the stake instruction.

    Accounts:
    0. farm (writable)
    1. farmer (writable)
    2. identity (signer, writable)
    3. bank (writable)
    4. vault (writable)
    5. farm_authority
    6. gem_bank
    7. fee_acc (writable)
    8. system_program
    """
    farmer, farmer_bump = get_farmer_pda(farm, identity, farm_program_id)
    vault, _ = get_vault_pda(bank, identity, bank_program_id)
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)

    data = _encode(
        "stake",
        layouts.STAKE_ARGS,
        {"bump_auth": farm_auth_bump, "bump_farmer": farmer_bump},
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farmer, writable=True),
        _meta(identity, writable=True, signer=True),
        _meta(bank, writable=True),
        _meta(vault, writable=True),
        _meta(farm_auth),
        _meta(bank_program_id),
        _meta(FEE_ACCOUNT, writable=True),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_unstake_instruction(
    farm: Pubkey,
    identity: Pubkey,
    bank: Pubkey,
    skip_rewards: bool = False,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the unstake instruction.

    Accounts:
    0. farm (writable)
    1. farmer (writable)
    2. farm_treasury (writable)
    3. identity (signer, writable)
    4. bank (writable)
    5. vault (writable)
    6. farm_authority
    7. gem_bank
    8. system_program
    9. fee_acc (writable)
    """
    farmer, farmer_bump = get_farmer_pda(farm, identity, farm_program_id)
    vault, _ = get_vault_pda(bank, identity, bank_program_id)
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    farm_treasury, farm_treasury_bump = get_farm_treasury_pda(farm, farm_program_id)

    data = _encode(
        "unstake",
        layouts.UNSTAKE_ARGS,
        {
            "bump_auth": farm_auth_bump,
            "bump_treasury": farm_treasury_bump,
            "bump_farmer": farmer_bump,
            "skip_rewards": skip_rewards,
        },
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farmer, writable=True),
        _meta(farm_treasury, writable=True),
        _meta(identity, writable=True, signer=True),
        _meta(bank, writable=True),
        _meta(vault, writable=True),
        _meta(farm_auth),
        _meta(bank_program_id),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(FEE_ACCOUNT, writable=True),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_claim_instruction(
    farm: Pubkey,
    identity: Pubkey,
    reward_a_mint: Pubkey,
    reward_b_mint: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the claim instruction.

    Reward destinations are the identity's associated token accounts.

    Accounts:
    0. farm (writable)
    1. farm_authority
    2. farmer (writable)
    3. identity (signer, writable)
    4. reward_a_pot (writable)
    5. reward_a_mint
    6. reward_a_destination (writable)
    7. reward_b_pot (writable)
    8. reward_b_mint
    9. reward_b_destination (writable)
    10. token_program
    11. associated_token_program
    12. system_program
    13. rent
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    farmer, farmer_bump = get_farmer_pda(farm, identity, farm_program_id)
    pot_a, pot_a_bump = get_reward_pot_pda(farm, reward_a_mint, farm_program_id)
    pot_b, pot_b_bump = get_reward_pot_pda(farm, reward_b_mint, farm_program_id)
    reward_a_destination = get_associated_token_address(identity, reward_a_mint)
    reward_b_destination = get_associated_token_address(identity, reward_b_mint)

    data = _encode(
        "claim",
        layouts.CLAIM_ARGS,
        {
            "bump_auth": farm_auth_bump,
            "bump_farmer": farmer_bump,
            "bump_pot_a": pot_a_bump,
            "bump_pot_b": pot_b_bump,
        },
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_auth),
        _meta(farmer, writable=True),
        _meta(identity, writable=True, signer=True),
        _meta(pot_a, writable=True),
        _meta(reward_a_mint),
        _meta(reward_a_destination, writable=True),
        _meta(pot_b, writable=True),
        _meta(reward_b_mint),
        _meta(reward_b_destination, writable=True),
        _meta(TOKEN_PROGRAM_ID),
        _meta(ASSOCIATED_TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(RENT_SYSVAR_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def _flash_deposit_accounts(
    farm: Pubkey,
    identity: Pubkey,
    bank: Pubkey,
    gem_mint: Pubkey,
    gem_source: Pubkey,
    farm_program_id: Pubkey,
    bank_program_id: Pubkey,
):
    farmer, farmer_bump = get_farmer_pda(farm, identity, farm_program_id)
    vault, _ = get_vault_pda(bank, identity, bank_program_id)
    farm_auth, _ = get_farm_authority_pda(farm, farm_program_id)
    gem_box, _ = get_gem_box_pda(vault, gem_mint, bank_program_id)
    gdr, _ = get_gem_deposit_receipt_pda(vault, gem_mint, bank_program_id)
    vault_auth, vault_auth_bump = get_vault_authority_pda(vault, bank_program_id)
    gem_rarity, gem_rarity_bump = get_rarity_pda(bank, gem_mint, bank_program_id)

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_auth),
        _meta(farmer, writable=True),
        _meta(identity, writable=True, signer=True),
        _meta(bank),
        _meta(vault, writable=True),
        _meta(vault_auth),
        _meta(gem_box, writable=True),
        _meta(gdr, writable=True),
        _meta(gem_source, writable=True),
        _meta(gem_mint),
        _meta(gem_rarity),
        _meta(TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(RENT_SYSVAR_ID),
        _meta(bank_program_id),
        _meta(FEE_ACCOUNT, writable=True),
    ]
    bumps = {
        "bump_farmer": farmer_bump,
        "bump_vault_auth": vault_auth_bump,
        "bump_rarity": gem_rarity_bump,
    }
    return accounts, bumps, gem_box


def build_flash_deposit_instruction(
    farm: Pubkey,
    identity: Pubkey,
    bank: Pubkey,
    gem_amount: int,
    gem_mint: Pubkey,
    gem_source: Pubkey,
    mint_proof: Optional[Pubkey] = None,
    metadata: Optional[Pubkey] = None,
    creator_proof: Optional[Pubkey] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the flash_deposit instruction (deposit and stake in one step).

    Accounts:
    0. farm (writable)
    1. farm_authority
    2. farmer (writable)
    3. identity (signer, writable)
    4. bank
    5. vault (writable)
    6. vault_authority
    7. gem_box (writable)
    8. gem_deposit_receipt (writable)
    9. gem_source (writable)
    10. gem_mint
    11. gem_rarity
    12. token_program
    13. system_program
    14. rent
    15. gem_bank
    16. fee_acc (writable)
    Remaining (present only): mint_proof, metadata, creator_proof
    """
    accounts, bumps, _ = _flash_deposit_accounts(
        farm, identity, bank, gem_mint, gem_source, farm_program_id, bank_program_id
    )
    accounts.extend(build_remaining_accounts(mint_proof, metadata, creator_proof))

    data = _encode(
        "flash_deposit", layouts.FLASH_DEPOSIT_ARGS, dict(bumps, amount=gem_amount)
    )

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_flash_deposit_pnft_instruction(
    farm: Pubkey,
    identity: Pubkey,
    bank: Pubkey,
    gem_amount: int,
    gem_mint: Pubkey,
    gem_source: Pubkey,
    mint_proof: Optional[Pubkey] = None,
    creator_proof: Optional[Pubkey] = None,
    rule_set: Optional[Pubkey] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the flash_deposit_pnft instruction for programmable NFTs.

    Accounts 0-16 as flash_deposit, then:
    17. gem_metadata (writable)
    18. gem_edition
    19. owner_token_record (writable)
    20. dest_token_record (writable)
    21. authorization_rules_program
    22. token_metadata_program
    23. instructions sysvar
    24. associated_token_program
    Remaining (present only): rule_set, mint_proof, creator_proof

    Data: [disc (8), bump_farmer, bump_vault_auth, bump_rarity, amount (u64),
    rules_acc_present (bool)]
    """
    accounts, bumps, gem_box = _flash_deposit_accounts(
        farm, identity, bank, gem_mint, gem_source, farm_program_id, bank_program_id
    )
    meta, _ = get_metadata_pda(gem_mint)
    edition, _ = get_edition_pda(gem_mint)
    owner_token_record, _ = get_token_record_pda(gem_mint, gem_source)
    dest_token_record, _ = get_token_record_pda(gem_mint, gem_box)

    accounts.extend(
        [
            _meta(meta, writable=True),
            _meta(edition),
            _meta(owner_token_record, writable=True),
            _meta(dest_token_record, writable=True),
            _meta(TOKEN_AUTH_RULES_PROGRAM_ID),
            _meta(TOKEN_METADATA_PROGRAM_ID),
            _meta(INSTRUCTIONS_SYSVAR_ID),
            _meta(ASSOCIATED_TOKEN_PROGRAM_ID),
        ]
    )
    accounts.extend(build_remaining_accounts(rule_set, mint_proof, creator_proof))

    data = _encode(
        "flash_deposit_pnft",
        layouts.FLASH_DEPOSIT_PNFT_ARGS,
        dict(bumps, amount=gem_amount, rules_acc_present=rule_set is not None),
    )

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_refresh_farmer_instruction(
    farm: Pubkey,
    identity: Pubkey,
    reenroll: Optional[bool] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build refresh_farmer, or refresh_farmer_signed when reenroll is given.

    Accounts:
    0. farm (writable)
    1. farmer (writable)
    2. identity (signer only for the signed variant)
    """
    farmer, farmer_bump = get_farmer_pda(farm, identity, farm_program_id)

    if reenroll is None:
        data = _encode("refresh_farmer", layouts.REFRESH_FARMER_ARGS, {"bump": farmer_bump})
    else:
        data = _encode(
            "refresh_farmer_signed",
            layouts.REFRESH_FARMER_SIGNED_ARGS,
            {"bump": farmer_bump, "reenroll": reenroll},
        )

    accounts = [
        _meta(farm, writable=True),
        _meta(farmer, writable=True),
        _meta(identity, signer=reenroll is not None),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


# ============================================================================
# FUNDING
# ============================================================================


def build_authorize_funder_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    funder: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the authorize_funder instruction.

    Accounts:
    0. farm (writable)
    1. farm_manager (signer, writable)
    2. funder_to_authorize
    3. authorization_proof (writable)
    4. system_program

    Data: [disc (8)]
    """
    authorization_proof, _ = get_authorization_proof_pda(farm, funder, farm_program_id)

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_manager, writable=True, signer=True),
        _meta(funder),
        _meta(authorization_proof, writable=True),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(
        program_id=farm_program_id, accounts=accounts, data=_encode("authorize_funder")
    )


def build_deauthorize_funder_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    funder: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the deauthorize_funder instruction.

    Accounts:
    0. farm (writable)
    1. farm_manager (signer, writable)
    2. funder_to_deauthorize
    3. authorization_proof (writable)
    4. system_program
    """
    authorization_proof, authorization_proof_bump = get_authorization_proof_pda(
        farm, funder, farm_program_id
    )

    data = _encode(
        "deauthorize_funder",
        layouts.DEAUTHORIZE_FUNDER_ARGS,
        {"bump": authorization_proof_bump},
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_manager, writable=True, signer=True),
        _meta(funder),
        _meta(authorization_proof, writable=True),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_fund_reward_instruction(
    farm: Pubkey,
    reward_mint: Pubkey,
    funder: Pubkey,
    reward_source: Pubkey,
    variable_rate_config: Optional[VariableRateConfig] = None,
    fixed_rate_config: Optional[FixedRateConfig] = None,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the fund_reward instruction.

    Accounts:
    0. farm (writable)
    1. authorization_proof
    2. authorized_funder (signer, writable)
    3. reward_pot (writable)
    4. reward_source (writable)
    5. reward_mint
    6. token_program
    7. system_program
    """
    authorization_proof, authorization_proof_bump = get_authorization_proof_pda(
        farm, funder, farm_program_id
    )
    pot, pot_bump = get_reward_pot_pda(farm, reward_mint, farm_program_id)

    variable = None
    if variable_rate_config is not None:
        variable = {
            "amount": variable_rate_config.amount,
            "duration_sec": variable_rate_config.duration_sec,
        }
    fixed = None
    if fixed_rate_config is not None:
        fixed = {
            "schedule": _schedule_args(fixed_rate_config.schedule),
            "amount": fixed_rate_config.amount,
            "duration_sec": fixed_rate_config.duration_sec,
        }

    data = _encode(
        "fund_reward",
        layouts.FUND_REWARD_ARGS,
        {
            "bump_proof": authorization_proof_bump,
            "bump_pot": pot_bump,
            "variable_rate_config": variable,
            "fixed_rate_config": fixed,
        },
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(authorization_proof),
        _meta(funder, writable=True, signer=True),
        _meta(pot, writable=True),
        _meta(reward_source, writable=True),
        _meta(reward_mint),
        _meta(TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_cancel_reward_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    reward_mint: Pubkey,
    receiver: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the cancel_reward instruction.

    Accounts:
    0. farm (writable)
    1. farm_manager (signer, writable)
    2. farm_authority
    3. reward_pot (writable)
    4. reward_destination (writable)
    5. reward_mint
    6. receiver
    7. token_program
    8. associated_token_program
    9. system_program
    10. rent
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)
    pot, pot_bump = get_reward_pot_pda(farm, reward_mint, farm_program_id)
    reward_destination = get_associated_token_address(receiver, reward_mint)

    data = _encode(
        "cancel_reward",
        layouts.CANCEL_REWARD_ARGS,
        {"bump_auth": farm_auth_bump, "bump_pot": pot_bump},
    )

    accounts = [
        _meta(farm, writable=True),
        _meta(farm_manager, writable=True, signer=True),
        _meta(farm_auth),
        _meta(pot, writable=True),
        _meta(reward_destination, writable=True),
        _meta(reward_mint),
        _meta(receiver),
        _meta(TOKEN_PROGRAM_ID),
        _meta(ASSOCIATED_TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
        _meta(RENT_SYSVAR_ID),
    ]

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)


def build_lock_reward_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    reward_mint: Pubkey,
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
) -> Instruction:
    """Build the lock_reward instruction.

    Accounts:
    0. farm (writable)
    1. farm_manager (signer, writable)
    2. reward_mint
    """
    accounts = [
        _meta(farm, writable=True),
        _meta(farm_manager, writable=True, signer=True),
        _meta(reward_mint),
    ]

    return Instruction(
        program_id=farm_program_id, accounts=accounts, data=_encode("lock_reward")
    )


# ============================================================================
# RARITY
# ============================================================================


def build_add_rarities_to_bank_instruction(
    farm: Pubkey,
    farm_manager: Pubkey,
    bank: Pubkey,
    rarity_configs: Sequence[RarityConfig],
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
) -> Instruction:
    """Build the add_rarities_to_bank instruction.

    Accounts:
    0. farm
    1. farm_manager (signer, writable)
    2. farm_authority
    3. bank
    4. gem_bank
    5. system_program
    Remaining, per config: mint, gem_rarity (writable)
    """
    farm_auth, farm_auth_bump = get_farm_authority_pda(farm, farm_program_id)

    accounts = [
        _meta(farm),
        _meta(farm_manager, writable=True, signer=True),
        _meta(farm_auth),
        _meta(bank),
        _meta(bank_program_id),
        _meta(SYSTEM_PROGRAM_ID),
    ]
    for config in rarity_configs:
        gem_rarity, _ = get_rarity_pda(bank, config.mint, bank_program_id)
        accounts.append(_meta(config.mint))
        accounts.append(_meta(gem_rarity, writable=True))

    data = _encode(
        "add_rarities_to_bank",
        layouts.ADD_RARITIES_TO_BANK_ARGS,
        {
            "bump_auth": farm_auth_bump,
            "rarity_configs": [
                {"mint": bytes(c.mint), "rarity_points": c.rarity_points}
                for c in rarity_configs
            ],
        },
    )

    return Instruction(program_id=farm_program_id, accounts=accounts, data=data)
