"""Tests for instruction builders."""

import pytest
from solders.pubkey import Pubkey

from gem_farm_sdk.program import layouts
from gem_farm_sdk.program.constants import (
    FEE_ACCOUNT,
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
)
from gem_farm_sdk.program.instructions import (
    build_add_rarities_to_bank_instruction,
    build_add_to_bank_whitelist_instruction,
    build_authorize_funder_instruction,
    build_claim_instruction,
    build_flash_deposit_instruction,
    build_flash_deposit_pnft_instruction,
    build_fund_reward_instruction,
    build_init_farm_instruction,
    build_init_farmer_instruction,
    build_lock_reward_instruction,
    build_refresh_farmer_instruction,
    build_remaining_accounts,
    build_stake_instruction,
    build_unstake_instruction,
    build_update_farm_instruction,
)
from gem_farm_sdk.program.pda import (
    get_farm_authority_pda,
    get_farm_treasury_pda,
    get_farmer_pda,
    get_rarity_pda,
    get_reward_pot_pda,
)
from gem_farm_sdk.program.types import (
    FarmConfig,
    FixedRateConfig,
    FixedRateSchedule,
    MaxCounts,
    RarityConfig,
    RewardType,
    TierConfig,
    WhitelistType,
)
from gem_farm_sdk.program.utils import get_associated_token_address, instruction_discriminator


@pytest.fixture
def farm():
    return Pubkey.new_unique()


@pytest.fixture
def bank():
    return Pubkey.new_unique()


@pytest.fixture
def identity():
    return Pubkey.new_unique()


def _keys(ix):
    return [meta.pubkey for meta in ix.accounts]


class TestRemainingAccounts:
    def test_skips_absent_and_keeps_order(self):
        a = Pubkey.new_unique()
        c = Pubkey.new_unique()

        metas = build_remaining_accounts(a, None, c)

        assert [m.pubkey for m in metas] == [a, c]
        assert all(not m.is_signer and not m.is_writable for m in metas)

    def test_all_absent(self):
        assert build_remaining_accounts(None, None, None) == []


class TestInitFarm:
    def test_layout(self, farm, bank):
        manager = Pubkey.new_unique()
        payer = Pubkey.new_unique()
        mint_a = Pubkey.new_unique()
        mint_b = Pubkey.new_unique()

        ix = build_init_farm_instruction(
            farm,
            manager,
            payer,
            bank,
            mint_a,
            RewardType.VARIABLE,
            mint_b,
            RewardType.FIXED,
            FarmConfig(60, 120, 5000),
            MaxCounts(10, 20, 30),
        )

        assert ix.program_id == GEM_FARM_PROGRAM_ID
        assert bytes(ix.data[:8]) == instruction_discriminator("init_farm")
        assert _keys(ix)[:5] == [
            farm,
            manager,
            get_farm_authority_pda(farm)[0],
            payer,
            FEE_ACCOUNT,
        ]
        assert _keys(ix)[5] == get_reward_pot_pda(farm, mint_a)[0]
        assert _keys(ix)[10] == GEM_BANK_PROGRAM_ID
        assert ix.accounts[0].is_signer and ix.accounts[9].is_signer

        args = layouts.INIT_FARM_ARGS.parse(bytes(ix.data[8:]))
        assert args.bump_auth == get_farm_authority_pda(farm)[1]
        assert args.bump_treasury == get_farm_treasury_pda(farm)[1]
        assert (args.reward_type_a, args.reward_type_b) == (0, 1)
        assert args.max_counts.max_gems == 20
        assert Pubkey.from_bytes(args.farm_treasury) == get_farm_treasury_pda(farm)[0]


class TestUpdateFarm:
    def test_only_given_fields_encoded(self, farm):
        new_manager = Pubkey.new_unique()

        ix = build_update_farm_instruction(farm, Pubkey.new_unique(), new_manager=new_manager)
        args = layouts.UPDATE_FARM_ARGS.parse(bytes(ix.data[8:]))

        assert args.config is None
        assert args.max_counts is None
        assert Pubkey.from_bytes(args.manager) == new_manager
        assert len(ix.accounts) == 2


class TestFarmerInstructions:
    def test_init_farmer_charges_fee(self, farm, bank, identity):
        ix = build_init_farmer_instruction(farm, identity, identity, bank)

        assert FEE_ACCOUNT in _keys(ix)
        assert ix.data == instruction_discriminator("init_farmer")
        assert _keys(ix)[1] == get_farmer_pda(farm, identity)[0]

    def test_stake(self, farm, bank, identity):
        ix = build_stake_instruction(farm, identity, bank)

        assert FEE_ACCOUNT in _keys(ix)
        identity_meta = ix.accounts[2]
        assert identity_meta.pubkey == identity and identity_meta.is_signer

    def test_unstake_skip_rewards(self, farm, bank, identity):
        ix = build_unstake_instruction(farm, identity, bank, skip_rewards=True)
        args = layouts.UNSTAKE_ARGS.parse(bytes(ix.data[8:]))

        assert args.skip_rewards is True
        assert args.bump_farmer == get_farmer_pda(farm, identity)[1]
        assert _keys(ix)[2] == get_farm_treasury_pda(farm)[0]
        assert FEE_ACCOUNT in _keys(ix)

    def test_claim_destinations_are_atas(self, farm, identity):
        mint_a = Pubkey.new_unique()
        mint_b = Pubkey.new_unique()

        ix = build_claim_instruction(farm, identity, mint_a, mint_b)

        assert _keys(ix)[6] == get_associated_token_address(identity, mint_a)
        assert _keys(ix)[9] == get_associated_token_address(identity, mint_b)

    def test_refresh_unsigned(self, farm, identity):
        ix = build_refresh_farmer_instruction(farm, identity)

        assert bytes(ix.data[:8]) == instruction_discriminator("refresh_farmer")
        assert not ix.accounts[2].is_signer

    def test_refresh_signed(self, farm, identity):
        ix = build_refresh_farmer_instruction(farm, identity, reenroll=False)
        args = layouts.REFRESH_FARMER_SIGNED_ARGS.parse(bytes(ix.data[8:]))

        assert bytes(ix.data[:8]) == instruction_discriminator("refresh_farmer_signed")
        assert args.reenroll is False
        assert ix.accounts[2].is_signer


class TestFlashDeposit:
    def test_remaining_accounts_order(self, farm, bank, identity):
        mint_proof = Pubkey.new_unique()
        creator_proof = Pubkey.new_unique()

        ix = build_flash_deposit_instruction(
            farm,
            identity,
            bank,
            1,
            Pubkey.new_unique(),
            Pubkey.new_unique(),
            mint_proof=mint_proof,
            creator_proof=creator_proof,
        )

        assert _keys(ix)[16] == FEE_ACCOUNT
        assert _keys(ix)[17:] == [mint_proof, creator_proof]

    def test_rarity_account(self, farm, bank, identity):
        mint = Pubkey.new_unique()

        ix = build_flash_deposit_instruction(farm, identity, bank, 5, mint, Pubkey.new_unique())
        args = layouts.FLASH_DEPOSIT_ARGS.parse(bytes(ix.data[8:]))

        assert _keys(ix)[11] == get_rarity_pda(bank, mint)[0]
        assert args.amount == 5
        assert args.bump_rarity == get_rarity_pda(bank, mint)[1]

    def test_pnft_rule_set_flag(self, farm, bank, identity):
        rule_set = Pubkey.new_unique()

        with_rules = build_flash_deposit_pnft_instruction(
            farm, identity, bank, 1, Pubkey.new_unique(), Pubkey.new_unique(), rule_set=rule_set
        )
        without = build_flash_deposit_pnft_instruction(
            farm, identity, bank, 1, Pubkey.new_unique(), Pubkey.new_unique()
        )

        assert layouts.FLASH_DEPOSIT_PNFT_ARGS.parse(bytes(with_rules.data[8:])).rules_acc_present
        assert not layouts.FLASH_DEPOSIT_PNFT_ARGS.parse(bytes(without.data[8:])).rules_acc_present
        assert _keys(with_rules)[25] == rule_set
        assert len(without.accounts) == 25


class TestFunding:
    def test_authorize_funder_has_no_args(self, farm):
        ix = build_authorize_funder_instruction(farm, Pubkey.new_unique(), Pubkey.new_unique())

        assert ix.data == instruction_discriminator("authorize_funder")

    def test_fund_reward_fixed_rate(self, farm):
        funder = Pubkey.new_unique()
        schedule = FixedRateSchedule(base_rate=3, tier1=TierConfig(5, 60), denominator=10)

        ix = build_fund_reward_instruction(
            farm,
            Pubkey.new_unique(),
            funder,
            Pubkey.new_unique(),
            fixed_rate_config=FixedRateConfig(schedule, amount=1000, duration_sec=3600),
        )
        args = layouts.FUND_REWARD_ARGS.parse(bytes(ix.data[8:]))

        assert args.variable_rate_config is None
        assert args.fixed_rate_config.amount == 1000
        assert args.fixed_rate_config.schedule.tier1.reward_rate == 5
        assert args.fixed_rate_config.schedule.tier2 is None
        assert ix.accounts[2].pubkey == funder and ix.accounts[2].is_signer

    def test_lock_reward(self, farm):
        mint = Pubkey.new_unique()
        ix = build_lock_reward_instruction(farm, Pubkey.new_unique(), mint)

        assert _keys(ix)[2] == mint
        assert ix.data == instruction_discriminator("lock_reward")


class TestBankAdministration:
    def test_whitelist_type_encoded(self, farm, bank):
        ix = build_add_to_bank_whitelist_instruction(
            farm, Pubkey.new_unique(), bank, Pubkey.new_unique(), WhitelistType.MINT
        )
        args = layouts.ADD_TO_BANK_WHITELIST_ARGS.parse(bytes(ix.data[8:]))

        assert args.whitelist_type == 2

    def test_rarities_remaining_pairs(self, farm, bank):
        configs = [RarityConfig(Pubkey.new_unique(), 10), RarityConfig(Pubkey.new_unique(), 20)]

        ix = build_add_rarities_to_bank_instruction(farm, Pubkey.new_unique(), bank, configs)
        remaining = ix.accounts[6:]

        assert len(remaining) == 4
        for i, config in enumerate(configs):
            mint_meta, rarity_meta = remaining[2 * i], remaining[2 * i + 1]
            assert mint_meta.pubkey == config.mint and not mint_meta.is_writable
            assert rarity_meta.pubkey == get_rarity_pda(bank, config.mint)[0]
            assert rarity_meta.is_writable

        args = layouts.ADD_RARITIES_TO_BANK_ARGS.parse(bytes(ix.data[8:]))
        assert [c.rarity_points for c in args.rarity_configs] == [10, 20]
