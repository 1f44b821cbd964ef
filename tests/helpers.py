"""Builders for synthetic account data and a mock RPC connection."""

from types import SimpleNamespace
from typing import Dict, List, Optional

import base58
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from gem_farm_sdk.program import layouts
from gem_farm_sdk.program.accounts import (
    AUTHORIZATION_PROOF_DISCRIMINATOR,
    FARM_DISCRIMINATOR,
    FARMER_DISCRIMINATOR,
)

# ============================================================================
# ACCOUNT DATA
# ============================================================================


def _schedule(base_rate=0):
    return {"base_rate": base_rate, "tier1": None, "tier2": None, "tier3": None, "denominator": 1}


def _farm_reward(mint: Pubkey, reward_type: int):
    return {
        "reward_mint": bytes(mint),
        "reward_pot": bytes(Pubkey.new_unique()),
        "reward_type": reward_type,
        "fixed_rate": {"schedule": _schedule(), "reserved_amount": 0},
        "variable_rate": {
            "reward_rate": 0,
            "reward_last_updated_ts": 0,
            "accrued_reward_per_rarity_point": 0,
        },
        "funds": {"total_funded": 0, "total_refunded": 0, "total_accrued_to_stakers": 0},
        "times": {"duration_sec": 0, "reward_end_ts": 0, "lock_end_ts": 0},
    }


def build_farm_data(
    manager: Pubkey,
    bank: Optional[Pubkey] = None,
    reward_a_type: int = 0,
    reward_b_type: int = 1,
    farmer_count: int = 0,
) -> bytes:
    return FARM_DISCRIMINATOR + layouts.FARM.build(
        {
            "version": 0,
            "farm_manager": bytes(manager),
            "farm_treasury": bytes(Pubkey.new_unique()),
            "farm_authority": bytes(Pubkey.new_unique()),
            "farm_authority_seed": bytes(Pubkey.new_unique()),
            "farm_authority_bump_seed": 254,
            "bank": bytes(bank or Pubkey.new_unique()),
            "config": {
                "min_staking_period_sec": 60,
                "cooldown_period_sec": 120,
                "unstaking_fee_lamp": 1_000_000,
            },
            "farmer_count": farmer_count,
            "staked_farmer_count": 0,
            "gems_staked": 0,
            "rarity_points_staked": 0,
            "authorized_funder_count": 0,
            "reward_a": _farm_reward(Pubkey.new_unique(), reward_a_type),
            "reward_b": _farm_reward(Pubkey.new_unique(), reward_b_type),
            "max_counts": {"max_farmers": 0, "max_gems": 0, "max_rarity_points": 0},
            "reserved": bytes(32),
        }
    )


def _farmer_reward():
    return {
        "paid_out_reward": 0,
        "accrued_reward": 0,
        "variable_rate": {"last_recorded_accrued_reward_per_rarity_point": 0},
        "fixed_rate": {
            "begin_staking_ts": 0,
            "begin_schedule_ts": 0,
            "last_updated_ts": 0,
            "promised_schedule": _schedule(),
            "promised_duration": 0,
        },
    }


def build_farmer_data(
    farm: Pubkey,
    identity: Pubkey,
    state: int = 0,
    gems_staked: int = 0,
) -> bytes:
    return FARMER_DISCRIMINATOR + layouts.FARMER.build(
        {
            "farm": bytes(farm),
            "identity": bytes(identity),
            "vault": bytes(Pubkey.new_unique()),
            "state": state,
            "gems_staked": gems_staked,
            "rarity_points_staked": gems_staked,
            "min_staking_ends_ts": 0,
            "cooldown_ends_ts": 0,
            "reward_a": _farmer_reward(),
            "reward_b": _farmer_reward(),
            "reserved": bytes(32),
        }
    )


def build_authorization_proof_data(funder: Pubkey, farm: Pubkey) -> bytes:
    return AUTHORIZATION_PROOF_DISCRIMINATOR + layouts.AUTHORIZATION_PROOF.build(
        {"authorized_funder": bytes(funder), "farm": bytes(farm), "reserved": bytes(32)}
    )


def build_token_account_data(
    mint: Pubkey,
    owner: Pubkey,
    amount: int = 0,
    state: int = 1,
    delegate: Optional[Pubkey] = None,
) -> bytes:
    return layouts.TOKEN_ACCOUNT.build(
        {
            "mint": bytes(mint),
            "owner": bytes(owner),
            "amount": amount,
            "delegate_tag": 0 if delegate is None else 1,
            "delegate": bytes(delegate or Pubkey.default()),
            "state": state,
            "is_native_tag": 0,
            "is_native": 0,
            "delegated_amount": 0,
            "close_authority_tag": 0,
            "close_authority": bytes(32),
        }
    )


# ============================================================================
# MOCK CONNECTION
# ============================================================================


class MockResponse:
    def __init__(self, value):
        self.value = value


class MockBlockhash:
    def __init__(self, blockhash):
        self.blockhash = blockhash


class MockConnection:
    """In-memory stand-in for solana.rpc.async_api.AsyncClient."""

    def __init__(self, accounts: Optional[Dict[Pubkey, bytes]] = None):
        self.accounts: Dict[Pubkey, bytes] = dict(accounts or {})
        self.balances: Dict[Pubkey, int] = {}
        self.sent: List[Transaction] = []
        self.send_opts = []
        self.confirmed = []
        self.confirm_error = None
        self.calls: Dict[str, int] = {}

    def _count(self, name):
        self.calls[name] = self.calls.get(name, 0) + 1

    async def get_account_info(self, pubkey, commitment=None):
        self._count("get_account_info")
        data = self.accounts.get(pubkey)
        if data is None:
            return MockResponse(None)
        return MockResponse(SimpleNamespace(data=data))

    async def get_program_accounts(self, pubkey, commitment=None, encoding=None, filters=None):
        self._count("get_program_accounts")
        matches = []
        for address, data in self.accounts.items():
            ok = True
            for f in filters or []:
                value = base58.b58decode(f.bytes)
                if data[f.offset : f.offset + len(value)] != value:
                    ok = False
                    break
            if ok:
                matches.append(
                    SimpleNamespace(pubkey=address, account=SimpleNamespace(data=data))
                )
        return MockResponse(matches)

    async def get_balance(self, pubkey, commitment=None):
        self._count("get_balance")
        return MockResponse(self.balances.get(pubkey, 0))

    async def get_latest_blockhash(self, commitment=None):
        self._count("get_latest_blockhash")
        return MockResponse(MockBlockhash(Hash.default()))

    async def send_raw_transaction(self, txn, opts=None):
        self._count("send_raw_transaction")
        tx = Transaction.from_bytes(txn)
        self.sent.append(tx)
        self.send_opts.append(opts)
        return MockResponse(tx.signatures[0])

    async def confirm_transaction(self, tx_sig, commitment=None, *args, **kwargs):
        self._count("confirm_transaction")
        self.confirmed.append(tx_sig)
        return MockResponse([SimpleNamespace(err=self.confirm_error)])
