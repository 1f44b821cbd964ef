"""Tests for transaction assembly and signing."""

from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from gem_farm_sdk.program.constants import COMPUTE_BUDGET_PROGRAM_ID
from gem_farm_sdk.program.instructions import build_lock_reward_instruction
from gem_farm_sdk.program.transaction import (
    KeypairWallet,
    build_compute_budget_instruction,
    compose_transaction,
    sign_transaction,
)


def _program_ids(tx):
    message = tx.message
    return [message.account_keys[ix.program_id_index] for ix in message.instructions]


class TestComputeBudget:
    def test_targets_compute_budget_program(self):
        ix = build_compute_budget_instruction(256_000)

        assert ix.program_id == COMPUTE_BUDGET_PROGRAM_ID
        assert ix.accounts == []
        # SetComputeUnitLimit: [2, units (u32 LE)]
        assert bytes(ix.data) == bytes([2]) + (256_000).to_bytes(4, "little")


class TestComposeTransaction:
    def test_budget_instruction_first(self):
        wallet = KeypairWallet(Keypair())
        ix = build_lock_reward_instruction(Pubkey.new_unique(), wallet.pubkey, Pubkey.new_unique())

        tx = compose_transaction([ix], wallet.pubkey, Hash.default(), compute_units=400_000)

        assert _program_ids(tx) == [COMPUTE_BUDGET_PROGRAM_ID, ix.program_id]

    def test_without_budget(self):
        wallet = KeypairWallet(Keypair())
        ix = build_lock_reward_instruction(Pubkey.new_unique(), wallet.pubkey, Pubkey.new_unique())

        tx = compose_transaction([ix], wallet.pubkey, Hash.default())

        assert _program_ids(tx) == [ix.program_id]
        assert tx.message.account_keys[0] == wallet.pubkey


class TestSigning:
    def test_wallet_and_extra_signer(self):
        wallet = KeypairWallet(Keypair())
        manager = Keypair()
        ix = build_lock_reward_instruction(Pubkey.new_unique(), manager.pubkey(), Pubkey.new_unique())
        tx = compose_transaction([ix], wallet.pubkey, Hash.default())

        tx = sign_transaction(tx, wallet, [manager])

        assert all(sig != Signature.default() for sig in tx.signatures)
        tx.verify()

    def test_wallet_listed_as_extra_signer_is_not_duplicated(self):
        keypair = Keypair()
        wallet = KeypairWallet(keypair)
        ix = build_lock_reward_instruction(Pubkey.new_unique(), keypair.pubkey(), Pubkey.new_unique())
        tx = compose_transaction([ix], wallet.pubkey, Hash.default())

        tx = sign_transaction(tx, wallet, [keypair])

        assert len(tx.signatures) == 1
        tx.verify()
