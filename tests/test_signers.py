"""Tests for signer resolution."""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from gem_farm_sdk.program.signers import (
    KnownAddress,
    SigningPrincipal,
    collect_signers,
    resolve_principal,
    to_principal,
)


class TestResolvePrincipal:
    def test_address_contributes_no_signer(self):
        address = Pubkey.new_unique()
        resolved = resolve_principal(address)

        assert resolved.pubkey == address
        assert resolved.signers == []

    def test_keypair_contributes_itself(self):
        keypair = Keypair()
        resolved = resolve_principal(keypair)

        assert resolved.pubkey == keypair.pubkey()
        assert resolved.signers == [keypair]

    def test_explicit_variants(self):
        keypair = Keypair()

        assert resolve_principal(KnownAddress(keypair.pubkey())).signers == []
        assert resolve_principal(SigningPrincipal(keypair)).signers == [keypair]

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            to_principal("not a key")


class TestCollectSigners:
    def test_deduplicates_preserving_order(self):
        a = Keypair()
        b = Keypair()

        signers = collect_signers(
            resolve_principal(a),
            resolve_principal(Pubkey.new_unique()),
            resolve_principal(b),
            resolve_principal(a),
        )

        assert [kp.pubkey() for kp in signers] == [a.pubkey(), b.pubkey()]

    def test_empty(self):
        assert collect_signers() == []
