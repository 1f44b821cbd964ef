"""Tests for environment configuration."""

import pytest
from solders.pubkey import Pubkey

from gem_farm_sdk.config import (
    DEFAULT_RPC_URL,
    ENV_BANK_PROGRAM_ID,
    ENV_COMMITMENT,
    ENV_FARM_PROGRAM_ID,
    ENV_RPC_URL,
    GemFarmConfig,
    load_pubkey,
)
from gem_farm_sdk.program.constants import GEM_BANK_PROGRAM_ID, GEM_FARM_PROGRAM_ID


class TestFromEnv:
    def test_defaults(self):
        config = GemFarmConfig.from_env({})

        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.farm_program_id == GEM_FARM_PROGRAM_ID
        assert config.bank_program_id == GEM_BANK_PROGRAM_ID
        assert config.commitment == "confirmed"

    def test_overrides(self):
        farm_program = Pubkey.new_unique()
        bank_program = Pubkey.new_unique()

        config = GemFarmConfig.from_env(
            {
                ENV_RPC_URL: "http://localhost:8899",
                ENV_FARM_PROGRAM_ID: str(farm_program),
                ENV_BANK_PROGRAM_ID: str(bank_program),
                ENV_COMMITMENT: "finalized",
            }
        )

        assert config.rpc_url == "http://localhost:8899"
        assert config.farm_program_id == farm_program
        assert config.bank_program_id == bank_program
        assert config.commitment == "finalized"

    def test_empty_values_fall_back(self):
        config = GemFarmConfig.from_env({ENV_RPC_URL: "", ENV_FARM_PROGRAM_ID: ""})

        assert config.rpc_url == DEFAULT_RPC_URL
        assert config.farm_program_id == GEM_FARM_PROGRAM_ID

    def test_invalid_commitment(self):
        with pytest.raises(ValueError, match=ENV_COMMITMENT):
            GemFarmConfig.from_env({ENV_COMMITMENT: "max"})

    def test_invalid_program_id(self):
        with pytest.raises(ValueError, match=ENV_BANK_PROGRAM_ID):
            GemFarmConfig.from_env({ENV_BANK_PROGRAM_ID: "not-a-key"})


class TestLoadPubkey:
    def test_missing_uses_default(self):
        default = Pubkey.new_unique()

        assert load_pubkey({}, "KEY", default) == default

    def test_parses_value(self):
        key = Pubkey.new_unique()

        assert load_pubkey({"KEY": str(key)}, "KEY", Pubkey.default()) == key
