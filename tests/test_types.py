"""Tests for domain enums and tagged-union parsing."""

from types import SimpleNamespace

import pytest

from gem_farm_sdk.program.errors import MalformedUnionError
from gem_farm_sdk.program.types import (
    FarmerState,
    FixedRateConfig,
    FixedRateSchedule,
    RewardType,
    VariableRateConfig,
    WhitelistType,
    parse_farmer_state,
    parse_reward_type,
    parse_union_tag,
)


class TestParseUnionTag:
    def test_single_tag(self):
        assert parse_union_tag({"fixed": {}}) == "fixed"

    def test_empty_is_malformed(self):
        with pytest.raises(MalformedUnionError):
            parse_union_tag({})

    def test_several_tags_is_malformed(self):
        with pytest.raises(MalformedUnionError) as exc_info:
            parse_union_tag({"staked": {}, "unstaked": {}})

        assert set(exc_info.value.keys) == {"staked", "unstaked"}


class TestRewardType:
    def test_wire_round_trip(self):
        for reward_type in RewardType:
            assert RewardType.from_wire(reward_type.to_wire()) is reward_type

    def test_variant_index(self):
        assert RewardType.VARIABLE.index == 0
        assert RewardType.FIXED.index == 1

    def test_unknown_tag(self):
        with pytest.raises(MalformedUnionError):
            RewardType.from_wire({"linear": {}})

    def test_parse_from_decoded_reward(self):
        assert parse_reward_type(SimpleNamespace(reward_type=RewardType.FIXED)) == "fixed"

    def test_parse_from_wire_shape(self):
        assert parse_reward_type(SimpleNamespace(reward_type={"variable": {}})) == "variable"

    def test_config_reward_types(self):
        assert VariableRateConfig(amount=1, duration_sec=1).reward_type is RewardType.VARIABLE
        fixed = FixedRateConfig(FixedRateSchedule(base_rate=3), amount=1, duration_sec=1)
        assert fixed.reward_type is RewardType.FIXED


class TestFarmerState:
    def test_from_index(self):
        assert FarmerState.from_index(0) is FarmerState.UNSTAKED
        assert FarmerState.from_index(1) is FarmerState.STAKED
        assert FarmerState.from_index(2) is FarmerState.PENDING_COOLDOWN

    def test_from_index_out_of_range(self):
        with pytest.raises(ValueError):
            FarmerState.from_index(3)

    def test_parse(self):
        farmer = SimpleNamespace(state=FarmerState.PENDING_COOLDOWN)
        assert parse_farmer_state(farmer) == "pendingCooldown"

    def test_parse_malformed(self):
        with pytest.raises(MalformedUnionError):
            parse_farmer_state(SimpleNamespace(state={}))


class TestWhitelistType:
    def test_flag_values(self):
        assert int(WhitelistType.CREATOR) == 1
        assert int(WhitelistType.MINT) == 2
        assert int(WhitelistType.CREATOR | WhitelistType.MINT) == 3
