"""Type definitions for the Gem Farm program module."""

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Any, Generic, List, Mapping, Optional, TypeVar, Union

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from .errors import MalformedUnionError


# ============================================================================
# TAGGED UNIONS
# ============================================================================


def parse_union_tag(value: Mapping[str, Any]) -> str:
    """Return the single active tag of a tagged-union mapping.

    {"fixed": {}} -> "fixed"

    Raises:
        MalformedUnionError: If zero or more than one tag is present
    """
    keys = list(value.keys())
    if len(keys) != 1:
        raise MalformedUnionError(keys)
    return keys[0]


class _TaggedEnum(Enum):
    """Unit-variant enum that round-trips through the `{tag: {}}` wire shape.

    Declaration order matches the program's Borsh variant index.
    """

    @property
    def index(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def from_index(cls, index: int):
        variants = list(cls)
        if not 0 <= index < len(variants):
            raise ValueError(f"Invalid {cls.__name__} variant index: {index}")
        return variants[index]

    def to_wire(self) -> dict:
        return {self.value: {}}

    @classmethod
    def from_wire(cls, value: Mapping[str, Any]):
        tag = parse_union_tag(value)
        try:
            return cls(tag)
        except ValueError as e:
            raise MalformedUnionError([tag]) from e


class RewardType(_TaggedEnum):
    """How a reward slot pays out."""

    VARIABLE = "variable"
    FIXED = "fixed"


class FarmerState(_TaggedEnum):
    """Lifecycle state of a farmer."""

    UNSTAKED = "unstaked"
    STAKED = "staked"
    PENDING_COOLDOWN = "pendingCooldown"


class WhitelistType(IntFlag):
    """Bank whitelist entry type (bit flags)."""

    CREATOR = 1 << 0
    MINT = 1 << 1


def _tag_of(value: Any) -> str:
    if isinstance(value, _TaggedEnum):
        return value.value
    return parse_union_tag(value)


def parse_reward_type(reward: Any) -> str:
    """Return "variable" or "fixed" for a decoded farm reward."""
    return _tag_of(reward.reward_type)


def parse_farmer_state(farmer: Any) -> str:
    """Return "staked", "unstaked" or "pendingCooldown" for a decoded farmer."""
    return _tag_of(farmer.state)


# ============================================================================
# CONFIGURATION TYPES
# ============================================================================


@dataclass
class FarmConfig:
    """Staking period, cooldown and unstaking fee of a farm."""

    min_staking_period_sec: int
    cooldown_period_sec: int
    unstaking_fee_lamp: int


@dataclass
class MaxCounts:
    """Optional farm capacity limits."""

    max_farmers: int
    max_gems: int
    max_rarity_points: int


@dataclass
class TierConfig:
    """Tenure-gated reward rate override."""

    reward_rate: int
    required_tenure: int


@dataclass
class FixedRateSchedule:
    """Base rate, up to three tiers and the shared denominator."""

    base_rate: int
    tier1: Optional[TierConfig] = None
    tier2: Optional[TierConfig] = None
    tier3: Optional[TierConfig] = None
    denominator: int = 1


@dataclass
class FixedRateConfig:
    """Funding parameters for a fixed-rate reward."""

    schedule: FixedRateSchedule
    amount: int
    duration_sec: int

    @property
    def reward_type(self) -> RewardType:
        return RewardType.FIXED


@dataclass
class VariableRateConfig:
    """Funding parameters for a variable-rate reward."""

    amount: int
    duration_sec: int

    @property
    def reward_type(self) -> RewardType:
        return RewardType.VARIABLE


RewardConfig = Union[VariableRateConfig, FixedRateConfig]


@dataclass
class RarityConfig:
    """Rarity points assigned to a gem mint."""

    mint: Pubkey
    rarity_points: int


# ============================================================================
# ACCOUNT DATA
# ============================================================================


@dataclass
class FundsTracker:
    total_funded: int
    total_refunded: int
    total_accrued_to_stakers: int


@dataclass
class TimeTracker:
    duration_sec: int
    reward_end_ts: int
    lock_end_ts: int


@dataclass
class FixedRateReward:
    schedule: FixedRateSchedule
    reserved_amount: int


@dataclass
class VariableRateReward:
    reward_rate: int
    reward_last_updated_ts: int
    accrued_reward_per_rarity_point: int


@dataclass
class FarmReward:
    """One reward slot (A or B) of a farm."""

    reward_mint: Pubkey
    reward_pot: Pubkey
    reward_type: RewardType
    fixed_rate: FixedRateReward
    variable_rate: VariableRateReward
    funds: FundsTracker
    times: TimeTracker


@dataclass
class Farm:
    """Farm account data."""

    version: int
    farm_manager: Pubkey
    farm_treasury: Pubkey
    farm_authority: Pubkey
    farm_authority_seed: Pubkey
    farm_authority_bump_seed: int
    bank: Pubkey
    config: FarmConfig
    farmer_count: int
    staked_farmer_count: int
    gems_staked: int
    rarity_points_staked: int
    authorized_funder_count: int
    reward_a: FarmReward
    reward_b: FarmReward
    max_counts: MaxCounts


@dataclass
class FarmerVariableRateReward:
    last_recorded_accrued_reward_per_rarity_point: int


@dataclass
class FarmerFixedRateReward:
    begin_staking_ts: int
    begin_schedule_ts: int
    last_updated_ts: int
    promised_schedule: FixedRateSchedule
    promised_duration: int


@dataclass
class FarmerReward:
    """Per-slot reward balances of a farmer."""

    paid_out_reward: int
    accrued_reward: int
    variable_rate: FarmerVariableRateReward
    fixed_rate: FarmerFixedRateReward


@dataclass
class Farmer:
    """Farmer account data."""

    farm: Pubkey
    identity: Pubkey
    vault: Pubkey
    state: FarmerState
    gems_staked: int
    rarity_points_staked: int
    min_staking_ends_ts: int
    cooldown_ends_ts: int
    reward_a: FarmerReward
    reward_b: FarmerReward


@dataclass
class AuthorizationProof:
    """Authorization proof account data."""

    authorized_funder: Pubkey
    farm: Pubkey


@dataclass
class TokenAccount:
    """SPL token account, as held by reward pots and reward destinations."""

    address: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int
    delegate: Optional[Pubkey]
    delegated_amount: int
    is_frozen: bool
    is_native: bool
    close_authority: Optional[Pubkey]


T = TypeVar("T")


@dataclass
class ProgramAccount(Generic[T]):
    """A decoded program account and its address."""

    public_key: Pubkey
    account: T


# ============================================================================
# OPERATION RESULTS
# ============================================================================


@dataclass
class TxResult:
    """Result of an operation with no derived addresses."""

    tx_sig: Optional[Signature] = None


@dataclass
class InitFarmResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    farm_treasury: Pubkey
    farm_treasury_bump: int
    reward_a_pot: Pubkey
    reward_a_pot_bump: int
    reward_b_pot: Pubkey
    reward_b_pot_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class PayoutFromTreasuryResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    farm_treasury: Pubkey
    farm_treasury_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class WhitelistResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    whitelist_proof: Pubkey
    whitelist_proof_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class InitFarmerResult:
    farmer: Pubkey
    farmer_bump: int
    vault: Pubkey
    vault_bump: int
    vault_auth: Pubkey
    vault_auth_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class StakeResult:
    farmer: Pubkey
    farmer_bump: int
    vault: Pubkey
    vault_bump: int
    farm_auth: Pubkey
    farm_auth_bump: int
    farm_treasury: Pubkey
    farm_treasury_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class ClaimResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    farmer: Pubkey
    farmer_bump: int
    pot_a: Pubkey
    pot_a_bump: int
    pot_b: Pubkey
    pot_b_bump: int
    reward_a_destination: Pubkey
    reward_b_destination: Pubkey
    tx_sig: Optional[Signature] = None


@dataclass
class FlashDepositResult:
    """Result of a flash deposit.

    The metadata and token record fields are only set for programmable NFTs.
    """

    farmer: Pubkey
    farmer_bump: int
    vault: Pubkey
    vault_bump: int
    farm_auth: Pubkey
    farm_auth_bump: int
    gem_box: Pubkey
    gem_box_bump: int
    gdr: Pubkey
    gdr_bump: int
    vault_auth: Pubkey
    vault_auth_bump: int
    tx_sig: Optional[Signature] = None
    meta: Optional[Pubkey] = None
    owner_token_record: Optional[Pubkey] = None
    owner_token_record_bump: Optional[int] = None
    dest_token_record: Optional[Pubkey] = None
    dest_token_record_bump: Optional[int] = None


@dataclass
class RefreshFarmerResult:
    farmer: Pubkey
    farmer_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class AuthorizeFunderResult:
    authorization_proof: Pubkey
    authorization_proof_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class FundRewardResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    authorization_proof: Pubkey
    authorization_proof_bump: int
    pot: Pubkey
    pot_bump: int
    tx_sig: Optional[Signature] = None


@dataclass
class CancelRewardResult:
    farm_auth: Pubkey
    farm_auth_bump: int
    pot: Pubkey
    pot_bump: int
    reward_destination: Pubkey
    tx_sig: Optional[Signature] = None


@dataclass
class AddRaritiesResult:
    bank: Pubkey
    farm_auth: Pubkey
    farm_auth_bump: int
    complete_rarity_configs: List[RarityConfig]
    tx_sig: Optional[Signature] = None


R = TypeVar("R")


@dataclass
class BuildResult(Generic[R]):
    """An unsent instruction, its extra signers and the derived values."""

    instruction: Instruction
    signers: List[Keypair] = field(default_factory=list)
    result: Optional[R] = None
