"""Account deserialization and memcmp filters for the Gem Farm SDK."""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

import base58
from construct import Construct, ConstructError
from solana.rpc.types import MemcmpOpts
from solders.pubkey import Pubkey

from . import layouts
from .constants import (
    AUTH_PROOF_FARM_OFFSET,
    AUTH_PROOF_FUNDER_OFFSET,
    AUTHORIZATION_PROOF_SIZE,
    DISCRIMINATOR_SIZE,
    FARM_MANAGER_OFFSET,
    FARM_MIN_SIZE,
    FARMER_FARM_OFFSET,
    FARMER_IDENTITY_OFFSET,
    FARMER_MIN_SIZE,
    TOKEN_ACCOUNT_SIZE,
)
from .errors import InvalidAccountDataError, InvalidDiscriminatorError
from .types import (
    AuthorizationProof,
    Farm,
    FarmConfig,
    Farmer,
    FarmerFixedRateReward,
    FarmerReward,
    FarmerState,
    FarmerVariableRateReward,
    FarmReward,
    FixedRateReward,
    FixedRateSchedule,
    FundsTracker,
    MaxCounts,
    RewardType,
    TierConfig,
    TimeTracker,
    TokenAccount,
    VariableRateReward,
)
from .utils import account_discriminator

FARM_DISCRIMINATOR = account_discriminator("Farm")
FARMER_DISCRIMINATOR = account_discriminator("Farmer")
AUTHORIZATION_PROOF_DISCRIMINATOR = account_discriminator("AuthorizationProof")


# ============================================================================
# FILTERS
# ============================================================================


@dataclass(frozen=True)
class AccountFilter:
    """Equality filter on a raw byte range of an account's data."""

    offset: int
    value: bytes

    @classmethod
    def for_pubkey(cls, offset: int, pubkey: Pubkey) -> "AccountFilter":
        return cls(offset, bytes(pubkey))

    def matches(self, data: bytes) -> bool:
        end = self.offset + len(self.value)
        return len(data) >= end and data[self.offset : end] == self.value

    def to_memcmp(self) -> MemcmpOpts:
        """RPC memcmp filter; the RPC expects the bytes base58-encoded."""
        return MemcmpOpts(
            offset=self.offset,
            bytes=base58.b58encode(self.value).decode("ascii"),
        )


def matches_filters(data: bytes, filters: Iterable[AccountFilter]) -> bool:
    """True when every filter matches (AND semantics)."""
    return all(f.matches(data) for f in filters)


def farm_filters(manager: Optional[Pubkey] = None) -> List[AccountFilter]:
    filters = [AccountFilter(0, FARM_DISCRIMINATOR)]
    if manager is not None:
        filters.append(AccountFilter.for_pubkey(FARM_MANAGER_OFFSET, manager))
    return filters


def farmer_filters(
    farm: Optional[Pubkey] = None,
    identity: Optional[Pubkey] = None,
) -> List[AccountFilter]:
    filters = [AccountFilter(0, FARMER_DISCRIMINATOR)]
    if farm is not None:
        filters.append(AccountFilter.for_pubkey(FARMER_FARM_OFFSET, farm))
    if identity is not None:
        filters.append(AccountFilter.for_pubkey(FARMER_IDENTITY_OFFSET, identity))
    return filters


def authorization_proof_filters(
    farm: Optional[Pubkey] = None,
    funder: Optional[Pubkey] = None,
) -> List[AccountFilter]:
    filters = [AccountFilter(0, AUTHORIZATION_PROOF_DISCRIMINATOR)]
    if farm is not None:
        filters.append(AccountFilter.for_pubkey(AUTH_PROOF_FARM_OFFSET, farm))
    if funder is not None:
        filters.append(AccountFilter.for_pubkey(AUTH_PROOF_FUNDER_OFFSET, funder))
    return filters


# ============================================================================
# DESERIALIZATION
# ============================================================================


def _validate_discriminator(data: bytes, expected: bytes, name: str) -> None:
    """Validate account discriminator."""
    if len(data) < DISCRIMINATOR_SIZE:
        raise InvalidAccountDataError(f"{name} data too short: {len(data)} bytes")
    actual = data[:DISCRIMINATOR_SIZE]
    if actual != expected:
        raise InvalidDiscriminatorError(expected, actual)


def _parse(layout: Construct, data: bytes, name: str, min_size: int) -> Any:
    if len(data) < min_size:
        raise InvalidAccountDataError(
            f"{name} data too short: {len(data)} bytes (expected at least {min_size})"
        )
    try:
        return layout.parse(data[DISCRIMINATOR_SIZE:])
    except ConstructError as e:
        raise InvalidAccountDataError(f"{name}: {e}") from e


def _pubkey(raw: bytes) -> Pubkey:
    return Pubkey.from_bytes(bytes(raw))


def _tier(raw: Any) -> Optional[TierConfig]:
    if raw is None:
        return None
    return TierConfig(reward_rate=raw.reward_rate, required_tenure=raw.required_tenure)


def _schedule(raw: Any) -> FixedRateSchedule:
    return FixedRateSchedule(
        base_rate=raw.base_rate,
        tier1=_tier(raw.tier1),
        tier2=_tier(raw.tier2),
        tier3=_tier(raw.tier3),
        denominator=raw.denominator,
    )


def _farm_reward(raw: Any) -> FarmReward:
    return FarmReward(
        reward_mint=_pubkey(raw.reward_mint),
        reward_pot=_pubkey(raw.reward_pot),
        reward_type=RewardType.from_index(raw.reward_type),
        fixed_rate=FixedRateReward(
            schedule=_schedule(raw.fixed_rate.schedule),
            reserved_amount=raw.fixed_rate.reserved_amount,
        ),
        variable_rate=VariableRateReward(
            reward_rate=raw.variable_rate.reward_rate,
            reward_last_updated_ts=raw.variable_rate.reward_last_updated_ts,
            accrued_reward_per_rarity_point=raw.variable_rate.accrued_reward_per_rarity_point,
        ),
        funds=FundsTracker(
            total_funded=raw.funds.total_funded,
            total_refunded=raw.funds.total_refunded,
            total_accrued_to_stakers=raw.funds.total_accrued_to_stakers,
        ),
        times=TimeTracker(
            duration_sec=raw.times.duration_sec,
            reward_end_ts=raw.times.reward_end_ts,
            lock_end_ts=raw.times.lock_end_ts,
        ),
    )


def _farmer_reward(raw: Any) -> FarmerReward:
    fixed = raw.fixed_rate
    return FarmerReward(
        paid_out_reward=raw.paid_out_reward,
        accrued_reward=raw.accrued_reward,
        variable_rate=FarmerVariableRateReward(
            last_recorded_accrued_reward_per_rarity_point=(
                raw.variable_rate.last_recorded_accrued_reward_per_rarity_point
            ),
        ),
        fixed_rate=FarmerFixedRateReward(
            begin_staking_ts=fixed.begin_staking_ts,
            begin_schedule_ts=fixed.begin_schedule_ts,
            last_updated_ts=fixed.last_updated_ts,
            promised_schedule=_schedule(fixed.promised_schedule),
            promised_duration=fixed.promised_duration,
        ),
    )


def deserialize_farm(data: bytes) -> Farm:
    """Deserialize a Farm account.

    Layout (639 bytes with no reward tiers set):
    - [0..8]: discriminator (sha256("account:Farm")[:8])
    - [8..10]: version (u16 LE)
    - [10..42]: farm_manager (Pubkey)
    - [42..74]: farm_treasury (Pubkey)
    - [74..106]: farm_authority (Pubkey)
    - [106..138]: farm_authority_seed (Pubkey)
    - [138]: farm_authority_bump_seed (u8)
    - [139..171]: bank (Pubkey)
    - [171..195]: config (FarmConfig)
    - [195..235]: farmer / staked farmer / gem / rarity point / funder counts (u64 LE)
    - [235..]: reward_a, reward_b (FarmReward, variable length), max_counts, reserved
    """
    _validate_discriminator(data, FARM_DISCRIMINATOR, "Farm")
    raw = _parse(layouts.FARM, data, "Farm", FARM_MIN_SIZE)

    return Farm(
        version=raw.version,
        farm_manager=_pubkey(raw.farm_manager),
        farm_treasury=_pubkey(raw.farm_treasury),
        farm_authority=_pubkey(raw.farm_authority),
        farm_authority_seed=_pubkey(raw.farm_authority_seed),
        farm_authority_bump_seed=raw.farm_authority_bump_seed,
        bank=_pubkey(raw.bank),
        config=FarmConfig(
            min_staking_period_sec=raw.config.min_staking_period_sec,
            cooldown_period_sec=raw.config.cooldown_period_sec,
            unstaking_fee_lamp=raw.config.unstaking_fee_lamp,
        ),
        farmer_count=raw.farmer_count,
        staked_farmer_count=raw.staked_farmer_count,
        gems_staked=raw.gems_staked,
        rarity_points_staked=raw.rarity_points_staked,
        authorized_funder_count=raw.authorized_funder_count,
        reward_a=_farm_reward(raw.reward_a),
        reward_b=_farm_reward(raw.reward_b),
        max_counts=MaxCounts(
            max_farmers=raw.max_counts.max_farmers,
            max_gems=raw.max_counts.max_gems,
            max_rarity_points=raw.max_counts.max_rarity_points,
        ),
    )


def deserialize_farmer(data: bytes) -> Farmer:
    """Deserialize a Farmer account.

    Layout (335 bytes with no promised tiers set):
    - [0..8]: discriminator (sha256("account:Farmer")[:8])
    - [8..40]: farm (Pubkey)
    - [40..72]: identity (Pubkey)
    - [72..104]: vault (Pubkey)
    - [104]: state (u8: 0=Unstaked, 1=Staked, 2=PendingCooldown)
    - [105..137]: gems_staked, rarity_points_staked, min_staking_ends_ts,
      cooldown_ends_ts (u64 LE)
    - [137..]: reward_a, reward_b (FarmerReward, variable length), reserved
    """
    _validate_discriminator(data, FARMER_DISCRIMINATOR, "Farmer")
    raw = _parse(layouts.FARMER, data, "Farmer", FARMER_MIN_SIZE)

    try:
        state = FarmerState.from_index(raw.state)
    except ValueError as e:
        raise InvalidAccountDataError(str(e)) from e

    return Farmer(
        farm=_pubkey(raw.farm),
        identity=_pubkey(raw.identity),
        vault=_pubkey(raw.vault),
        state=state,
        gems_staked=raw.gems_staked,
        rarity_points_staked=raw.rarity_points_staked,
        min_staking_ends_ts=raw.min_staking_ends_ts,
        cooldown_ends_ts=raw.cooldown_ends_ts,
        reward_a=_farmer_reward(raw.reward_a),
        reward_b=_farmer_reward(raw.reward_b),
    )


def deserialize_authorization_proof(data: bytes) -> AuthorizationProof:
    """Deserialize an AuthorizationProof account.

    Layout (104 bytes):
    - [0..8]: discriminator (sha256("account:AuthorizationProof")[:8])
    - [8..40]: authorized_funder (Pubkey)
    - [40..72]: farm (Pubkey)
    - [72..104]: reserved
    """
    _validate_discriminator(data, AUTHORIZATION_PROOF_DISCRIMINATOR, "AuthorizationProof")
    raw = _parse(
        layouts.AUTHORIZATION_PROOF, data, "AuthorizationProof", AUTHORIZATION_PROOF_SIZE
    )

    return AuthorizationProof(
        authorized_funder=_pubkey(raw.authorized_funder),
        farm=_pubkey(raw.farm),
    )


def deserialize_token_account(
    address: Pubkey, data: bytes, mint: Optional[Pubkey] = None
) -> TokenAccount:
    """Deserialize an SPL token account (no discriminator).

    Layout (165 bytes):
    - [0..32]: mint
    - [32..64]: owner
    - [64..72]: amount (u64)
    - [72..108]: delegate (COption<Pubkey>)
    - [108]: state (0 = uninitialized, 1 = initialized, 2 = frozen)
    - [109..121]: is_native (COption<u64>)
    - [121..129]: delegated_amount (u64)
    - [129..165]: close_authority (COption<Pubkey>)

    When `mint` is given the account must hold that mint.
    """
    if len(data) < TOKEN_ACCOUNT_SIZE:
        raise InvalidAccountDataError(
            f"Token account {address} too short: {len(data)} bytes"
        )
    try:
        raw = layouts.TOKEN_ACCOUNT.parse(data[:TOKEN_ACCOUNT_SIZE])
    except ConstructError as e:
        raise InvalidAccountDataError(f"Token account {address}: {e}") from e

    if raw.state == 0:
        raise InvalidAccountDataError(f"Token account {address} is not initialized")
    account_mint = _pubkey(raw.mint)
    if mint is not None and account_mint != mint:
        raise InvalidAccountDataError(
            f"Token account {address} holds mint {account_mint}, expected {mint}"
        )

    return TokenAccount(
        address=address,
        mint=account_mint,
        owner=_pubkey(raw.owner),
        amount=raw.amount,
        delegate=_pubkey(raw.delegate) if raw.delegate_tag else None,
        delegated_amount=raw.delegated_amount,
        is_frozen=raw.state == 2,
        is_native=bool(raw.is_native_tag),
        close_authority=_pubkey(raw.close_authority) if raw.close_authority_tag else None,
    )


# ============================================================================
# ACCOUNT KINDS
# ============================================================================


@dataclass(frozen=True)
class AccountKind:
    """A queryable account type: its discriminator and decoder."""

    name: str
    discriminator: bytes
    decode: Callable[[bytes], Any]


FARM_ACCOUNT = AccountKind("Farm", FARM_DISCRIMINATOR, deserialize_farm)
FARMER_ACCOUNT = AccountKind("Farmer", FARMER_DISCRIMINATOR, deserialize_farmer)
AUTHORIZATION_PROOF_ACCOUNT = AccountKind(
    "AuthorizationProof",
    AUTHORIZATION_PROOF_DISCRIMINATOR,
    deserialize_authorization_proof,
)
