"""Gem Farm SDK - Python client for the gem farm staking programs on Solana.

Example:
    from gem_farm_sdk import GemFarmClient, GemFarmConfig

    client = GemFarmClient.from_config(GemFarmConfig.from_env(), keypair)
    farmers = await client.fetch_all_farmer_pdas(farm=farm)
"""

__version__ = "0.1.0"

from . import program
from .config import GemFarmConfig
from .program import (
    FEE_ACCOUNT,
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
    AccountNotFoundError,
    DerivationExhaustedError,
    FarmerState,
    GemFarmClient,
    GemFarmError,
    KeypairWallet,
    KnownAddress,
    MalformedUnionError,
    QueryRejectedError,
    RemoteRejectionError,
    RetryConfig,
    RewardType,
    SigningPrincipal,
    TransportFailureError,
    WhitelistType,
)

__all__ = [
    "__version__",
    "program",
    "GemFarmConfig",
    "GemFarmClient",
    "KeypairWallet",
    "RetryConfig",
    "GEM_FARM_PROGRAM_ID",
    "GEM_BANK_PROGRAM_ID",
    "FEE_ACCOUNT",
    "KnownAddress",
    "SigningPrincipal",
    "RewardType",
    "FarmerState",
    "WhitelistType",
    "GemFarmError",
    "DerivationExhaustedError",
    "MalformedUnionError",
    "QueryRejectedError",
    "RemoteRejectionError",
    "TransportFailureError",
    "AccountNotFoundError",
]
