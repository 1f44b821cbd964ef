"""Environment-driven configuration for the Gem Farm SDK."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from solana.rpc.commitment import Commitment, Confirmed
from solders.pubkey import Pubkey

from .program.constants import GEM_BANK_PROGRAM_ID, GEM_FARM_PROGRAM_ID

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"

ENV_RPC_URL = "GEM_FARM_RPC_URL"
ENV_FARM_PROGRAM_ID = "GEM_FARM_PROGRAM_ID"
ENV_BANK_PROGRAM_ID = "GEM_BANK_PROGRAM_ID"
ENV_COMMITMENT = "GEM_FARM_COMMITMENT"

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")


def load_pubkey(env: Mapping[str, str], env_name: str, default: Pubkey) -> Pubkey:
    value = env.get(env_name)
    if not value:
        return default
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        raise ValueError(f"{env_name} is not a valid pubkey: {exc}") from exc


@dataclass(frozen=True)
class GemFarmConfig:
    """Connection settings and program ids."""

    rpc_url: str = DEFAULT_RPC_URL
    farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID
    bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID
    commitment: Commitment = Confirmed

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GemFarmConfig":
        """Read settings from the environment, falling back to mainnet defaults.

        Variables: GEM_FARM_RPC_URL, GEM_FARM_PROGRAM_ID, GEM_BANK_PROGRAM_ID,
        GEM_FARM_COMMITMENT.
        """
        if env is None:
            env = os.environ

        commitment = env.get(ENV_COMMITMENT) or Confirmed
        if commitment not in VALID_COMMITMENTS:
            raise ValueError(
                f"{ENV_COMMITMENT} must be one of {', '.join(VALID_COMMITMENTS)}, "
                f"got {commitment!r}"
            )

        return cls(
            rpc_url=env.get(ENV_RPC_URL) or DEFAULT_RPC_URL,
            farm_program_id=load_pubkey(env, ENV_FARM_PROGRAM_ID, GEM_FARM_PROGRAM_ID),
            bank_program_id=load_pubkey(env, ENV_BANK_PROGRAM_ID, GEM_BANK_PROGRAM_ID),
            commitment=Commitment(commitment),
        )
