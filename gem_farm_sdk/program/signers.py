"""Signer resolution for principal-shaped parameters.

A principal (farm manager, farmer identity, payer, funder) is either a bare
address, in which case the connected wallet is expected to sign for it, or a
keypair that must be added to the transaction's signer set.
"""

from dataclasses import dataclass, field
from typing import List, Union

from solders.keypair import Keypair
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class KnownAddress:
    """A principal known only by its address."""

    pubkey: Pubkey


@dataclass(frozen=True)
class SigningPrincipal:
    """A principal holding a keypair that signs the transaction itself."""

    keypair: Keypair

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()


Principal = Union[KnownAddress, SigningPrincipal]
PrincipalLike = Union[Principal, Pubkey, Keypair]


@dataclass(frozen=True)
class ResolvedPrincipal:
    """Canonical address of a principal plus its signer contribution."""

    pubkey: Pubkey
    signers: List[Keypair] = field(default_factory=list)


def to_principal(value: PrincipalLike) -> Principal:
    """Coerce a raw Pubkey or Keypair into a Principal variant."""
    if isinstance(value, (KnownAddress, SigningPrincipal)):
        return value
    if isinstance(value, Keypair):
        return SigningPrincipal(value)
    if isinstance(value, Pubkey):
        return KnownAddress(value)
    raise TypeError(
        f"Expected Pubkey, Keypair, KnownAddress or SigningPrincipal, "
        f"got {type(value).__name__}"
    )


def resolve_principal(value: PrincipalLike) -> ResolvedPrincipal:
    """Resolve a principal into (address, signers).

    A keypair contributes itself as a signer; a bare address contributes none.
    """
    principal = to_principal(value)
    if isinstance(principal, SigningPrincipal):
        return ResolvedPrincipal(principal.pubkey, [principal.keypair])
    return ResolvedPrincipal(principal.pubkey, [])


def collect_signers(*resolved: ResolvedPrincipal) -> List[Keypair]:
    """Merge signer contributions, dropping duplicates by pubkey."""
    seen = set()
    signers: List[Keypair] = []
    for principal in resolved:
        for keypair in principal.signers:
            key = keypair.pubkey()
            if key in seen:
                continue
            seen.add(key)
            signers.append(keypair)
    return signers
