"""Transaction assembly and wallet signing for the Gem Farm SDK."""

from typing import List, Optional, Protocol, Sequence

from solders.compute_budget import set_compute_unit_limit
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction


class Wallet(Protocol):
    """The connected wallet: fee payer and default signer."""

    @property
    def pubkey(self) -> Pubkey:
        ...

    def sign_transaction(self, tx: Transaction) -> Transaction:
        ...


class KeypairWallet:
    """Wallet backed by a local keypair."""

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def sign_transaction(self, tx: Transaction) -> Transaction:
        tx.partial_sign([self.keypair], tx.message.recent_blockhash)
        return tx


def build_compute_budget_instruction(units: int) -> Instruction:
    """Build an instruction raising the transaction's compute unit limit."""
    return set_compute_unit_limit(units)


def compose_transaction(
    instructions: Sequence[Instruction],
    payer: Pubkey,
    blockhash: Hash,
    compute_units: Optional[int] = None,
) -> Transaction:
    """Build an unsigned transaction paid for by `payer`.

    When compute_units is given, the budget instruction is placed first.
    """
    ixs: List[Instruction] = []
    if compute_units is not None:
        ixs.append(build_compute_budget_instruction(compute_units))
    ixs.extend(instructions)

    message = Message.new_with_blockhash(ixs, payer, blockhash)
    return Transaction.new_unsigned(message)


def sign_transaction(
    tx: Transaction,
    wallet: Wallet,
    signers: Sequence[Keypair] = (),
) -> Transaction:
    """Sign with the wallet, then partially sign with any extra keypairs."""
    tx = wallet.sign_transaction(tx)
    extra = [kp for kp in signers if kp.pubkey() != wallet.pubkey]
    if extra:
        tx.partial_sign(extra, tx.message.recent_blockhash)
    return tx
