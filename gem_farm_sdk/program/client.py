"""Main client for the Gem Farm SDK."""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar, Union

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from ..config import GemFarmConfig
from .accounts import (
    AUTHORIZATION_PROOF_ACCOUNT,
    FARM_ACCOUNT,
    FARMER_ACCOUNT,
    AccountFilter,
    AccountKind,
    authorization_proof_filters,
    deserialize_authorization_proof,
    deserialize_farm,
    deserialize_farmer,
    deserialize_token_account,
    farm_filters,
    farmer_filters,
    matches_filters,
)
from .constants import (
    FLASH_DEPOSIT_COMPUTE_UNITS,
    FLASH_DEPOSIT_PNFT_COMPUTE_UNITS,
    GEM_BANK_PROGRAM_ID,
    GEM_FARM_PROGRAM_ID,
)
from .errors import (
    AccountNotFoundError,
    GemFarmError,
    QueryRejectedError,
    RemoteRejectionError,
    TransportFailureError,
)
from .instructions import (
    build_add_rarities_to_bank_instruction,
    build_add_to_bank_whitelist_instruction,
    build_authorize_funder_instruction,
    build_cancel_reward_instruction,
    build_claim_instruction,
    build_deauthorize_funder_instruction,
    build_flash_deposit_instruction,
    build_flash_deposit_pnft_instruction,
    build_fund_reward_instruction,
    build_init_farm_instruction,
    build_init_farmer_instruction,
    build_lock_reward_instruction,
    build_payout_from_treasury_instruction,
    build_refresh_farmer_instruction,
    build_remove_from_bank_whitelist_instruction,
    build_stake_instruction,
    build_unstake_instruction,
    build_update_farm_instruction,
)
from .pda import (
    get_authorization_proof_pda,
    get_farm_authority_pda,
    get_farm_treasury_pda,
    get_farmer_pda,
    get_gem_box_pda,
    get_gem_deposit_receipt_pda,
    get_metadata_pda,
    get_reward_pot_pda,
    get_token_record_pda,
    get_vault_authority_pda,
    get_vault_pda,
    get_whitelist_proof_pda,
)
from .retry import RetryConfig, is_retryable
from .signers import (
    PrincipalLike,
    SigningPrincipal,
    collect_signers,
    resolve_principal,
)
from .transaction import (
    KeypairWallet,
    Wallet,
    build_compute_budget_instruction,
    compose_transaction,
    sign_transaction,
)
from .types import (
    AddRaritiesResult,
    AuthorizationProof,
    AuthorizeFunderResult,
    BuildResult,
    CancelRewardResult,
    ClaimResult,
    Farm,
    FarmConfig,
    Farmer,
    FixedRateConfig,
    FlashDepositResult,
    FundRewardResult,
    InitFarmerResult,
    InitFarmResult,
    MaxCounts,
    PayoutFromTreasuryResult,
    ProgramAccount,
    RarityConfig,
    RefreshFarmerResult,
    RewardType,
    StakeResult,
    TokenAccount,
    TxResult,
    VariableRateConfig,
    WhitelistResult,
    WhitelistType,
    parse_farmer_state,
    parse_reward_type,
)
from .utils import get_associated_token_address

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Accounts created by the transaction; they must sign.
FreshAccount = Union[Keypair, SigningPrincipal]


class GemFarmClient:
    """Async client for the gem farm and gem bank programs.

    Every operation derives its addresses, builds one instruction and submits
    it through the connected wallet. The `build_*` variants stop short of
    submission and return the instruction, its extra signers and the derived
    addresses so callers can compose their own transactions.
    """

    def __init__(
        self,
        connection: AsyncClient,
        wallet: Wallet,
        farm_program_id: Pubkey = GEM_FARM_PROGRAM_ID,
        bank_program_id: Pubkey = GEM_BANK_PROGRAM_ID,
        commitment: Commitment = Confirmed,
        retry_config: Optional[RetryConfig] = None,
    ):
        """Initialize the client.

        Args:
            connection: Solana RPC async client
            wallet: Fee payer and default signer
            farm_program_id: Gem farm program ID (defaults to mainnet)
            bank_program_id: Gem bank program ID (defaults to mainnet)
            commitment: Commitment used for reads and confirmations
            retry_config: Retry policy for read-only queries
        """
        self.connection = connection
        self.wallet = wallet
        self.farm_program_id = farm_program_id
        self.bank_program_id = bank_program_id
        self.commitment = commitment
        self.retry_config = retry_config or RetryConfig.default()

    @classmethod
    def from_config(
        cls,
        config: GemFarmConfig,
        wallet: Union[Wallet, Keypair],
        retry_config: Optional[RetryConfig] = None,
    ) -> "GemFarmClient":
        """Create a client from a config; a bare Keypair is wrapped as a wallet."""
        if isinstance(wallet, Keypair):
            wallet = KeypairWallet(wallet)
        connection = AsyncClient(config.rpc_url, commitment=config.commitment)
        return cls(
            connection,
            wallet,
            farm_program_id=config.farm_program_id,
            bank_program_id=config.bank_program_id,
            commitment=config.commitment,
            retry_config=retry_config,
        )

    # =========================================================================
    # Account Fetchers
    # =========================================================================

    async def fetch_farm_acc(self, farm: Pubkey) -> Farm:
        return deserialize_farm(await self._get_account_data(farm))

    async def fetch_farmer_acc(self, farmer: Pubkey) -> Farmer:
        return deserialize_farmer(await self._get_account_data(farmer))

    async def fetch_authorization_proof_acc(
        self, authorization_proof: Pubkey
    ) -> AuthorizationProof:
        return deserialize_authorization_proof(
            await self._get_account_data(authorization_proof)
        )

    async def fetch_treasury_balance(self, farm: Pubkey) -> int:
        """Lamports held by the farm treasury."""
        treasury, _ = get_farm_treasury_pda(farm, self.farm_program_id)
        response = await self._query(
            f"getBalance({treasury})",
            lambda: self.connection.get_balance(treasury, commitment=self.commitment),
        )
        return response.value

    async def fetch_all_farm_pdas(
        self, manager: Optional[Pubkey] = None
    ) -> List[ProgramAccount[Farm]]:
        """All farms, optionally only those managed by `manager`."""
        return await self._fetch_all(FARM_ACCOUNT, farm_filters(manager))

    async def fetch_all_farmer_pdas(
        self,
        farm: Optional[Pubkey] = None,
        identity: Optional[Pubkey] = None,
    ) -> List[ProgramAccount[Farmer]]:
        """All farmers, optionally narrowed by farm and/or identity."""
        return await self._fetch_all(FARMER_ACCOUNT, farmer_filters(farm, identity))

    async def fetch_all_auth_proof_pdas(
        self,
        farm: Optional[Pubkey] = None,
        funder: Optional[Pubkey] = None,
    ) -> List[ProgramAccount[AuthorizationProof]]:
        """All authorization proofs, optionally narrowed by farm and/or funder."""
        return await self._fetch_all(
            AUTHORIZATION_PROOF_ACCOUNT, authorization_proof_filters(farm, funder)
        )

    async def fetch_token_acc(self, reward_mint: Pubkey, token_account: Pubkey) -> TokenAccount:
        """Decode an SPL token account holding `reward_mint`, e.g. a reward pot.

        Raises:
            AccountNotFoundError: If the account does not exist
            InvalidAccountDataError: If it is not a token account for `reward_mint`
        """
        data = await self._get_account_data(token_account)
        return deserialize_token_account(token_account, data, reward_mint)

    # =========================================================================
    # Farm Administration
    # =========================================================================

    async def build_init_farm(
        self,
        farm: FreshAccount,
        farm_manager: PrincipalLike,
        payer: PrincipalLike,
        bank: FreshAccount,
        reward_a_mint: Pubkey,
        reward_a_type: RewardType,
        reward_b_mint: Pubkey,
        reward_b_type: RewardType,
        farm_config: FarmConfig,
        max_counts: Optional[MaxCounts] = None,
    ) -> BuildResult[InitFarmResult]:
        farm_p = resolve_principal(farm)
        bank_p = resolve_principal(bank)
        manager = resolve_principal(farm_manager)
        payer_p = resolve_principal(payer)

        farm_pk = farm_p.pubkey
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm_pk, self.farm_program_id)
        farm_treasury, farm_treasury_bump = get_farm_treasury_pda(
            farm_pk, self.farm_program_id
        )
        pot_a, pot_a_bump = get_reward_pot_pda(farm_pk, reward_a_mint, self.farm_program_id)
        pot_b, pot_b_bump = get_reward_pot_pda(farm_pk, reward_b_mint, self.farm_program_id)

        ix = build_init_farm_instruction(
            farm_pk,
            manager.pubkey,
            payer_p.pubkey,
            bank_p.pubkey,
            reward_a_mint,
            reward_a_type,
            reward_b_mint,
            reward_b_type,
            farm_config,
            max_counts,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = InitFarmResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            farm_treasury=farm_treasury,
            farm_treasury_bump=farm_treasury_bump,
            reward_a_pot=pot_a,
            reward_a_pot_bump=pot_a_bump,
            reward_b_pot=pot_b,
            reward_b_pot_bump=pot_b_bump,
        )
        return BuildResult(ix, collect_signers(farm_p, bank_p, manager, payer_p), result)

    async def init_farm(
        self,
        farm: FreshAccount,
        farm_manager: PrincipalLike,
        payer: PrincipalLike,
        bank: FreshAccount,
        reward_a_mint: Pubkey,
        reward_a_type: RewardType,
        reward_b_mint: Pubkey,
        reward_b_type: RewardType,
        farm_config: FarmConfig,
        max_counts: Optional[MaxCounts] = None,
    ) -> InitFarmResult:
        """Create a farm together with its bank and both reward pots.

        `farm` and `bank` are fresh keypairs; both sign the transaction.
        """
        logger.info(f"Starting farm at {resolve_principal(farm).pubkey}")
        built = await self.build_init_farm(
            farm,
            farm_manager,
            payer,
            bank,
            reward_a_mint,
            reward_a_type,
            reward_b_mint,
            reward_b_type,
            farm_config,
            max_counts,
        )
        return await self._submit(built)

    async def build_update_farm(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        config: Optional[FarmConfig] = None,
        new_manager: Optional[Pubkey] = None,
        max_counts: Optional[MaxCounts] = None,
    ) -> BuildResult[TxResult]:
        manager = resolve_principal(farm_manager)
        ix = build_update_farm_instruction(
            farm,
            manager.pubkey,
            config,
            new_manager,
            max_counts,
            farm_program_id=self.farm_program_id,
        )
        return BuildResult(ix, collect_signers(manager), TxResult())

    async def update_farm(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        config: Optional[FarmConfig] = None,
        new_manager: Optional[Pubkey] = None,
        max_counts: Optional[MaxCounts] = None,
    ) -> TxResult:
        """Update config, manager and/or max counts; None leaves a field as is."""
        logger.info(f"Updating farm {farm}")
        return await self._submit(
            await self.build_update_farm(farm, farm_manager, config, new_manager, max_counts)
        )

    async def build_payout_from_treasury(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        destination: Pubkey,
        lamports: int,
    ) -> BuildResult[PayoutFromTreasuryResult]:
        manager = resolve_principal(farm_manager)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        farm_treasury, farm_treasury_bump = get_farm_treasury_pda(
            farm, self.farm_program_id
        )
        ix = build_payout_from_treasury_instruction(
            farm,
            manager.pubkey,
            destination,
            lamports,
            farm_program_id=self.farm_program_id,
        )
        result = PayoutFromTreasuryResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            farm_treasury=farm_treasury,
            farm_treasury_bump=farm_treasury_bump,
        )
        return BuildResult(ix, collect_signers(manager), result)

    async def payout_from_treasury(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        destination: Pubkey,
        lamports: int,
    ) -> PayoutFromTreasuryResult:
        logger.info(f"Paying out {lamports} lamports from treasury of farm {farm}")
        return await self._submit(
            await self.build_payout_from_treasury(farm, farm_manager, destination, lamports)
        )

    async def build_add_to_bank_whitelist(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        address_to_whitelist: Pubkey,
        whitelist_type: WhitelistType,
    ) -> BuildResult[WhitelistResult]:
        manager = resolve_principal(farm_manager)
        bank = await self._fetch_bank(farm)
        ix = build_add_to_bank_whitelist_instruction(
            farm,
            manager.pubkey,
            bank,
            address_to_whitelist,
            whitelist_type,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._whitelist_result(farm, bank, address_to_whitelist)
        return BuildResult(ix, collect_signers(manager), result)

    async def add_to_bank_whitelist(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        address_to_whitelist: Pubkey,
        whitelist_type: WhitelistType,
    ) -> WhitelistResult:
        logger.info(f"Adding {address_to_whitelist} to whitelist")
        return await self._submit(
            await self.build_add_to_bank_whitelist(
                farm, farm_manager, address_to_whitelist, whitelist_type
            )
        )

    async def build_remove_from_bank_whitelist(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        address_to_remove: Pubkey,
    ) -> BuildResult[WhitelistResult]:
        manager = resolve_principal(farm_manager)
        bank = await self._fetch_bank(farm)
        ix = build_remove_from_bank_whitelist_instruction(
            farm,
            manager.pubkey,
            bank,
            address_to_remove,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._whitelist_result(farm, bank, address_to_remove)
        return BuildResult(ix, collect_signers(manager), result)

    async def remove_from_bank_whitelist(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        address_to_remove: Pubkey,
    ) -> WhitelistResult:
        logger.info(f"Removing {address_to_remove} from whitelist")
        return await self._submit(
            await self.build_remove_from_bank_whitelist(farm, farm_manager, address_to_remove)
        )

    # =========================================================================
    # Farmer Lifecycle
    # =========================================================================

    async def build_init_farmer(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        payer: PrincipalLike,
    ) -> BuildResult[InitFarmerResult]:
        identity = resolve_principal(farmer_identity)
        payer_p = resolve_principal(payer)
        bank = await self._fetch_bank(farm)

        farmer, farmer_bump = get_farmer_pda(farm, identity.pubkey, self.farm_program_id)
        vault, vault_bump = get_vault_pda(bank, identity.pubkey, self.bank_program_id)
        vault_auth, vault_auth_bump = get_vault_authority_pda(vault, self.bank_program_id)

        ix = build_init_farmer_instruction(
            farm,
            identity.pubkey,
            payer_p.pubkey,
            bank,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = InitFarmerResult(
            farmer=farmer,
            farmer_bump=farmer_bump,
            vault=vault,
            vault_bump=vault_bump,
            vault_auth=vault_auth,
            vault_auth_bump=vault_auth_bump,
        )
        return BuildResult(ix, collect_signers(identity, payer_p), result)

    async def init_farmer(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        payer: PrincipalLike,
    ) -> InitFarmerResult:
        built = await self.build_init_farmer(farm, farmer_identity, payer)
        logger.info(f"Initializing farmer {built.result.farmer}")
        return await self._submit(built)

    async def build_stake(
        self, farm: Pubkey, farmer_identity: PrincipalLike
    ) -> BuildResult[StakeResult]:
        identity = resolve_principal(farmer_identity)
        bank = await self._fetch_bank(farm)
        ix = build_stake_instruction(
            farm,
            identity.pubkey,
            bank,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._stake_result(farm, bank, identity.pubkey)
        return BuildResult(ix, collect_signers(identity), result)

    async def stake(self, farm: Pubkey, farmer_identity: PrincipalLike) -> StakeResult:
        built = await self.build_stake(farm, farmer_identity)
        logger.info(f"Staking farmer {built.result.farmer}")
        return await self._submit(built)

    async def build_unstake(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        skip_rewards: bool = False,
    ) -> BuildResult[StakeResult]:
        identity = resolve_principal(farmer_identity)
        bank = await self._fetch_bank(farm)
        ix = build_unstake_instruction(
            farm,
            identity.pubkey,
            bank,
            skip_rewards,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._stake_result(farm, bank, identity.pubkey)
        return BuildResult(ix, collect_signers(identity), result)

    async def unstake(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        skip_rewards: bool = False,
    ) -> StakeResult:
        built = await self.build_unstake(farm, farmer_identity, skip_rewards)
        logger.info(f"Unstaking farmer {built.result.farmer}")
        return await self._submit(built)

    async def build_claim(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        reward_a_mint: Pubkey,
        reward_b_mint: Pubkey,
    ) -> BuildResult[ClaimResult]:
        identity = resolve_principal(farmer_identity)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        farmer, farmer_bump = get_farmer_pda(farm, identity.pubkey, self.farm_program_id)
        pot_a, pot_a_bump = get_reward_pot_pda(farm, reward_a_mint, self.farm_program_id)
        pot_b, pot_b_bump = get_reward_pot_pda(farm, reward_b_mint, self.farm_program_id)

        ix = build_claim_instruction(
            farm,
            identity.pubkey,
            reward_a_mint,
            reward_b_mint,
            farm_program_id=self.farm_program_id,
        )
        result = ClaimResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            farmer=farmer,
            farmer_bump=farmer_bump,
            pot_a=pot_a,
            pot_a_bump=pot_a_bump,
            pot_b=pot_b,
            pot_b_bump=pot_b_bump,
            reward_a_destination=get_associated_token_address(identity.pubkey, reward_a_mint),
            reward_b_destination=get_associated_token_address(identity.pubkey, reward_b_mint),
        )
        return BuildResult(ix, collect_signers(identity), result)

    async def claim(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        reward_a_mint: Pubkey,
        reward_b_mint: Pubkey,
    ) -> ClaimResult:
        built = await self.build_claim(farm, farmer_identity, reward_a_mint, reward_b_mint)
        logger.info(f"Claiming rewards for farmer {built.result.farmer}")
        return await self._submit(built)

    async def build_flash_deposit(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        gem_amount: int,
        gem_mint: Pubkey,
        gem_source: Pubkey,
        mint_proof: Optional[Pubkey] = None,
        metadata: Optional[Pubkey] = None,
        creator_proof: Optional[Pubkey] = None,
    ) -> BuildResult[FlashDepositResult]:
        identity = resolve_principal(farmer_identity)
        bank = await self._fetch_bank(farm)
        ix = build_flash_deposit_instruction(
            farm,
            identity.pubkey,
            bank,
            gem_amount,
            gem_mint,
            gem_source,
            mint_proof,
            metadata,
            creator_proof,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._flash_deposit_result(farm, bank, identity.pubkey, gem_mint)
        return BuildResult(ix, collect_signers(identity), result)

    async def flash_deposit(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        gem_amount: int,
        gem_mint: Pubkey,
        gem_source: Pubkey,
        mint_proof: Optional[Pubkey] = None,
        metadata: Optional[Pubkey] = None,
        creator_proof: Optional[Pubkey] = None,
    ) -> FlashDepositResult:
        """Deposit a gem into the farmer's vault and stake in one transaction.

        The transaction carries a compute unit limit instruction ahead of the
        deposit and is sent without waiting for confirmation.
        """
        built = await self.build_flash_deposit(
            farm,
            farmer_identity,
            gem_amount,
            gem_mint,
            gem_source,
            mint_proof,
            metadata,
            creator_proof,
        )
        logger.info(f"Flash depositing {gem_amount} of {gem_mint} for farmer {built.result.farmer}")
        return await self._submit(built, compute_units=FLASH_DEPOSIT_COMPUTE_UNITS)

    async def build_flash_deposit_pnft(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        gem_amount: int,
        gem_mint: Pubkey,
        gem_source: Pubkey,
        mint_proof: Optional[Pubkey] = None,
        creator_proof: Optional[Pubkey] = None,
        rule_set: Optional[Pubkey] = None,
    ) -> BuildResult[FlashDepositResult]:
        identity = resolve_principal(farmer_identity)
        bank = await self._fetch_bank(farm)
        ix = build_flash_deposit_pnft_instruction(
            farm,
            identity.pubkey,
            bank,
            gem_amount,
            gem_mint,
            gem_source,
            mint_proof,
            creator_proof,
            rule_set,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = self._flash_deposit_result(farm, bank, identity.pubkey, gem_mint)
        meta, _ = get_metadata_pda(gem_mint)
        owner_record, owner_record_bump = get_token_record_pda(gem_mint, gem_source)
        dest_record, dest_record_bump = get_token_record_pda(gem_mint, result.gem_box)
        result = replace(
            result,
            meta=meta,
            owner_token_record=owner_record,
            owner_token_record_bump=owner_record_bump,
            dest_token_record=dest_record,
            dest_token_record_bump=dest_record_bump,
        )
        return BuildResult(ix, collect_signers(identity), result)

    async def flash_deposit_pnft(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        gem_amount: int,
        gem_mint: Pubkey,
        gem_source: Pubkey,
        mint_proof: Optional[Pubkey] = None,
        creator_proof: Optional[Pubkey] = None,
        rule_set: Optional[Pubkey] = None,
    ) -> FlashDepositResult:
        """Flash deposit a programmable NFT.

        `rule_set` is the mint's authorization rule set, when it has one.
        """
        built = await self.build_flash_deposit_pnft(
            farm,
            farmer_identity,
            gem_amount,
            gem_mint,
            gem_source,
            mint_proof,
            creator_proof,
            rule_set,
        )
        logger.info(f"(pNFT) Flash depositing {gem_mint} for farmer {built.result.farmer}")
        return await self._submit(built, compute_units=FLASH_DEPOSIT_PNFT_COMPUTE_UNITS)

    async def build_refresh_farmer(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        reenroll: Optional[bool] = None,
    ) -> BuildResult[RefreshFarmerResult]:
        identity = resolve_principal(farmer_identity)
        farmer, farmer_bump = get_farmer_pda(farm, identity.pubkey, self.farm_program_id)
        ix = build_refresh_farmer_instruction(
            farm, identity.pubkey, reenroll, farm_program_id=self.farm_program_id
        )
        # The unsigned variant never needs the identity's signature
        signers = collect_signers(identity) if reenroll is not None else []
        return BuildResult(ix, signers, RefreshFarmerResult(farmer=farmer, farmer_bump=farmer_bump))

    async def refresh_farmer(
        self,
        farm: Pubkey,
        farmer_identity: PrincipalLike,
        reenroll: Optional[bool] = None,
    ) -> RefreshFarmerResult:
        built = await self.build_refresh_farmer(farm, farmer_identity, reenroll)
        if reenroll is None:
            logger.info(f"Refreshing farmer {built.result.farmer}")
        else:
            logger.info(f"Refreshing farmer {built.result.farmer} (signed, reenroll={reenroll})")
        return await self._submit(built)

    # =========================================================================
    # Funding
    # =========================================================================

    async def build_authorize_funder(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        funder_to_authorize: Pubkey,
    ) -> BuildResult[AuthorizeFunderResult]:
        manager = resolve_principal(farm_manager)
        ix = build_authorize_funder_instruction(
            farm, manager.pubkey, funder_to_authorize, farm_program_id=self.farm_program_id
        )
        result = self._authorize_result(farm, funder_to_authorize)
        return BuildResult(ix, collect_signers(manager), result)

    async def authorize_funder(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        funder_to_authorize: Pubkey,
    ) -> AuthorizeFunderResult:
        logger.info(f"Authorizing funder {funder_to_authorize}")
        return await self._submit(
            await self.build_authorize_funder(farm, farm_manager, funder_to_authorize)
        )

    async def build_deauthorize_funder(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        funder_to_deauthorize: Pubkey,
    ) -> BuildResult[AuthorizeFunderResult]:
        manager = resolve_principal(farm_manager)
        ix = build_deauthorize_funder_instruction(
            farm, manager.pubkey, funder_to_deauthorize, farm_program_id=self.farm_program_id
        )
        result = self._authorize_result(farm, funder_to_deauthorize)
        return BuildResult(ix, collect_signers(manager), result)

    async def deauthorize_funder(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        funder_to_deauthorize: Pubkey,
    ) -> AuthorizeFunderResult:
        logger.info(f"Deauthorizing funder {funder_to_deauthorize}")
        return await self._submit(
            await self.build_deauthorize_funder(farm, farm_manager, funder_to_deauthorize)
        )

    async def build_fund_reward(
        self,
        farm: Pubkey,
        reward_mint: Pubkey,
        funder: PrincipalLike,
        reward_source: Pubkey,
        variable_rate_config: Optional[VariableRateConfig] = None,
        fixed_rate_config: Optional[FixedRateConfig] = None,
    ) -> BuildResult[FundRewardResult]:
        funder_p = resolve_principal(funder)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        proof, proof_bump = get_authorization_proof_pda(
            farm, funder_p.pubkey, self.farm_program_id
        )
        pot, pot_bump = get_reward_pot_pda(farm, reward_mint, self.farm_program_id)

        ix = build_fund_reward_instruction(
            farm,
            reward_mint,
            funder_p.pubkey,
            reward_source,
            variable_rate_config,
            fixed_rate_config,
            farm_program_id=self.farm_program_id,
        )
        result = FundRewardResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            authorization_proof=proof,
            authorization_proof_bump=proof_bump,
            pot=pot,
            pot_bump=pot_bump,
        )
        return BuildResult(ix, collect_signers(funder_p), result)

    async def fund_reward(
        self,
        farm: Pubkey,
        reward_mint: Pubkey,
        funder: PrincipalLike,
        reward_source: Pubkey,
        variable_rate_config: Optional[VariableRateConfig] = None,
        fixed_rate_config: Optional[FixedRateConfig] = None,
    ) -> FundRewardResult:
        built = await self.build_fund_reward(
            farm,
            reward_mint,
            funder,
            reward_source,
            variable_rate_config,
            fixed_rate_config,
        )
        logger.info(f"Funding reward pot {built.result.pot}")
        return await self._submit(built)

    async def build_cancel_reward(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        reward_mint: Pubkey,
        receiver: Pubkey,
    ) -> BuildResult[CancelRewardResult]:
        manager = resolve_principal(farm_manager)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        pot, pot_bump = get_reward_pot_pda(farm, reward_mint, self.farm_program_id)

        ix = build_cancel_reward_instruction(
            farm,
            manager.pubkey,
            reward_mint,
            receiver,
            farm_program_id=self.farm_program_id,
        )
        result = CancelRewardResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            pot=pot,
            pot_bump=pot_bump,
            reward_destination=get_associated_token_address(receiver, reward_mint),
        )
        return BuildResult(ix, collect_signers(manager), result)

    async def cancel_reward(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        reward_mint: Pubkey,
        receiver: Pubkey,
    ) -> CancelRewardResult:
        logger.info(f"Cancelling reward {reward_mint} on farm {farm}")
        return await self._submit(
            await self.build_cancel_reward(farm, farm_manager, reward_mint, receiver)
        )

    async def build_lock_reward(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        reward_mint: Pubkey,
    ) -> BuildResult[TxResult]:
        manager = resolve_principal(farm_manager)
        ix = build_lock_reward_instruction(
            farm, manager.pubkey, reward_mint, farm_program_id=self.farm_program_id
        )
        return BuildResult(ix, collect_signers(manager), TxResult())

    async def lock_reward(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        reward_mint: Pubkey,
    ) -> TxResult:
        logger.info(f"Locking reward {reward_mint} on farm {farm}")
        return await self._submit(await self.build_lock_reward(farm, farm_manager, reward_mint))

    # =========================================================================
    # Rarity
    # =========================================================================

    async def build_add_rarities_to_bank(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        rarity_configs: Sequence[RarityConfig],
    ) -> BuildResult[AddRaritiesResult]:
        manager = resolve_principal(farm_manager)
        bank = await self._fetch_bank(farm)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        configs = list(rarity_configs)

        ix = build_add_rarities_to_bank_instruction(
            farm,
            manager.pubkey,
            bank,
            configs,
            farm_program_id=self.farm_program_id,
            bank_program_id=self.bank_program_id,
        )
        result = AddRaritiesResult(
            bank=bank,
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            complete_rarity_configs=configs,
        )
        return BuildResult(ix, collect_signers(manager), result)

    async def add_rarities_to_bank(
        self,
        farm: Pubkey,
        farm_manager: PrincipalLike,
        rarity_configs: Sequence[RarityConfig],
    ) -> AddRaritiesResult:
        logger.info(f"Adding {len(rarity_configs)} rarities to the bank of farm {farm}")
        return await self._submit(
            await self.build_add_rarities_to_bank(farm, farm_manager, rarity_configs)
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def parse_reward_type(reward: Any) -> str:
        """Returns "variable" or "fixed"."""
        return parse_reward_type(reward)

    @staticmethod
    def parse_farmer_state(farmer: Any) -> str:
        """Returns "staked", "unstaked" or "pendingCooldown"."""
        return parse_farmer_state(farmer)

    @staticmethod
    def create_extra_compute_ix(new_compute_budget: int) -> Instruction:
        return build_compute_budget_instruction(new_compute_budget)

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    def _whitelist_result(
        self, farm: Pubkey, bank: Pubkey, address: Pubkey
    ) -> WhitelistResult:
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        proof, proof_bump = get_whitelist_proof_pda(bank, address, self.bank_program_id)
        return WhitelistResult(
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            whitelist_proof=proof,
            whitelist_proof_bump=proof_bump,
        )

    def _stake_result(self, farm: Pubkey, bank: Pubkey, identity: Pubkey) -> StakeResult:
        farmer, farmer_bump = get_farmer_pda(farm, identity, self.farm_program_id)
        vault, vault_bump = get_vault_pda(bank, identity, self.bank_program_id)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        farm_treasury, farm_treasury_bump = get_farm_treasury_pda(farm, self.farm_program_id)
        return StakeResult(
            farmer=farmer,
            farmer_bump=farmer_bump,
            vault=vault,
            vault_bump=vault_bump,
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            farm_treasury=farm_treasury,
            farm_treasury_bump=farm_treasury_bump,
        )

    def _flash_deposit_result(
        self, farm: Pubkey, bank: Pubkey, identity: Pubkey, gem_mint: Pubkey
    ) -> FlashDepositResult:
        farmer, farmer_bump = get_farmer_pda(farm, identity, self.farm_program_id)
        vault, vault_bump = get_vault_pda(bank, identity, self.bank_program_id)
        farm_auth, farm_auth_bump = get_farm_authority_pda(farm, self.farm_program_id)
        gem_box, gem_box_bump = get_gem_box_pda(vault, gem_mint, self.bank_program_id)
        gdr, gdr_bump = get_gem_deposit_receipt_pda(vault, gem_mint, self.bank_program_id)
        vault_auth, vault_auth_bump = get_vault_authority_pda(vault, self.bank_program_id)
        return FlashDepositResult(
            farmer=farmer,
            farmer_bump=farmer_bump,
            vault=vault,
            vault_bump=vault_bump,
            farm_auth=farm_auth,
            farm_auth_bump=farm_auth_bump,
            gem_box=gem_box,
            gem_box_bump=gem_box_bump,
            gdr=gdr,
            gdr_bump=gdr_bump,
            vault_auth=vault_auth,
            vault_auth_bump=vault_auth_bump,
        )

    def _authorize_result(self, farm: Pubkey, funder: Pubkey) -> AuthorizeFunderResult:
        proof, proof_bump = get_authorization_proof_pda(farm, funder, self.farm_program_id)
        return AuthorizeFunderResult(
            authorization_proof=proof, authorization_proof_bump=proof_bump
        )

    async def _fetch_bank(self, farm: Pubkey) -> Pubkey:
        return (await self.fetch_farm_acc(farm)).bank

    async def _get_account_data(self, address: Pubkey) -> bytes:
        response = await self._query(
            f"getAccountInfo({address})",
            lambda: self.connection.get_account_info(address, commitment=self.commitment),
        )
        if response.value is None:
            raise AccountNotFoundError(str(address))
        return bytes(response.value.data)

    async def _fetch_all(
        self, kind: AccountKind, filters: List[AccountFilter]
    ) -> List[ProgramAccount]:
        response = await self._query(
            f"getProgramAccounts({kind.name})",
            lambda: self.connection.get_program_accounts(
                self.farm_program_id,
                commitment=self.commitment,
                encoding="base64",
                filters=[f.to_memcmp() for f in filters],
            ),
        )
        accounts = []
        for keyed in response.value:
            data = bytes(keyed.account.data)
            if not matches_filters(data, filters):
                logger.debug(f"Skipping {keyed.pubkey}: does not match {kind.name} filters")
                continue
            accounts.append(ProgramAccount(keyed.pubkey, kind.decode(data)))
        logger.info(f"Found {len(accounts)} {kind.name} account(s)")
        return accounts

    async def _submit(self, built: BuildResult[T], compute_units: Optional[int] = None) -> T:
        """Sign and send a built instruction, returning its result with tx_sig set.

        Without compute_units this is the managed path: send with preflight and
        wait for confirmation at the client commitment. With compute_units the
        budget instruction goes first and the raw send is not confirmed.
        """
        response = await self._call(
            lambda: self.connection.get_latest_blockhash(), query="getLatestBlockhash"
        )
        blockhash = response.value.blockhash

        tx = compose_transaction(
            [built.instruction], self.wallet.pubkey, blockhash, compute_units
        )
        tx = sign_transaction(tx, self.wallet, built.signers)
        tx_sig = await self._send(tx)

        if compute_units is None:
            await self._confirm(tx_sig)
        return replace(built.result, tx_sig=tx_sig)

    async def _send(self, tx: Transaction) -> Signature:
        opts = TxOpts(skip_confirmation=True, preflight_commitment=self.commitment)
        response = await self._call(
            lambda: self.connection.send_raw_transaction(bytes(tx), opts=opts)
        )
        logger.debug(f"Sent transaction {response.value}")
        return response.value

    async def _confirm(self, tx_sig: Signature) -> None:
        response = await self._call(
            lambda: self.connection.confirm_transaction(tx_sig, self.commitment)
        )
        statuses = response.value
        status = statuses[0] if statuses else None
        if status is not None and status.err is not None:
            raise RemoteRejectionError(str(status.err), str(tx_sig))

    async def _call(
        self, request: Callable[[], Awaitable[T]], query: Optional[str] = None
    ) -> T:
        """Run an RPC request, translating solana-py errors into GemFarmError.

        `query` names a read-only request; node errors on those raise
        QueryRejectedError since no transaction was involved.
        """
        try:
            return await request()
        except RPCException as e:
            if query is not None:
                raise QueryRejectedError(query, str(e)) from e
            raise RemoteRejectionError(str(e)) from e
        except UnconfirmedTxError as e:
            raise TransportFailureError(str(e)) from e
        except SolanaRpcException as e:
            raise TransportFailureError(getattr(e, "error_msg", "") or str(e)) from e
        except (asyncio.TimeoutError, ConnectionError) as e:
            raise TransportFailureError(str(e) or type(e).__name__) from e

    async def _query(self, description: str, request: Callable[[], Awaitable[T]]) -> T:
        """Run a read-only RPC request with retry logic."""
        last_error: Optional[GemFarmError] = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                return await self._call(request, query=description)
            except GemFarmError as e:
                last_error = e

                if not is_retryable(e) or attempt >= self.retry_config.max_retries:
                    raise

                delay = self.retry_config.backoff_seconds(attempt)
                logger.warning(f"{description} failed: {e}. Retrying in {delay:.2f}s")
                await asyncio.sleep(delay)

        raise last_error or RuntimeError("Unexpected retry loop exit")
