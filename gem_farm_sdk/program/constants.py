"""Constants for the Gem Farm program module."""

from solders.pubkey import Pubkey

# ============================================================================
# PROGRAM IDS
# ============================================================================

GEM_FARM_PROGRAM_ID = Pubkey.from_string("farmL4xeBFVXJqtfxCzU9b28QACM7E2W2ctT6epAjvE")
GEM_BANK_PROGRAM_ID = Pubkey.from_string("bankHHdqMuaaST4qQk6mkzxGeKPHWmqdgor6Gs8r88m")

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
INSTRUCTIONS_SYSVAR_ID = Pubkey.from_string("Sysvar1nstructions1111111111111111111111111")
COMPUTE_BUDGET_PROGRAM_ID = Pubkey.from_string("ComputeBudget111111111111111111111111111111")

# Metaplex programs used by programmable NFT deposits
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
TOKEN_AUTH_RULES_PROGRAM_ID = Pubkey.from_string("auth9SigNpDKz4sJJ1DfCTuZrZNSAgh9sFD3rboVmgg")

# Protocol fee receiver, passed verbatim to every fee-charging instruction
FEE_ACCOUNT = Pubkey.from_string("2xhBxVVuXkdq2MRKerE9mr2s1szfHSedy21MVqf8gPoM")

# ============================================================================
# PDA SEEDS
# ============================================================================

# Authority PDAs are seeded by the parent address alone
SEED_FARM_AUTHORITY = b""
SEED_FARM_TREASURY = b"treasury"
SEED_REWARD_POT = b"reward_pot"
SEED_FARMER = b"farmer"
SEED_AUTHORIZATION_PROOF = b"authorization"

SEED_VAULT = b"vault"
SEED_VAULT_AUTHORITY = b""
SEED_GEM_BOX = b"gem_box"
SEED_GEM_DEPOSIT_RECEIPT = b"gem_deposit_receipt"
SEED_GEM_RARITY = b"gem_rarity"
SEED_WHITELIST_PROOF = b"whitelist"

SEED_METADATA = b"metadata"
SEED_EDITION = b"edition"
SEED_TOKEN_RECORD = b"token_record"

PDA_MARKER = b"ProgramDerivedAddress"
MAX_SEED_LEN = 32
MAX_SEEDS = 16

# ============================================================================
# ACCOUNT LAYOUT
# ============================================================================

DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32

# Farm: [disc 8][version u16][farm_manager 32]...
FARM_VERSION_OFFSET = DISCRIMINATOR_SIZE
FARM_MANAGER_OFFSET = FARM_VERSION_OFFSET + 2

# Farmer: [disc 8][farm 32][identity 32][vault 32][state u8]...
FARMER_FARM_OFFSET = DISCRIMINATOR_SIZE
FARMER_IDENTITY_OFFSET = FARMER_FARM_OFFSET + PUBKEY_SIZE

# AuthorizationProof: [disc 8][authorized_funder 32][farm 32][reserved 32]
AUTH_PROOF_FUNDER_OFFSET = DISCRIMINATOR_SIZE
AUTH_PROOF_FARM_OFFSET = AUTH_PROOF_FUNDER_OFFSET + PUBKEY_SIZE

# Minimum serialized sizes (all options absent)
FARM_MIN_SIZE = 639
FARMER_MIN_SIZE = 335
AUTHORIZATION_PROOF_SIZE = DISCRIMINATOR_SIZE + 3 * PUBKEY_SIZE
TOKEN_ACCOUNT_SIZE = 165

# ============================================================================
# COMPUTE BUDGET
# ============================================================================

FLASH_DEPOSIT_COMPUTE_UNITS = 256_000
FLASH_DEPOSIT_PNFT_COMPUTE_UNITS = 400_000
