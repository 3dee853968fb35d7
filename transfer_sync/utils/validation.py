"""Address validation and normalization per chain."""

import re

from web3 import Web3

from transfer_sync.config.constants import EVM_CHAINS, Chain

# Base58 alphabet without 0, O, I, l; ed25519 keys encode to 32-44 chars
SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def validate_evm_address(address: str) -> bool:
    """
    Validate hex EVM address (checksum not enforced).

    Args:
        address: Wallet or contract address

    Returns:
        True if valid
    """
    if not address or not isinstance(address, str):
        return False
    # Mixed-case input is accepted regardless of EIP-55 checksum
    return Web3.is_address(address.lower())


def validate_solana_address(address: str) -> bool:
    """Validate base58 Solana account address shape."""
    if not address or not isinstance(address, str):
        return False
    return SOLANA_ADDRESS_PATTERN.match(address) is not None


def validate_address(chain: Chain, address: str) -> bool:
    """Validate an address with the rules of its chain."""
    if chain in EVM_CHAINS:
        return validate_evm_address(address)
    return validate_solana_address(address)


def normalize_address(chain: Chain, address: str) -> str:
    """
    Normalize address for storage and lookups.

    EVM addresses are lower-cased; Solana addresses are case-sensitive
    base58 and are returned unchanged.
    """
    if chain in EVM_CHAINS:
        return address.lower()
    return address
