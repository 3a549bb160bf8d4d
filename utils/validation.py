"""Input validation module for NEXUS."""

import re
from typing import List

import base58
from pydantic import BaseModel, Field, field_validator

from config.analysis_config import MAX_MONITORED_ENTITIES, MIN_MONITORED_ENTITIES

# Solana wallet address validation
SOLANA_ADDRESS_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]{32,44}$')
PUBKEY_LENGTH = 32


class WalletAddress(BaseModel):
    """Validated Solana wallet address."""
    address: str = Field(..., min_length=32, max_length=44)

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        if not SOLANA_ADDRESS_PATTERN.match(v):
            raise ValueError(f'Invalid Solana wallet address: {v}')
        if len(base58.b58decode(v)) != PUBKEY_LENGTH:
            raise ValueError(f'Invalid Solana wallet address: {v}')
        return v


def validate_address(address: str) -> bool:
    """True if address is a well-formed Solana public key."""
    try:
        WalletAddress(address=address)
        return True
    except ValueError:
        return False


def validate_addresses(addresses: List[str]) -> List[str]:
    """
    Clean and validate the monitored wallet list.

    Blank entries are dropped and duplicates collapsed, keeping order.
    Raises ValueError for too few/many wallets or the first invalid one.
    """
    cleaned = list(dict.fromkeys(a.strip() for a in addresses if a and a.strip()))

    if len(cleaned) < MIN_MONITORED_ENTITIES:
        raise ValueError(f"Please enter at least {MIN_MONITORED_ENTITIES} wallet addresses.")
    if len(cleaned) > MAX_MONITORED_ENTITIES:
        raise ValueError(f"At most {MAX_MONITORED_ENTITIES} wallet addresses can be analyzed.")

    for address in cleaned:
        if not validate_address(address):
            raise ValueError(f"Invalid Solana address: {address}")

    return cleaned
