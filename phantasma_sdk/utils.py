"""
Utility functions for Phantasma
"""

from decimal import Decimal, InvalidOperation

from .models import Balance, Token

PRIVATE_KEY_PREFIXES = ("L", "K")
PRIVATE_KEY_LENGTH = 52
ADDRESS_PREFIX = "P"
ADDRESS_LENGTH = 45


class Utils:
    """Helper utilities for Phantasma operations"""

    @staticmethod
    def is_valid_private_key(key: str) -> bool:
        """
        Validate WIF private key format (prefix and length only).

        Args:
            key: Private key text

        Returns:
            True if valid, False otherwise
        """
        return key.startswith(PRIVATE_KEY_PREFIXES) and len(key) == PRIVATE_KEY_LENGTH

    @staticmethod
    def is_valid_address(address: str) -> bool:
        """
        Validate address format (prefix and length only, no checksum).

        Args:
            address: Address string

        Returns:
            True if valid, False otherwise
        """
        return address.startswith(ADDRESS_PREFIX) and len(address) == ADDRESS_LENGTH

    @staticmethod
    def scale_amount(amount: str, decimals: int, fungible: bool = True) -> Decimal:
        """
        Convert a raw on-chain amount to display units.

        Args:
            amount: Raw integer amount as decimal text
            decimals: Token decimals
            fungible: Non-fungible amounts are instance counts and are not scaled

        Returns:
            Amount in display units

        Raises:
            ValueError: If amount is not numeric

        Example:
            >>> Utils.scale_amount("150000000", 8)
            Decimal('1.50000000')
        """
        try:
            raw = Decimal(amount)
        except InvalidOperation:
            raise ValueError(f"invalid amount: {amount!r}")
        if not fungible or decimals <= 0:
            return raw
        return raw.scaleb(-decimals)

    @staticmethod
    def balance_amount(balance: Balance, token: Token) -> Decimal:
        """Display amount of a balance, scaled by the token's decimals when fungible"""
        return Utils.scale_amount(balance.amount, token.decimals, token.is_fungible)

    @staticmethod
    def format_address(address: str, length: int = 16) -> str:
        """
        Format address for display (shortened).

        Args:
            address: Full address
            length: Number of characters to show from start

        Returns:
            Shortened address with ellipsis
        """
        if len(address) <= length:
            return address
        return f"{address[:length]}..."
