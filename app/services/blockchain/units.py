"""
Unit conversion between wei and decimal ETH strings.

All conversions are exact integer arithmetic; floats are never involved.
"""

from app.config.constants import ETH_DECIMALS, WEI_PER_ETH
from app.utils.exceptions import InvalidRequestError
from app.utils.validation import validate_amount


def to_wei(amount_in_eth: str) -> int:
    """
    Parse a decimal ETH string into wei.

    Args:
        amount_in_eth: Non-negative decimal string, e.g. "0.5"

    Returns:
        Amount in wei

    Raises:
        InvalidRequestError: If the amount is malformed, negative or finer
            than one wei
    """
    if not validate_amount(amount_in_eth):
        raise InvalidRequestError(
            f'Amount must be a valid number string (e.g., "0.01"), got "{amount_in_eth}"'
        )

    whole, _, fraction = amount_in_eth.partition(".")
    fraction = fraction.rstrip("0")
    if len(fraction) > ETH_DECIMALS:
        raise InvalidRequestError(
            f"Amount {amount_in_eth} has more than {ETH_DECIMALS} decimal places"
        )

    return int(whole) * WEI_PER_ETH + int(fraction.ljust(ETH_DECIMALS, "0") or "0")


def from_wei(wei: int | str) -> str:
    """
    Format wei as a decimal ETH string.

    Always keeps at least one fractional digit: 10**18 -> "1.0",
    5 * 10**17 -> "0.5".
    """
    value = int(wei)
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), WEI_PER_ETH)
    fraction_str = f"{fraction:0{ETH_DECIMALS}d}".rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"
