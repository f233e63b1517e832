"""Unit tests for wei/ETH conversion."""

import pytest

from app.services.blockchain.units import from_wei, to_wei
from app.utils.exceptions import InvalidRequestError


class TestToWei:
    """Tests for decimal ETH string parsing."""

    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            ("1", 10**18),
            ("1.0", 10**18),
            ("0.5", 500_000_000_000_000_000),
            ("0.000000000000000001", 1),
            ("2.50", 2_500_000_000_000_000_000),
            ("0", 0),
            ("123456789.123456789123456789", 123456789123456789123456789),
        ],
    )
    def test_exact_conversion(self, amount, expected):
        """Conversion must be exact integer arithmetic."""
        assert to_wei(amount) == expected

    def test_trailing_zeros_beyond_precision_accepted(self):
        """Zeros past the 18th decimal do not change the value."""
        assert to_wei("1.0000000000000000000000") == 10**18

    def test_too_many_decimals_rejected(self):
        """Amounts finer than one wei are rejected."""
        with pytest.raises(InvalidRequestError):
            to_wei("0.0000000000000000001")

    @pytest.mark.parametrize("amount", ["-1", "abc", "", "1e18", "0x10", ".5", "1."])
    def test_malformed_amount_rejected(self, amount):
        """Negative, non-numeric and exotic notations are rejected."""
        with pytest.raises(InvalidRequestError):
            to_wei(amount)


class TestFromWei:
    """Tests for wei formatting."""

    @pytest.mark.parametrize(
        ("wei", "expected"),
        [
            (10**18, "1.0"),
            (5 * 10**17, "0.5"),
            (0, "0.0"),
            (1, "0.000000000000000001"),
            ("1500000000000000000", "1.5"),
        ],
    )
    def test_formatting(self, wei, expected):
        assert from_wei(wei) == expected
