import pytest

from src.rw_common.errors import InvalidAmountError
from src.rw_common.money import format_amount, require_positive_amount
from src.rw_common.references import new_reference


class TestRequirePositiveAmount:
    def test_accepts_positive_int(self) -> None:
        assert require_positive_amount(1) == 1

    @pytest.mark.parametrize("value", [0, -1, -100_000])
    def test_rejects_non_positive(self, value: int) -> None:
        with pytest.raises(InvalidAmountError):
            require_positive_amount(value)

    @pytest.mark.parametrize("value", [1.5, "100", None, True])
    def test_rejects_non_integers(self, value: object) -> None:
        with pytest.raises(InvalidAmountError):
            require_positive_amount(value)


class TestFormatAmount:
    def test_zero(self) -> None:
        assert format_amount(0) == "TZS 0"

    def test_thousands_separator(self) -> None:
        assert format_amount(1_000_000) == "TZS 1,000,000"

    def test_negative(self) -> None:
        assert format_amount(-500) == "-TZS 500"


class TestNewReference:
    def test_prefix_and_shape(self) -> None:
        ref = new_reference("WD")
        prefix, body = ref.split("-")
        assert prefix == "WD"
        assert len(body) == 16
        assert body == body.upper()

    def test_unique(self) -> None:
        assert len({new_reference("DEP") for _ in range(100)}) == 100
