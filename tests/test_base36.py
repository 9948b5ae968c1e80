import pytest

from susreader.util.base36 import b36, to_b36


@pytest.mark.parametrize("text, value", [("00", 0), ("01", 1), ("0a", 10), ("0A", 10), ("10", 36), ("zz", 1295)])
def test_b36(text: str, value: int) -> None:
    assert b36(text) == value


def test_to_b36_pads_and_round_trips() -> None:
    assert to_b36(0) == "00"
    assert to_b36(35) == "0z"
    assert b36(to_b36(1295)) == 1295
    with pytest.raises(ValueError):
        to_b36(-1)
