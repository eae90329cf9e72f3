from __future__ import annotations

import pytest

from devinfo.errors import (
    DevinfoError,
    InvalidArgument,
    MalformedInput,
    NoData,
    UtilityUnavailable,
)


def test_to_dict_without_context() -> None:
    assert NoData("No such switch").to_dict() == {
        "error_type": "NoData",
        "message": "No such switch",
    }


def test_to_dict_with_context() -> None:
    err = InvalidArgument("Invalid mode", context={"mode": "disk"})

    assert err.message == "Invalid mode"
    assert str(err) == "Invalid mode"
    assert err.to_dict()["context"] == {"mode": "disk"}


@pytest.mark.parametrize("cls", [UtilityUnavailable, NoData, MalformedInput, InvalidArgument])
def test_all_errors_share_the_base(cls: type[DevinfoError]) -> None:
    with pytest.raises(DevinfoError):
        raise cls("boom")
