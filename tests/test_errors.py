import pytest

from ifjvm.errors import ErrorCode, IFJError


def test_error_carries_code_and_message():
    err = IFJError(ErrorCode.SEM, "Class Main does not exist.")
    assert err.code is ErrorCode.SEM
    assert err.message == "Class Main does not exist."
    assert "Class Main does not exist." in str(err)


def test_error_accepts_plain_int_code():
    err = IFJError(int(ErrorCode.RUN_ZERODIV), "Trying to divide by 0.")
    assert err.code is ErrorCode.RUN_ZERODIV


def test_error_message_for_uninitialized_access():
    err = IFJError(ErrorCode.RUN_UNINITIALIZED, "Accessing uninitialized variable x.")
    assert err.code is ErrorCode.RUN_UNINITIALIZED
    assert err.message == "Accessing uninitialized variable x."
    assert "Accessing uninitialized variable x." in str(err)


@pytest.mark.parametrize("code", [c for c in ErrorCode if c is not ErrorCode.OK])
def test_every_error_code_round_trips_through_int(code):
    err = IFJError(int(code), "message")
    assert err.code is code
    assert int(err.code) > 0


def test_error_codes_resolve_to_distinct_members():
    codes = [IFJError(int(c), "m").code for c in ErrorCode if c is not ErrorCode.OK]
    assert len(codes) == len(set(codes))
    assert int(ErrorCode.OK) == 0


def test_unknown_code_rejected():
    with pytest.raises(ValueError):
        IFJError(12345, "bad")


def test_str_without_message_names_code():
    assert str(IFJError(ErrorCode.INTERN)) == ErrorCode.INTERN.name