"""Session value and slot tests."""

import pytest
from pydantic import ValidationError

from snowflake_rest import Session
from snowflake_rest.models.login import LoginResponseData, RenewSessionResponseData
from snowflake_rest.models.session import SessionSlot

from conftest import login_ok, renew_ok


def _session() -> Session:
    return Session.from_login(LoginResponseData.model_validate(login_ok()["data"]))


def test_from_login():
    session = _session()
    assert session.session_token == "session-1"
    assert session.master_token == "master-1"
    assert session.session_id == 1001
    assert session.database_name == "ANALYTICS"
    assert str(session) == "User: TESTER; Role: SYSADMIN; Warehouse: COMPUTE_WH"


def test_session_is_immutable():
    session = _session()
    with pytest.raises(ValidationError):
        session.session_token = "other"


def test_tokens_are_required():
    with pytest.raises(ValidationError):
        Session(session_token="", master_token="m")


def test_tokens_hidden_from_repr():
    assert "session-1" not in repr(_session())


def test_renewed_returns_new_value():
    old = _session()
    new = old.renewed(RenewSessionResponseData.model_validate(renew_ok()["data"]))

    assert new is not old
    assert (new.session_token, new.master_token, new.session_id) == ("session-2", "master-2", 1002)
    assert new.role_name == old.role_name
    assert new.server_version == old.server_version
    assert old.session_token == "session-1"


def test_renewal_without_master_token_keeps_previous():
    old = _session()
    data = RenewSessionResponseData.model_validate({"sessionToken": "session-3", "validityInSecondsST": 60})
    new = old.renewed(data)
    assert new.master_token == "master-1"
    assert new.session_id == old.session_id


def test_slot_replace_and_clear():
    slot = SessionSlot()
    assert not slot.is_active
    session = _session()
    slot.replace(session)
    assert slot.session is session
    slot.clear()
    assert slot.session is None
