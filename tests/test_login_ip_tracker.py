import pytest
from sqlalchemy import func, select

from passwatch.app.core.errors import RecordNotFound, UserNotFound
from passwatch.app.models.login_ip import LoginIp
from passwatch.app.models.password_log import ActionType, PasswordLog
from passwatch.app.services.audit import AuditLog
from passwatch.app.services.login_ip import DEVICE_INFO_MAX_LENGTH, LoginIpTracker


@pytest.mark.asyncio
async def test_first_login_creates_untrusted_record(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)

    result = await tracker.record_login(test_user.id, "1.2.3.4", "Firefox")

    assert result.is_new_ip is True
    assert result.record.is_trusted is False
    assert result.record.device_info == "Firefox"
    assert result.record.first_seen == result.record.last_seen == clock.now()


@pytest.mark.asyncio
async def test_repeat_login_moves_last_seen_only(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)
    first = await tracker.record_login(test_user.id, "1.2.3.4")
    first_seen = first.record.first_seen

    clock.advance(30)
    second = await tracker.record_login(test_user.id, "1.2.3.4")

    assert second.is_new_ip is False
    assert second.record.id == first.record.id
    assert second.record.first_seen == first_seen
    assert second.record.last_seen == clock.now()
    assert second.record.last_seen > first_seen


@pytest.mark.asyncio
async def test_device_info_first_write_wins(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)
    await tracker.record_login(test_user.id, "1.2.3.4", "Firefox")

    result = await tracker.record_login(test_user.id, "1.2.3.4", "Chrome")

    assert result.record.device_info == "Firefox"


@pytest.mark.asyncio
async def test_device_info_filled_in_when_first_login_had_none(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)
    first = await tracker.record_login(test_user.id, "1.2.3.4")
    assert first.record.device_info is None

    result = await tracker.record_login(test_user.id, "1.2.3.4", "Chrome")

    assert result.record.device_info == "Chrome"


@pytest.mark.asyncio
async def test_device_info_is_truncated(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)

    result = await tracker.record_login(test_user.id, "1.2.3.4", "x" * 400)

    assert len(result.record.device_info) == DEVICE_INFO_MAX_LENGTH


@pytest.mark.asyncio
async def test_unknown_user_is_rejected(db_session, clock):
    tracker = LoginIpTracker(db_session, clock=clock)

    with pytest.raises(UserNotFound):
        await tracker.record_login("00000000-0000-0000-0000-000000000000", "1.2.3.4")


@pytest.mark.asyncio
async def test_list_ips_most_recent_first(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)
    await tracker.record_login(test_user.id, "1.1.1.1")
    clock.advance(10)
    await tracker.record_login(test_user.id, "2.2.2.2")
    clock.advance(10)
    await tracker.record_login(test_user.id, "1.1.1.1")

    ips = await tracker.list_ips(test_user.id)

    assert [ip.ip_address for ip in ips] == ["1.1.1.1", "2.2.2.2"]


@pytest.mark.asyncio
async def test_list_ips_is_scoped_to_user(db_session, test_user, clock, make_user):
    other = await make_user("bob@example.com")
    tracker = LoginIpTracker(db_session, clock=clock)
    await tracker.record_login(test_user.id, "1.1.1.1")
    await tracker.record_login(other.id, "9.9.9.9")

    ips = await tracker.list_ips(test_user.id)

    assert [ip.ip_address for ip in ips] == ["1.1.1.1"]


@pytest.mark.asyncio
async def test_set_trust_toggles_flag(db_session, test_user, clock):
    tracker = LoginIpTracker(db_session, clock=clock)
    result = await tracker.record_login(test_user.id, "1.2.3.4")

    record = await tracker.set_trust(test_user.id, result.record.id, True)
    assert record.is_trusted is True

    record = await tracker.set_trust(test_user.id, result.record.id, False)
    assert record.is_trusted is False


@pytest.mark.asyncio
async def test_set_trust_on_another_users_record_is_not_found(db_session, test_user, clock, make_user):
    other = await make_user("bob@example.com")
    tracker = LoginIpTracker(db_session, clock=clock)
    result = await tracker.record_login(other.id, "1.2.3.4")

    with pytest.raises(RecordNotFound):
        await tracker.set_trust(test_user.id, result.record.id, True)


@pytest.mark.asyncio
async def test_deleting_user_removes_login_ips_and_history(db_session, clock, make_user):
    user = await make_user("carol@example.com", name="Carol")
    user_id = user.id
    await LoginIpTracker(db_session, clock=clock).record_login(user_id, "1.2.3.4")
    await AuditLog(db_session, clock=clock).record(
        user_id, "cred-1", "GitHub", ActionType.CREATE, new_value="GitHub"
    )

    await db_session.delete(user)
    await db_session.commit()

    login_ips = await db_session.scalar(
        select(func.count()).select_from(LoginIp).where(LoginIp.user_id == user_id)
    )
    password_logs = await db_session.scalar(
        select(func.count()).select_from(PasswordLog).where(PasswordLog.user_id == user_id)
    )
    assert login_ips == 0
    assert password_logs == 0
