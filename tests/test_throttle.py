from passwatch.app.services.throttle import NotificationThrottle


def test_second_attempt_inside_window_is_suppressed(throttle, monotonic):
    assert throttle.should_notify("u1", "1.2.3.4") is True
    throttle.mark_notified("u1", "1.2.3.4")

    monotonic.advance(5)
    assert throttle.should_notify("u1", "1.2.3.4") is False

    monotonic.advance(5)
    assert throttle.should_notify("u1", "1.2.3.4") is True


def test_try_acquire_marks_only_first_caller(throttle, monotonic):
    assert throttle.try_acquire("u1", "1.2.3.4") is True
    assert throttle.try_acquire("u1", "1.2.3.4") is False

    monotonic.advance(10.5)
    assert throttle.try_acquire("u1", "1.2.3.4") is True


def test_pairs_are_independent(throttle):
    assert throttle.try_acquire("u1", "1.2.3.4") is True
    assert throttle.try_acquire("u1", "5.6.7.8") is True
    assert throttle.try_acquire("u2", "1.2.3.4") is True
    assert throttle.tracked_users() == 2


def test_user_entry_dropped_when_last_pair_expires(throttle, monotonic):
    throttle.mark_notified("u1", "1.2.3.4")
    assert throttle.tracked_users() == 1

    monotonic.advance(11)
    assert throttle.should_notify("u1", "1.2.3.4") is True
    assert throttle.tracked_users() == 0


def test_sweep_removes_expired_pairs(throttle, monotonic):
    throttle.mark_notified("u1", "1.2.3.4")
    monotonic.advance(6)
    throttle.mark_notified("u2", "5.6.7.8")
    monotonic.advance(6)

    assert throttle.sweep() == 1
    assert throttle.tracked_users() == 1
    assert throttle.should_notify("u2", "5.6.7.8") is False


def test_clear_forgets_everything(throttle):
    throttle.mark_notified("u1", "1.2.3.4")
    throttle.clear()
    assert throttle.tracked_users() == 0
    assert throttle.should_notify("u1", "1.2.3.4") is True


def test_default_window_is_ten_seconds():
    assert NotificationThrottle().window_seconds == 10.0


def test_idle_users_are_shed_by_later_activity(throttle, monotonic):
    for i in range(1000):
        assert throttle.try_acquire(f"user-{i}", "1.2.3.4") is True
    assert throttle.tracked_users() == 1000

    monotonic.advance(3600)
    throttle.try_acquire("someone-else", "5.6.7.8")

    assert throttle.tracked_users() == 1


def test_marking_past_the_window_sweeps_other_users(throttle, monotonic):
    throttle.mark_notified("u1", "1.2.3.4")
    monotonic.advance(10)
    # First call past the window sweeps u1 away
    throttle.mark_notified("u2", "1.2.3.4")
    assert throttle.tracked_users() == 1

    monotonic.advance(10)
    throttle.mark_notified("u3", "1.2.3.4")
    # u2 expired exactly now and was swept by this call
    assert throttle.tracked_users() == 1
