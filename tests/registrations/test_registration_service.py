from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from src.community_events.community_events.core.enums import ErrorCode, RegistrationStatus
from src.community_events.community_events.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_single_seat_scenario(container, repos, make_event, fixed_now):
    event = make_event(max_attendees=1, registration_required=True)
    svc = container.registration_service

    reg = svc.register(event.event_id, 10, now=fixed_now)
    assert reg.status == RegistrationStatus.CONFIRMED
    assert reg.registration_date == fixed_now

    with pytest.raises(ValidationError) as e:
        svc.register(event.event_id, 11, now=fixed_now)
    assert e.value.code == ErrorCode.CAPACITY_EXCEEDED

    svc.cancel(event.event_id, 10, now=fixed_now)
    assert repos.events.get_by_id(event.event_id).current_attendees == 0

    svc.register(event.event_id, 11, now=fixed_now)
    assert repos.events.get_by_id(event.event_id).current_attendees == 1


def test_register_twice_is_conflict(container, make_event, fixed_now):
    event = make_event(registration_required=True)
    container.registration_service.register(event.event_id, 10, now=fixed_now)

    with pytest.raises(ConflictError) as e:
        container.registration_service.register(event.event_id, 10, now=fixed_now)
    assert e.value.code == ErrorCode.ALREADY_REGISTERED
    assert e.value.status_code == 409


@pytest.mark.parametrize(
    "overrides, now_offset, code",
    [
        ({"registration_required": False}, timedelta(0), ErrorCode.REGISTRATION_NOT_REQUIRED),
        ({"is_active": False}, timedelta(0), ErrorCode.EVENT_NOT_ACTIVE),
        ({}, timedelta(days=1), ErrorCode.EVENT_ALREADY_STARTED),
        ({"registration_deadline_offset": timedelta(hours=2)}, timedelta(hours=2), ErrorCode.REGISTRATION_DEADLINE_PASSED),
    ],
)
def test_register_rejections(container, make_event, fixed_now, overrides, now_offset, code):
    overrides = dict(overrides)
    overrides.setdefault("registration_required", True)
    deadline_offset = overrides.pop("registration_deadline_offset", None)
    if deadline_offset is not None:
        overrides["registration_deadline"] = fixed_now + deadline_offset
    event = make_event(**overrides)

    with pytest.raises(ValidationError) as e:
        container.registration_service.register(event.event_id, 10, now=fixed_now + now_offset)
    assert e.value.code == code


def test_register_unknown_event(container, fixed_now):
    with pytest.raises(NotFoundError) as e:
        container.registration_service.register(999, 10, now=fixed_now)
    assert e.value.code == ErrorCode.EVENT_NOT_FOUND


def test_concurrent_registrations_never_exceed_capacity(container, repos, make_event, fixed_now):
    event = make_event(max_attendees=5, registration_required=True)
    barrier = threading.Barrier(20)
    results: list[object] = []
    results_lock = threading.Lock()

    def worker(user_id: int):
        barrier.wait()
        try:
            container.registration_service.register(event.event_id, user_id, now=fixed_now)
            outcome: object = "ok"
        except ValidationError as exc:
            outcome = exc.code
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=(1000 + i,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 5
    assert results.count(ErrorCode.CAPACITY_EXCEEDED) == 15
    assert repos.events.get_by_id(event.event_id).current_attendees == 5


def test_cancel_requires_registration(container, make_event, fixed_now):
    event = make_event(registration_required=True)
    with pytest.raises(NotFoundError) as e:
        container.registration_service.cancel(event.event_id, 10, now=fixed_now)
    assert e.value.code == ErrorCode.REGISTRATION_NOT_FOUND


def test_cancel_after_start_is_rejected(container, repos, make_event, fixed_now):
    event = make_event(registration_required=True)
    container.registration_service.register(event.event_id, 10, now=fixed_now)

    with pytest.raises(ValidationError) as e:
        container.registration_service.cancel(event.event_id, 10, now=event.start_date)
    assert e.value.code == ErrorCode.EVENT_ALREADY_STARTED
    assert repos.events.get_by_id(event.event_id).current_attendees == 1


def test_list_for_user_newest_first(container, make_event, fixed_now):
    first = make_event(registration_required=True)
    second = make_event(registration_required=True)
    container.registration_service.register(first.event_id, 10, now=fixed_now)
    container.registration_service.register(second.event_id, 10, now=fixed_now + timedelta(minutes=5))

    regs = container.registration_service.list_for_user(10)
    assert [r.event_id for r in regs] == [second.event_id, first.event_id]
