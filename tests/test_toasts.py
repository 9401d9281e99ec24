"""Tests for toast queues."""

from datetime import UTC, datetime, timedelta

import pytest

from cafe_log.services.toasts import Toast, ToastCenter


def test_toast_is_drained_once() -> None:
    center = ToastCenter()
    center.toast("user", "Coffee saved", "Details", variant="success")

    drained = center.drain("user")

    assert [toast.title for toast in drained] == ["Coffee saved"]
    assert drained[0].description == "Details"
    assert center.drain("user") == []


def test_queues_are_per_session() -> None:
    center = ToastCenter()
    center.toast("a", "For a")
    center.toast("b", "For b")

    assert [toast.title for toast in center.pending("a")] == ["For a"]
    center.clear("a")
    assert center.pending("a") == []
    assert [toast.title for toast in center.pending("b")] == ["For b"]


def test_dismiss_removes_single_toast() -> None:
    center = ToastCenter()
    first = center.toast("user", "First")
    center.toast("user", "Second")

    center.dismiss("user", first.id)

    assert [toast.title for toast in center.pending("user")] == ["Second"]


def test_expired_toasts_are_dropped() -> None:
    center = ToastCenter()
    center._queues["user"] = [
        Toast(
            id="old",
            title="Old",
            variant="info",
            expires_at=datetime.now(tz=UTC) - timedelta(seconds=1),
        )
    ]

    assert center.pending("user") == []


def test_zero_duration_never_expires() -> None:
    toast = ToastCenter().make("Sticky", duration_ms=0)
    assert toast.expires_at is None
    assert toast.duration_ms is None


def test_default_duration_applied() -> None:
    toast = ToastCenter(default_duration_ms=4000).make("Hi")
    assert toast.duration_ms is not None
    assert 0 < toast.duration_ms <= 4000


def test_unknown_variant_rejected() -> None:
    with pytest.raises(ValueError):
        ToastCenter().toast("user", "Oops", variant="warning")


def test_queueing_drops_expired_toasts_of_idle_sessions() -> None:
    center = ToastCenter()
    center._queues["idle"] = [
        Toast(
            id="old",
            title="Old",
            variant="info",
            expires_at=datetime.now(tz=UTC) - timedelta(seconds=1),
        )
    ]
    center.toast("idle-sticky", "Sticky", duration_ms=0)

    center.toast("active", "Brew created")

    assert set(center._queues) == {"idle-sticky", "active"}
