"""
Tests du sweep des rappels par email
"""

from datetime import timedelta

import pytest

from taskmaster.models.task import Task
from taskmaster.services import task_service
from taskmaster.services.email_service import format_duration, format_scheduled_date
from taskmaster.services.reminder_service import send_due_reminders, run_reminder_sweep

from fakes import FakeNotifier


def reload(db, task_id):
    db.expire_all()
    return db.query(Task).filter(Task.id == task_id).first()


# ============ TESTS format_duration ============

@pytest.mark.parametrize("delta, expected", [
    (timedelta(minutes=60), "1 hour(s)"),
    (timedelta(minutes=0), "0 minute(s)"),
    (timedelta(seconds=-1), "now"),
    (timedelta(minutes=90), "1 hour(s) and 30 minute(s)"),
    (timedelta(minutes=45), "45 minute(s)"),
    (timedelta(seconds=59), "0 minute(s)"),
    (timedelta(hours=26, minutes=5), "26 hour(s) and 5 minute(s)"),
])
def test_format_duration(delta, expected):
    assert format_duration(delta) == expected


def test_format_scheduled_date(clock):
    assert format_scheduled_date(clock.now() + timedelta(hours=5, minutes=4)) == "Monday, October 19, 2026 at 3:04 PM"


# ============ TESTS DUE-SET ============

def test_reminder_due_only_after_lead_time(db, clock, make_user, make_task):
    """now+90min, rappel 15 min avant → dû seulement à partir de now+75min"""
    make_user()
    task = make_task(in_minutes=90, reminder=15)
    notifier = FakeNotifier()

    assert send_due_reminders(db, notifier, clock.now()).due == 0
    clock.advance(minutes=74)
    assert send_due_reminders(db, notifier, clock.now()).due == 0
    assert notifier.sent == []

    clock.advance(minutes=1)
    result = send_due_reminders(db, notifier, clock.now())
    assert result.sent == [task.id]
    assert len(notifier.sent) == 1
    assert reload(db, task.id).reminder_sent is True


def test_reminder_sent_once(db, clock, make_user, make_task):
    make_user()
    make_task(in_minutes=10, reminder=15)
    notifier = FakeNotifier()

    send_due_reminders(db, notifier, clock.now())
    clock.advance(minutes=1)
    replay = send_due_reminders(db, notifier, clock.now())

    assert replay.due == 0
    assert len(notifier.sent) == 1


def test_reminder_email_content(db, clock, make_user, make_task):
    make_user(email="bob@example.com")
    make_task(title="Réviser <maths>", description="chapitre 3", in_minutes=90, reminder=120)
    notifier = FakeNotifier()

    send_due_reminders(db, notifier, clock.now())

    email = notifier.sent[0]
    assert email["to"] == ["bob@example.com"]
    assert email["subject"] == "⏰ Reminder: Réviser <maths>"
    assert "Réviser &lt;maths&gt;" in email["html"]
    assert "chapitre 3" in email["html"]
    assert "1 hour(s) and 30 minute(s)" in email["html"]
    assert "Monday, October 19, 2026 at 11:30 AM" in email["html"]


def test_send_failure_keeps_task_eligible(db, clock, make_user, make_task):
    make_user(email="down@example.com")
    task = make_task(in_minutes=10, reminder=15)

    failing = FakeNotifier(fail_for=["down@example.com"])
    result = send_due_reminders(db, failing, clock.now())
    assert result.failed == [task.id]
    assert reload(db, task.id).reminder_sent is False

    # Tick suivant: l'envoi passe
    clock.advance(minutes=1)
    working = FakeNotifier()
    assert send_due_reminders(db, working, clock.now()).sent == [task.id]
    assert reload(db, task.id).reminder_sent is True


def test_one_failure_does_not_abort_batch(db, clock, make_user, make_task):
    make_user("u1", "down@example.com")
    make_user("u2", "ok@example.com")
    first = make_task(user_id="u1", in_minutes=5)
    second = make_task(user_id="u2", in_minutes=6)
    notifier = FakeNotifier(fail_for=["down@example.com"])

    result = send_due_reminders(db, notifier, clock.now())

    assert result.failed == [first.id]
    assert result.sent == [second.id]
    assert [e["to"] for e in notifier.sent] == [["ok@example.com"]]


def test_unknown_user_is_skipped(db, clock, make_user, make_task):
    make_user("known", "known@example.com")
    orphan = make_task(user_id="ghost", in_minutes=5)
    owned = make_task(user_id="known", in_minutes=6)
    notifier = FakeNotifier()

    result = send_due_reminders(db, notifier, clock.now())

    assert result.skipped == [orphan.id]
    assert result.sent == [owned.id]
    assert reload(db, orphan.id).reminder_sent is False


def test_completed_and_missed_tasks_are_excluded(db, clock, make_user, make_task):
    make_user()
    make_task(in_minutes=5, status="completed")
    make_task(in_minutes=5, status="missed")
    notifier = FakeNotifier()

    assert send_due_reminders(db, notifier, clock.now()).due == 0


def test_missed_sweep_then_reminder_sweep(db, clock, make_user, make_task):
    """pending, now-10min, reminder_sent=false → missed puis exclue des rappels"""
    make_user()
    task = make_task(in_minutes=-10, status="pending")

    assert task_service.mark_missed_tasks(db, clock.now()) == 1
    stored = reload(db, task.id)
    assert stored.status == "missed"
    assert stored.reminder_sent is False

    notifier = FakeNotifier()
    assert send_due_reminders(db, notifier, clock.now()).due == 0
    assert notifier.sent == []


def test_past_due_task_is_not_reminded(db, clock, make_user, make_task):
    """scheduled_date <= now: plus de rappel même si le statut n'a pas encore été balayé"""
    make_user()
    make_task(in_minutes=0, status="pending")
    assert send_due_reminders(db, FakeNotifier(), clock.now()).due == 0


def test_reschedule_during_send_is_not_overwritten(db, clock, make_user, make_task):
    make_user()
    task = make_task(in_minutes=10)
    seen_date = task.scheduled_date

    # L'utilisateur replanifie pendant que le sweep envoie
    task_service.update_task(db, task.id, "user-1", {"scheduled_date": seen_date + timedelta(days=1)}, clock.now())

    assert task_service.mark_reminder_sent(db, task.id, seen_date, clock.now()) is False
    assert reload(db, task.id).reminder_sent is False


def test_mark_reminder_sent_is_conditional(db, clock, make_user, make_task):
    make_user()
    task = make_task(in_minutes=10)
    assert task_service.mark_reminder_sent(db, task.id, task.scheduled_date, clock.now()) is True
    assert task_service.mark_reminder_sent(db, task.id, task.scheduled_date, clock.now()) is False


def test_run_reminder_sweep_uses_own_session(clock, session_factory, make_user, make_task):
    make_user()
    make_task(in_minutes=10)
    notifier = FakeNotifier()

    result = run_reminder_sweep(session_factory, notifier, clock)

    assert result.due == 1
    assert len(notifier.sent) == 1
