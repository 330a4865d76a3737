from __future__ import annotations

import threading

from serial_guard.watch import ManualScheduler, ThreadingScheduler


def test_manual_scheduler_runs_due_tasks_in_deadline_order() -> None:
    scheduler = ManualScheduler()
    ran: list[tuple[str, float]] = []
    scheduler.schedule(200, lambda: ran.append(("late", scheduler.now())))
    scheduler.schedule(100, lambda: ran.append(("early", scheduler.now())))

    assert scheduler.advance(150) == 1
    assert scheduler.advance(100) == 1
    assert ran == [("early", 100), ("late", 200)]
    assert scheduler.now() == 250


def test_manual_scheduler_skips_cancelled_tasks() -> None:
    scheduler = ManualScheduler()
    ran: list[str] = []
    handle = scheduler.schedule(10, lambda: ran.append("x"))
    handle.cancel()

    assert scheduler.pending() == 0
    assert scheduler.advance(20) == 0
    assert ran == []


def test_manual_scheduler_runs_tasks_scheduled_by_tasks_within_the_window() -> None:
    scheduler = ManualScheduler()
    ran: list[float] = []

    def first() -> None:
        scheduler.schedule(50, lambda: ran.append(scheduler.now()))

    scheduler.schedule(10, first)

    assert scheduler.advance(100) == 2
    assert ran == [60]


def test_threading_scheduler_runs_task_off_thread() -> None:
    scheduler = ThreadingScheduler()
    done = threading.Event()
    scheduler.schedule(1, done.set)

    assert done.wait(timeout=5)
    scheduler.shutdown()


def test_threading_scheduler_shutdown_cancels_outstanding_tasks() -> None:
    scheduler = ThreadingScheduler()
    ran = threading.Event()
    handle = scheduler.schedule(60_000, ran.set)

    assert scheduler.pending() == 1
    scheduler.shutdown()

    assert handle.cancelled
    assert scheduler.pending() == 0
    late = scheduler.schedule(1, ran.set)
    assert late.cancelled
