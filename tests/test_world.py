from __future__ import annotations

from autoshutdown.world import ConsoleWorld


def test_console_world_prints_broadcasts() -> None:
    lines: list[str] = []
    world = ConsoleWorld(output=lines.append)

    world.broadcast("hello")

    assert lines == ["hello"]
    assert world.exit_code is None


def test_shutdown_countdown_sets_exit_code() -> None:
    lines: list[str] = []
    world = ConsoleWorld(output=lines.append)

    world.request_shutdown(2, 3)
    world.update(1500)
    assert world.shutdown_pending
    assert world.exit_code is None

    world.update(500)
    assert not world.shutdown_pending
    assert world.exit_code == 3
    assert lines == ["Server shutdown in 2 seconds"]


def test_zero_delay_shutdown_exits_immediately() -> None:
    world = ConsoleWorld(output=lambda _: None)

    world.request_shutdown(0, 0)

    assert world.exit_code == 0


def test_cancel_pending_shutdown() -> None:
    lines: list[str] = []
    world = ConsoleWorld(output=lines.append)
    world.cancel_pending_shutdown()
    assert lines == []

    world.request_shutdown(60, 0)
    world.cancel_pending_shutdown()
    world.update(120_000)

    assert world.exit_code is None
    assert lines[-1] == "Server shutdown cancelled"
