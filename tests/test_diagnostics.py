from __future__ import annotations

import asyncio
import re
import sys
import threading

import httpx
from fastapi.testclient import TestClient

from conftest import chat_completion, make_settings
from src.config.exceptions import install_process_handlers
from src.config.logging import DiagnosticLog
from src.main import create_app

TIMESTAMPED = re.compile(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\] ")


def test_relay_appends_timestamped_lines(tmp_path, upstream) -> None:  # type: ignore[no-untyped-def]
    log_file = tmp_path / "server.log"
    upstream.queue(httpx.Response(200, json=chat_completion("hello")))
    app = create_app(
        make_settings(groq_api_key="gsk_test", log_file=str(log_file)),
        transport=httpx.MockTransport(upstream.handler),
    )

    TestClient(app).post(
        "/api/assistant",
        json={"messages": [{"role": "user", "content": "say hello"}]},
    )

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines
    assert all(TIMESTAMPED.match(line) for line in lines)
    text = "\n".join(lines)
    assert "[proxy] incoming request provider= groq" in text
    assert "[proxy] first message snippet: say hello" in text
    assert "[proxy] reply length: 5" in text
    assert "gsk_test" not in text


def test_unwritable_log_does_not_affect_response(tmp_path, upstream) -> None:  # type: ignore[no-untyped-def]
    upstream.queue(httpx.Response(200, json=chat_completion("still fine")))
    app = create_app(
        make_settings(
            groq_api_key="gsk_test",
            log_file=str(tmp_path / "missing-dir" / "server.log"),
        ),
        transport=httpx.MockTransport(upstream.handler),
    )

    response = TestClient(app).post(
        "/api/assistant",
        json={"messages": [{"role": "user", "content": "hi"}]},
    )

    assert response.status_code == 200
    assert response.json()["reply"] == "still fine"


def test_write_formats_non_string_parts(tmp_path) -> None:  # type: ignore[no-untyped-def]
    log_file = tmp_path / "diag.log"
    log = DiagnosticLog(str(log_file))

    log.write("status=", 404, "ok=", False, {"model": "m"}, object())

    line = log_file.read_text(encoding="utf-8").splitlines()[-1]
    assert 'status= 404 ok= false {"model": "m"} <object object at' in line


def test_process_handlers_log_uncaught_exceptions(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    log_file = tmp_path / "process.log"
    restore = install_process_handlers(DiagnosticLog(str(log_file)))

    sys.excepthook(ValueError, ValueError("boom"), None)
    worker = threading.Thread(target=lambda: 1 / 0)
    worker.start()
    worker.join()
    restore()

    text = log_file.read_text(encoding="utf-8")
    assert "UncaughtException: boom" in text
    assert "UncaughtException: division by zero" in text
    assert "ZeroDivisionError" in text


def test_process_handlers_restore_previous_hooks(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    def _previous_hook(*args) -> None:  # type: ignore[no-untyped-def]
        pass

    monkeypatch.setattr(sys, "excepthook", _previous_hook)
    monkeypatch.setattr(threading, "excepthook", _previous_hook)

    restore = install_process_handlers(DiagnosticLog(str(tmp_path / "p.log")))
    assert sys.excepthook is not _previous_hook
    restore()

    assert sys.excepthook is _previous_hook
    assert threading.excepthook is _previous_hook


def test_loop_exception_handler_logs_unhandled_errors(tmp_path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    log_file = tmp_path / "loop.log"

    async def _scenario():  # type: ignore[no-untyped-def]
        restore = install_process_handlers(DiagnosticLog(str(log_file)))
        loop = asyncio.get_running_loop()
        try:
            raise RuntimeError("lost task")
        except RuntimeError as exc:
            loop.call_exception_handler(
                {"message": "Task exception was never retrieved", "exception": exc}
            )
        loop.call_exception_handler({"message": "socket went away"})
        restore()
        return loop.get_exception_handler()

    assert asyncio.run(_scenario()) is None

    text = log_file.read_text(encoding="utf-8")
    assert "UnhandledRejection: lost task" in text
    assert "RuntimeError" in text
    assert "UnhandledRejection: socket went away" in text


def test_diagnostic_logs_are_isolated(tmp_path) -> None:  # type: ignore[no-untyped-def]
    first_file = tmp_path / "a.log"
    second_file = tmp_path / "b.log"

    first = DiagnosticLog(str(first_file))
    DiagnosticLog("").write("only-for-disabled-log")
    DiagnosticLog(str(second_file)).write("only-for-b")
    first.write("only-for-a")

    first_text = first_file.read_text(encoding="utf-8")
    second_text = second_file.read_text(encoding="utf-8")
    assert "only-for-a" in first_text
    assert "only-for-b" not in first_text
    assert "only-for-disabled-log" not in first_text
    assert second_text.count("\n") == 1
    assert "only-for-b" in second_text


def test_closed_log_stops_writing_to_file(tmp_path) -> None:  # type: ignore[no-untyped-def]
    log_file = tmp_path / "closed.log"
    log = DiagnosticLog(str(log_file))
    log.write("before close")
    log.close()

    log.write("after close")

    text = log_file.read_text(encoding="utf-8")
    assert "before close" in text
    assert "after close" not in text


def test_multiline_event_stays_on_one_line(tmp_path) -> None:  # type: ignore[no-untyped-def]
    log_file = tmp_path / "multi.log"

    DiagnosticLog(str(log_file)).write("[proxy] handler exception:", "first\nsecond")

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert TIMESTAMPED.match(lines[0])
    assert lines[0].endswith("first\\nsecond")
