"""Tests for the cancellation token and the interactive quit wait."""

from __future__ import annotations

import io
import os
import threading

import pytest

from apimock.cancellation import CancellationToken
from apimock.interactive import InteractiveSession, SessionState, TerminalKeySource
from apimock.models import QuitReason

from conftest import ScriptedKeySource


# ---------------------------------------------------------------------------
# CancellationToken
# ---------------------------------------------------------------------------


class TestCancellationToken:
    def test_first_fire_wins(self) -> None:
        token = CancellationToken()
        assert token.fire(QuitReason.PROCESS_EXITED) is True
        assert token.fire(QuitReason.OPERATOR) is False
        assert token.reason is QuitReason.PROCESS_EXITED

    def test_unfired(self) -> None:
        token = CancellationToken()
        assert not token.is_set()
        assert token.reason is None
        assert token.wait(0.01) is False

    def test_concurrent_fires_count_once(self) -> None:
        token = CancellationToken()
        results: list[bool] = []
        barrier = threading.Barrier(8)

        def _fire() -> None:
            barrier.wait()
            results.append(token.fire(QuitReason.OPERATOR))

        threads = [threading.Thread(target=_fire) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1


# ---------------------------------------------------------------------------
# InteractiveSession
# ---------------------------------------------------------------------------


class TestWaitForQuit:
    def test_q_fires_token_and_returns(self) -> None:
        keys = ScriptedKeySource(["x", None, "Q", "q"])
        token = CancellationToken()
        session = InteractiveSession(keys, poll_interval=0.01)

        reason = session.wait_for_quit(token)

        assert reason is QuitReason.OPERATOR
        assert token.reason is QuitReason.OPERATOR
        assert keys.reads == 4
        assert keys.entered and keys.exited
        assert session.state is SessionState.DONE

    def test_other_keys_do_nothing(self) -> None:
        token = CancellationToken()

        def _stop_after_script(reads: int) -> None:
            if reads > 5:
                token.fire(QuitReason.PROCESS_EXITED)

        keys = ScriptedKeySource(["a", "\x1b", " ", "\n", "Q"], on_read=_stop_after_script)

        reason = InteractiveSession(keys, poll_interval=0.01).wait_for_quit(token)

        assert reason is QuitReason.PROCESS_EXITED

    def test_external_abort_reported(self) -> None:
        token = CancellationToken()
        keys = ScriptedKeySource(on_read=lambda n: token.fire(QuitReason.PROCESS_EXITED))

        reason = InteractiveSession(keys, poll_interval=0.01).wait_for_quit(token)

        assert reason is QuitReason.PROCESS_EXITED
        assert keys.reads == 1

    def test_already_fired_returns_without_reading(self) -> None:
        token = CancellationToken()
        token.fire(QuitReason.PROCESS_EXITED)
        keys = ScriptedKeySource(["q"])

        assert InteractiveSession(keys).wait_for_quit(token) is QuitReason.PROCESS_EXITED
        assert keys.reads == 0

    def test_q_after_abort_is_ignored(self) -> None:
        token = CancellationToken()

        def _abort_then_q(reads: int) -> None:
            token.fire(QuitReason.PROCESS_EXITED)

        keys = ScriptedKeySource(["q"], on_read=_abort_then_q)

        assert InteractiveSession(keys).wait_for_quit(token) is QuitReason.PROCESS_EXITED

    def test_keyboard_interrupt(self) -> None:
        def _interrupt(reads: int) -> None:
            raise KeyboardInterrupt

        keys = ScriptedKeySource(on_read=_interrupt)
        token = CancellationToken()

        assert InteractiveSession(keys).wait_for_quit(token) is QuitReason.INTERRUPTED
        assert keys.exited


# ---------------------------------------------------------------------------
# TerminalKeySource on a pipe
# ---------------------------------------------------------------------------


class TestTerminalKeySource:
    @pytest.fixture()
    def pipe(self):
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "r")
        yield reader, write_fd
        reader.close()
        try:
            os.close(write_fd)
        except OSError:
            pass

    def test_reads_single_keys(self, pipe) -> None:
        reader, write_fd = pipe
        os.write(write_fd, b"xq")

        with TerminalKeySource(reader) as keys:
            assert keys.read_key(0.5) == "x"
            assert keys.read_key(0.5) == "q"
            assert keys.read_key(0.01) is None

    def test_eof_returns_none(self, pipe) -> None:
        reader, write_fd = pipe
        os.close(write_fd)

        with TerminalKeySource(reader) as keys:
            assert keys.read_key(0.01) is None
            assert keys.read_key(0.01) is None

    @pytest.mark.parametrize("make_stream", [io.StringIO, object], ids=["no-fileno", "no-stream"])
    def test_stream_without_fd_acts_like_eof(self, make_stream) -> None:
        with TerminalKeySource(make_stream()) as keys:
            assert keys.read_key(0.01) is None
            assert keys.read_key(0.01) is None

    def test_closed_stream_still_waits_for_token(self, pipe) -> None:
        reader, _ = pipe
        reader.close()
        token = CancellationToken()
        threading.Timer(0.05, token.fire, args=(QuitReason.PROCESS_EXITED,)).start()

        reason = InteractiveSession(TerminalKeySource(reader), poll_interval=0.01).wait_for_quit(token)

        assert reason is QuitReason.PROCESS_EXITED

    def test_requires_context_manager(self, pipe) -> None:
        reader, _ = pipe
        with pytest.raises(RuntimeError):
            TerminalKeySource(reader).read_key(0.01)

    def test_quit_from_pipe(self, pipe) -> None:
        reader, write_fd = pipe
        os.write(write_fd, b"hello q")
        token = CancellationToken()

        reason = InteractiveSession(TerminalKeySource(reader), poll_interval=0.05).wait_for_quit(token)

        assert reason is QuitReason.OPERATOR
