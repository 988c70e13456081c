# gtp_engine.py
# Drives an external Go engine (KataGo, GNU Go, ...) over GTP on stdin/stdout
# and exposes it as a move-suggestion service.
import os
import queue
import subprocess
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from gorules.goban_model import Board, format_vertex
from gorules.suggest import MoveOrSignal, from_vertex

DEBUG = False


class GtpError(Exception):
    """The engine answered a command with '?'."""


@dataclass
class EngineConfig:
    binary_path: str
    start_option: Optional[str] = None
    model_file: Optional[str] = None
    config_file: Optional[str] = None
    threads: Optional[int] = None
    extra_args: List[str] = field(default_factory=list)
    working_dir: Optional[str] = None
    env: Optional[Dict[str, str]] = None

    def command(self) -> List[str]:
        cmd = [self.binary_path]
        if self.start_option:
            cmd += [self.start_option]
        if self.model_file:
            cmd += ["-model", self.model_file]
        if self.config_file:
            cmd += ["-config", self.config_file]
        if self.threads:
            cmd += ["-threads", str(self.threads)]
        cmd += list(self.extra_args)
        return cmd


class GtpEngine:
    def __init__(self, cfg: EngineConfig, command_timeout: float = 60.0):
        self.cfg = cfg
        self.command_timeout = command_timeout
        self._proc: Optional[subprocess.Popen] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._command_lock = threading.Lock()
        self._responses: "queue.Queue[Optional[List[str]]]" = queue.Queue()
        self._stale = 0
        self._log_lines: List[str] = []
        self._log_lock = threading.Lock()

        self.on_log_line: Optional[Callable[[str], None]] = None

    def _append_log(self, line: str):
        with self._log_lock:
            self._log_lines.append(line)
        if DEBUG:
            print("[GtpEngine]", line)
        if self.on_log_line:
            self.on_log_line(line)

    @property
    def log_lines(self) -> List[str]:
        with self._log_lock:
            return list(self._log_lines)

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    # -------------------------
    # lifecycle
    # -------------------------
    def start(self) -> None:
        if self._proc is not None:
            return
        env = os.environ.copy()
        if self.cfg.env:
            env.update(self.cfg.env)
        try:
            self._proc = subprocess.Popen(
                self.cfg.command(), stdin=subprocess.PIPE, stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT, cwd=self.cfg.working_dir, env=env,
                bufsize=1, universal_newlines=True
            )
        except OSError as e:
            self._append_log(f"Failed to start engine: {e}")
            raise
        self._responses = queue.Queue()
        self._stale = 0
        self._reader_thread = threading.Thread(target=self._reader_loop, args=(self._proc, self._responses), daemon=True)
        self._reader_thread.start()
        self._append_log("Engine started")

    def stop(self, timeout: float = 2.0) -> None:
        """Ask the engine to quit, then terminate or kill it if it lingers."""
        proc = self._proc
        if proc is None:
            return
        try:
            if proc.poll() is None and proc.stdin:
                try:
                    proc.stdin.write("quit\n")
                    proc.stdin.flush()
                    self._append_log("quit")
                except OSError:
                    pass
            try:
                proc.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                proc.terminate()
                self._append_log("terminating the process")
                try:
                    proc.wait(timeout=timeout)
                except subprocess.TimeoutExpired:
                    proc.kill()
                    self._append_log("killing the process")
                    proc.wait()
        finally:
            if proc.stdin:
                try:
                    proc.stdin.close()
                except OSError:
                    pass
            self._proc = None
            self._append_log("Engine stopped")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc):
        self.stop()

    def _reader_loop(self, proc: subprocess.Popen, responses: queue.Queue):
        # A GTP response starts with '=' or '?' and ends with an empty line.
        # Anything outside a response (engine chatter on stderr) is only logged.
        current: Optional[List[str]] = None
        try:
            for raw_line in proc.stdout:
                line = raw_line.rstrip("\r\n")
                self._append_log(line)
                if current is None:
                    if line[:1] in ("=", "?"):
                        current = [line]
                elif line.strip() == "":
                    responses.put(current)
                    current = None
                else:
                    current.append(line)
        except (OSError, ValueError) as e:
            self._append_log(f"Reader loop error: {e}")
        finally:
            if current is not None:
                responses.put(current)
            # wake up a waiting command
            responses.put(None)

    # -------------------------
    # commands
    # -------------------------
    def _wait_response(self, timeout: float) -> List[str]:
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise queue.Empty
            resp = self._responses.get(timeout=remaining)
            if resp is None:
                raise RuntimeError("Engine exited")
            if self._stale:
                # answer to a command that already timed out
                self._stale -= 1
                continue
            return resp

    def send_command(self, command: str, timeout: Optional[float] = None) -> str:
        """Send one GTP command and return the response text without the '=' marker."""
        if self._proc is None or self._proc.stdin is None:
            raise RuntimeError("Engine not running")
        if timeout is None:
            timeout = self.command_timeout
        with self._command_lock:
            try:
                self._proc.stdin.write(command.strip() + "\n")
                self._proc.stdin.flush()
            except OSError as e:
                self._append_log(f"Failed to write to engine stdin: {e}")
                raise RuntimeError("Engine not running") from e
            try:
                resp = self._wait_response(timeout)
            except queue.Empty:
                self._stale += 1
                raise TimeoutError(f"No answer to {command!r} within {timeout}s") from None
        status, first = resp[0][0], resp[0][1:].strip()
        text = "\n".join([first] + resp[1:]).strip()
        if status == "?":
            raise GtpError(f"{command}: {text}")
        return text

    def boardsize(self, size: int):
        self.send_command(f"boardsize {size}")

    def clear_board(self):
        self.send_command("clear_board")

    def komi(self, komi: float):
        self.send_command(f"komi {komi}")

    def play(self, color: str, vertex: str):
        self.send_command(f"play {color} {vertex}")

    def genmove(self, color: str) -> str:
        return self.send_command(f"genmove {color}").lower()

    def set_position(self, board: Board, komi: Optional[float] = None):
        """
        Load `board` into the engine stone by stone. Every group of a legal
        position has a liberty, so no placement order captures anything.
        """
        self.boardsize(board.size)
        self.clear_board()
        if komi is not None:
            self.komi(komi)
        for (x, y), color in board.stones():
            self.play(color, format_vertex(x, y, board.size))


class GtpSuggester:
    """Move-suggestion service backed by a running GtpEngine."""

    def __init__(self, engine: GtpEngine, komi: Optional[float] = None):
        self.engine = engine
        self.komi = komi

    def suggest_move(self, board: Board, player: str,
                     last_move: Optional[Tuple[int, int]] = None) -> MoveOrSignal:
        self.engine.set_position(board, self.komi)
        return from_vertex(self.engine.genmove(player), board.size)

    __call__ = suggest_move
