# tests/test_cli.py
"""
End-to-end runs of the command line: one-shot mode and a scripted REPL.
"""

from __future__ import annotations

import builtins
import os
import re
import signal
import subprocess
import sys
import time

import pytest

from primefinder.cli import main
from primefinder.fmt import strip_ansi


def _run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def _script(monkeypatch, lines):
    feed = iter(lines)
    monkeypatch.setattr(builtins, "input", lambda prompt="": next(feed))


# ---------- one-shot ----------------------------------------------------------

def test_prime(capsys):
    code, out, _ = _run(capsys, "97")
    assert code == 0
    assert "97 is a prime number." in out


def test_composite_shows_prime_factors(capsys):
    code, out, _ = _run(capsys, "360")
    assert code == 0
    assert "360 is not a prime number." in out
    assert "Prime factors: 2 × 2 × 2 × 3 × 3 × 5" in out


def test_expand_lists_all_factors(capsys):
    code, out, _ = _run(capsys, "28", "--expand")
    assert code == 0
    assert "All factors of 28" in out
    for d in ("2", "4", "7", "14"):
        assert f". {d}" in out


def test_expand_prime_has_nothing_to_list(capsys):
    code, out, _ = _run(capsys, "13", "--expand")
    assert code == 0
    assert "no factors to list" in out


def test_profile_then_number(capsys):
    code, out, _ = _run(capsys, "debug", "1234567")
    assert code == 0
    assert "1_234_567 is not a prime number." in out
    assert "Prime factors: 127 * 9_721" in out


@pytest.mark.parametrize("arg", ["0", "-5", "18446744073709551615", "12,34"])
def test_invalid_number_exits_2(capsys, arg):
    code, _, err = _run(capsys, arg)
    assert code == 2
    assert "Invalid input:" in err


def test_unknown_profile_exits_2(capsys):
    code, out, _ = _run(capsys, "nosuchprofile")
    assert code == 2
    assert "Unknown profile: 'nosuchprofile'" in out
    assert "default" in out


def test_where(capsys, isolated_workspace):
    code, out, _ = _run(capsys, "where")
    assert code == 0
    assert str(isolated_workspace.resolve()) in out


def test_init_overwrite_requires_dev_flag(capsys, monkeypatch):
    monkeypatch.delenv("PRIMEFINDER_DEV", raising=False)
    code, out, _ = _run(capsys, "init", "overwrite")
    assert code == 2
    assert "Refusing to overwrite" in out


# ---------- REPL --------------------------------------------------------------

def test_repl_navigation_and_history(capsys, monkeypatch):
    _script(monkeypatch, ["28", "e", "#2", "n", "b", "hist", "q"])
    code = main([])
    out, _ = capsys.readouterr()

    assert code == 0
    assert "28 is not a prime number." in out
    assert "All factors of 28" in out
    assert "4 is not a prime number." in out       # #2 -> 4
    assert "5 is a prime number." in out           # next prime after 4
    assert "3 is a prime number." in out           # previous prime before 5
    assert "It is a Mersenne prime (2^2 - 1)." in out
    plain = strip_ansi(out)
    # newest first: 3, 5, 4, 28
    assert re.search(r"^\s+1\s+\d\d:\d\d:\d\d\s+3\s+3 is a prime number\.$", plain, re.M)
    assert re.search(r"^\s+4\s+\d\d:\d\d:\d\d\s+28\s+28 is not a prime number\.$", plain, re.M)


def test_repl_bad_input_keeps_going(capsys, monkeypatch):
    _script(monkeypatch, ["0", "#9", "banana", "7", "quit"])
    code = main([])
    out, err = capsys.readouterr()

    assert code == 0
    assert "0 is not a positive integer." in err
    assert "no factor #9" in err
    assert "'banana'. Type H for help." in out
    assert "7 is a prime number." in out


def test_repl_no_previous_prime(capsys, monkeypatch):
    _script(monkeypatch, ["2", "b", "q"])
    main([])
    out, _ = capsys.readouterr()
    assert "There is no prime below 2." in out


def test_repl_profile_switch_and_history_clear(capsys, monkeypatch):
    _script(monkeypatch, ["1000", "debug", "1000", "hist clear", "hist", "q"])
    main([])
    out, _ = capsys.readouterr()
    assert "1,000 is not a prime number." in out
    assert "Applied profile: debug" in out
    assert "1_000 is not a prime number." in out
    assert "History cleared." in out
    assert "History is empty." in out


def test_repl_ends_on_eof(capsys, monkeypatch):
    def eof(prompt=""):
        raise EOFError

    monkeypatch.setattr(builtins, "input", eof)
    assert main([]) == 0


def test_repl_workspace_commands(capsys, monkeypatch, isolated_workspace):
    _script(monkeypatch, ["where", "init", "init overwrite", "q"])
    monkeypatch.delenv("PRIMEFINDER_DEV", raising=False)
    main([])
    out, _ = capsys.readouterr()
    assert f"Workspace: {isolated_workspace.resolve()}" in out
    assert "Workspace ready at:" in out
    assert "Copied -> profiles: 0" in out  # already seeded on start
    assert "Refusing to overwrite" in out
    assert "Invalid input" not in out


def test_repl_init_overwrite_with_dev_flag(capsys, monkeypatch, isolated_workspace):
    monkeypatch.setenv("PRIMEFINDER_DEV", "1")
    _script(monkeypatch, ["init overwrite", "q"])
    main([])
    out, _ = capsys.readouterr()
    assert "(overwrote existing files)" in out
    assert "Copied -> profiles: 2" in out


def test_repl_debug_choice_survives_profile_switch(capsys, monkeypatch):
    _script(monkeypatch, ["debug on", "default", "debug status", "debug off", "debug", "debug status", "q"])
    main([])
    out, _ = capsys.readouterr()
    statuses = re.findall(r"Debug is currently (ON|OFF)\.", out)
    assert statuses == ["ON", "OFF"]
    assert "Applied profile: debug" in out


# ---------- Ctrl-C ------------------------------------------------------------

_SLOW_COMPOSITE = str(2**62)  # ~2^31 trial divisions to list its factors


def _spawn(args, workspace, **kw):
    env = dict(os.environ, PRIMEFINDER_HOME=str(workspace), PYTHONUNBUFFERED="1", PYTHONIOENCODING="utf-8")
    return subprocess.Popen(
        [sys.executable, "-m", "primefinder.cli", *args],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        env=env,
        **kw,
    )


def _read_until(proc, marker):
    for _ in range(20):
        line = proc.stdout.readline()
        if marker in line or not line:
            return line
    return ""


def _finish(proc, **kw):
    try:
        return proc.communicate(timeout=15, **kw)
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.communicate()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_ctrl_c_during_one_shot_expand_exits(tmp_path):
    proc = _spawn([_SLOW_COMPOSITE, "--expand"], tmp_path / "ws")
    assert "is not a prime number" in _read_until(proc, "is not a prime number")
    time.sleep(0.5)
    proc.send_signal(signal.SIGINT)

    out, _ = _finish(proc)
    assert proc.returncode == 130
    assert "Cancelled." in out


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
def test_quit_after_cancelled_expand_exits(tmp_path):
    proc = _spawn([], tmp_path / "ws", stdin=subprocess.PIPE)
    proc.stdin.write(f"{_SLOW_COMPOSITE}\ne\n")
    proc.stdin.flush()
    assert "is not a prime number" in _read_until(proc, "is not a prime number")
    time.sleep(0.5)
    proc.send_signal(signal.SIGINT)

    out, _ = _finish(proc, input="q\n")
    assert proc.returncode == 0
    assert "Cancelled." in out


def test_repl_rejects_negative_threshold_profile(capsys, monkeypatch, isolated_workspace):
    profiles = isolated_workspace / "profiles"
    profiles.mkdir(parents=True)
    (profiles / "broken.toml").write_text("[CONTROLLER]\nSLOW_THRESHOLD_S = -1\n", encoding="utf-8")
    _script(monkeypatch, ["broken", "28", "e", "q"])
    code = main([])
    out, err = capsys.readouterr()
    assert code == 0
    assert "bad CONTROLLER.SLOW_THRESHOLD_S" in err
    assert "Applied profile: broken" not in out
    assert "All factors of 28" in out
