import io
import re

import pytest

from reactornet.logger import (
    FatalError,
    Logger,
    LogLevel,
    log_debug,
    log_error,
    log_fatal,
    log_info,
)

LINE = re.compile(r"^\[(\w+)\]\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{6} : (.*)$", re.S)


def test_instance_is_singleton(capsys):
    Logger.instance().set_log_level(LogLevel.ERROR)
    Logger.instance().log("shared")
    out = capsys.readouterr().out
    assert out.startswith("[ERROR]")
    assert out.endswith(" : shared\n")


def test_log_info_format(capsys):
    log_info("value %d", 5)
    out = capsys.readouterr().out
    match = LINE.match(out)
    assert match is not None
    assert match.group(1) == "INFO"
    assert match.group(2) == "value 5\n"


def test_log_error_prefix(capsys):
    log_error("bad %s", "thing")
    out = capsys.readouterr().out
    assert out.startswith("[ERROR]")
    assert out.endswith(" : bad thing\n")


def test_log_fatal_logs_and_raises(capsys):
    with pytest.raises(FatalError, match="boom 3"):
        log_fatal("boom %d\n", 3)
    assert capsys.readouterr().out.startswith("[FATAL]")


def test_log_debug_silent_by_default(capsys):
    log_debug("hidden %d", 1)
    assert capsys.readouterr().out == ""


def test_log_debug_when_enabled(capsys, monkeypatch):
    monkeypatch.setattr(Logger.instance(), "debug_enabled", True)
    log_debug("shown %d", 2)
    out = capsys.readouterr().out
    assert out.startswith("[DEBUG]")
    assert out.endswith(" : shown 2\n")


def test_message_without_args_is_not_formatted(capsys):
    log_info("100% done")
    assert capsys.readouterr().out.endswith(" : 100% done\n")


def test_message_is_truncated(capsys):
    log_info("x" * 5000)
    out = capsys.readouterr().out
    body = out.split(" : ", 1)[1]
    assert body == "x" * 1023 + "\n"


def test_private_logger_with_stream_and_unknown_level():
    stream = io.StringIO()
    logger = Logger(stream)
    logger.set_log_level(99)
    logger.log("plain")
    prefix, body = stream.getvalue().split(" : ", 1)
    assert body == "plain\n"
    assert prefix[0] != "["
    assert len(prefix) == len("2000/01/01 00:00:00.000000")


def test_level_prefixes_follow_declaration_order():
    stream = io.StringIO()
    logger = Logger(stream)
    prefixes = []
    for level in LogLevel:
        logger.set_log_level(level)
        logger.log("m")
    for line in stream.getvalue().splitlines():
        prefixes.append(line.split("]", 1)[0] + "]")
    assert prefixes == ["[INFO]", "[ERROR]", "[FATAL]", "[DEBUG]"]