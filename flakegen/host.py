"""An in-process host for command modules: registration, replies and logging."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, NamedTuple

APIVER_1 = 1

_LONG_LONG_MIN = -(1 << 63)
_LONG_LONG_MAX = (1 << 63) - 1
_INTEGER_RE = re.compile(r"-?[1-9][0-9]*|0")
_CRLF = b"\r\n"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "verbose": logging.INFO,
    "notice": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ModuleError(Exception):
    """Raised when the host or a module reports a failure."""


class ReplyType(IntEnum):
    """Kinds of reply a command can produce."""

    UNKNOWN = -1
    STRING = 0
    ERROR = 1
    INTEGER = 2
    ARRAY = 3
    NULL = 4


class KeyType(IntEnum):
    """Kinds of value a key can hold."""

    EMPTY = 0
    STRING = 1
    LIST = 2
    HASH = 3
    SET = 4
    ZSET = 5
    MODULE = 6


class CommandFlag(str, Enum):
    """Flags accepted when a command is registered."""

    WRITE = "write"
    READONLY = "readonly"
    ADMIN = "admin"
    DENYOOM = "deny-oom"
    DENY_SCRIPT = "deny-script"
    ALLOW_LOADING = "allow-loading"
    PUBSUB = "pubsub"
    RANDOM = "random"
    ALLOW_STALE = "allow-stale"
    NO_MONITOR = "no-monitor"
    FAST = "fast"
    GETKEYS_API = "getkeys-api"
    NO_CLUSTER = "no-cluster"


Handler = Callable[["ModuleContext", list], Any]


@dataclass(frozen=True)
class Command:
    """A command registered by a module."""

    name: str
    handler: Handler
    flags: frozenset[CommandFlag]
    first_key: int
    last_key: int
    key_step: int


class _Reply(NamedTuple):
    type: ReplyType
    value: Any


def _parse_flags(flags: str | None) -> frozenset[CommandFlag]:
    parsed = set()
    for word in (flags or "").split():
        try:
            parsed.add(CommandFlag(word.lower()))
        except ValueError:
            raise ModuleError(f"unknown command flag: {word!r}") from None
    return frozenset(parsed)


def _as_text(value: str | bytes) -> str:
    return value.decode() if isinstance(value, bytes) else value


def _check_line(text: str) -> str:
    if "\r" in text or "\n" in text:
        raise ModuleError("reply text must not contain line breaks")
    return text


def _check_long_long(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModuleError(f"not an integer: {value!r}")
    if not _LONG_LONG_MIN <= value <= _LONG_LONG_MAX:
        raise ModuleError(f"integer out of range: {value}")
    return value


def _double_reply(value: float) -> _Reply:
    return _Reply(ReplyType.STRING, format(float(value), ".17g").encode())


def _as_reply(item: Any) -> _Reply:
    if isinstance(item, _Reply):
        return item
    if item is None:
        return _Reply(ReplyType.NULL, None)
    if isinstance(item, ModuleError):
        return _Reply(ReplyType.ERROR, _check_line(str(item)))
    if isinstance(item, bool):
        return _Reply(ReplyType.INTEGER, int(item))
    if isinstance(item, int):
        return _Reply(ReplyType.INTEGER, _check_long_long(item))
    if isinstance(item, float):
        return _double_reply(item)
    if isinstance(item, str):
        return _Reply(ReplyType.STRING, item.encode())
    if isinstance(item, (bytes, bytearray)):
        return _Reply(ReplyType.STRING, bytes(item))
    if isinstance(item, (list, tuple)):
        return _Reply(ReplyType.ARRAY, tuple(_as_reply(element) for element in item))
    raise ModuleError(f"cannot reply with {type(item).__name__}")


def string_to_long_long(value: str | bytes) -> int:
    """Parse a strictly formatted signed 64-bit integer."""
    text = _as_text(value)
    if not _INTEGER_RE.fullmatch(text):
        raise ModuleError(f"value is not an integer: {text!r}")
    number = int(text)
    if not _LONG_LONG_MIN <= number <= _LONG_LONG_MAX:
        raise ModuleError(f"value is out of range: {text!r}")
    return number


def string_to_double(value: str | bytes) -> float:
    """Parse a floating point number with no surrounding spaces."""
    text = _as_text(value)
    if not text or text != text.strip() or "_" in text:
        raise ModuleError(f"value is not a valid float: {text!r}")
    try:
        number = float(text)
    except ValueError:
        raise ModuleError(f"value is not a valid float: {text!r}") from None
    if number != number:
        raise ModuleError(f"value is not a valid float: {text!r}")
    return number


def encode_reply(reply: tuple) -> bytes:
    """Encode a reply in the wire protocol."""
    kind, value = reply
    if kind == ReplyType.INTEGER:
        return b":%d" % value + _CRLF
    if kind == ReplyType.ERROR:
        return b"-" + value.encode() + _CRLF
    if kind == ReplyType.NULL:
        return b"$-1" + _CRLF
    if kind == ReplyType.STRING:
        if isinstance(value, str):
            return b"+" + value.encode() + _CRLF
        return b"$%d" % len(value) + _CRLF + value + _CRLF
    if kind == ReplyType.ARRAY:
        return b"*%d" % len(value) + _CRLF + b"".join(encode_reply(item) for item in value)
    raise ModuleError(f"cannot encode reply of type {kind!r}")


class ModuleContext:
    """The host side of a loaded module: its commands, pending replies and log."""

    def __init__(self, name: str, version: int, api_version: int) -> None:
        if api_version != APIVER_1:
            raise ModuleError(f"unsupported module API version: {api_version}")
        self.name = name
        self.version = version
        self.api_version = api_version
        self.commands: dict[str, Command] = {}
        self.state: dict[str, Any] = {}
        self.log_records: list[tuple[str, str]] = []
        self._replies: list[_Reply] = []
        self._current: str | None = None
        self._logger = logging.getLogger(f"flakegen.module.{name}")

    def create_command(
        self,
        name: str,
        handler: Handler,
        flags: str | None,
        first_key: int,
        last_key: int,
        key_step: int,
    ) -> Command:
        """Register a command under a case-insensitive name."""
        key = name.lower()
        if key in self.commands:
            raise ModuleError(f"command already exists: {name}")
        command = Command(key, handler, _parse_flags(flags), first_key, last_key, key_step)
        self.commands[key] = command
        return command

    def call(self, name: str, *args: str | bytes) -> _Reply:
        """Run a registered command and return the reply it produced."""
        command = self.commands.get(name.lower())
        if command is None:
            raise ModuleError(f"ERR unknown command '{name}'")
        start = len(self._replies)
        outer, self._current = self._current, command.name
        try:
            command.handler(self, list(args))
        finally:
            self._current = outer
        produced = self._replies[start:]
        del self._replies[start:]
        if len(produced) != 1:
            raise ModuleError(
                f"command '{command.name}' produced {len(produced)} replies instead of one"
            )
        return produced[0]

    def _push(self, reply: _Reply) -> None:
        self._replies.append(reply)

    def reply_with_long_long(self, value: int) -> None:
        """Reply with a signed 64-bit integer."""
        self._push(_Reply(ReplyType.INTEGER, _check_long_long(value)))

    def reply_with_double(self, value: float) -> None:
        """Reply with a floating point number, sent as a string."""
        self._push(_double_reply(value))

    def reply_with_simple_string(self, message: str) -> None:
        """Reply with a single-line status string."""
        self._push(_Reply(ReplyType.STRING, _check_line(message)))

    def reply_with_string(self, value: str | bytes) -> None:
        """Reply with a binary-safe string."""
        data = value.encode() if isinstance(value, str) else bytes(value)
        self._push(_Reply(ReplyType.STRING, data))

    def reply_with_error(self, message: str) -> None:
        """Reply with an error message."""
        self._push(_Reply(ReplyType.ERROR, _check_line(message)))

    def reply_with_null(self) -> None:
        """Reply with a null value."""
        self._push(_Reply(ReplyType.NULL, None))

    def reply_with_array(self, items: Iterable[Any]) -> None:
        """Reply with an array of replies or plain values."""
        self._push(_as_reply(list(items)))

    def wrong_arity(self) -> None:
        """Reply with the standard wrong-arity error for the running command."""
        if self._current is None:
            raise ModuleError("no command is running")
        self.reply_with_error(
            f"ERR wrong number of arguments for '{self._current}' command"
        )

    def take_replies(self) -> list[_Reply]:
        """Return the replies pending outside of any call and clear them."""
        replies, self._replies = self._replies, []
        return replies

    def log(self, level: str, message: str) -> None:
        """Record a log message at the given level."""
        self.log_records.append((level, message))
        self._logger.log(_LOG_LEVELS.get(level.lower(), logging.INFO), message)