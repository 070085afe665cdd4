"""Classify raw server log lines into chat and connection events."""
from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from typing import List, Optional, Union

CHAT_RE = re.compile(r"\[INFO\] <(?P<user>[^>]+)> (?P<text>.*)$")
LOGIN_RE = re.compile(r"\[INFO\] (?P<user>\S+) \[/[^\]]*\] logged in")
LOGOUT_RE = re.compile(r"\[INFO\] (?P<user>\S+) lost connection: (?P<reason>.*)$")


@dataclass(frozen=True)
class ChatMessage:
    user: str
    text: str


@dataclass(frozen=True)
class Connected:
    user: str


@dataclass(frozen=True)
class Disconnected:
    user: str
    reason: str = ""


FeedEvent = Union[ChatMessage, Connected, Disconnected]


def parse_log_line(line: str) -> Optional[FeedEvent]:
    raw = str(line or "").rstrip("\r\n")
    match = CHAT_RE.search(raw)
    if match:
        return ChatMessage(user=match.group("user"), text=match.group("text").strip())
    match = LOGIN_RE.search(raw)
    if match:
        return Connected(user=match.group("user"))
    match = LOGOUT_RE.search(raw)
    if match:
        return Disconnected(user=match.group("user"), reason=match.group("reason").strip())
    return None


def split_command_line(text: str) -> List[str]:
    """Split command text while preserving quoted segments."""
    raw = str(text or "").strip()
    if not raw:
        return []
    try:
        return shlex.split(raw)
    except ValueError:
        # Chat often carries stray apostrophes; fall back to whitespace.
        return raw.split()
