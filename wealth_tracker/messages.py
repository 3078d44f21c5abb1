"""Feedback returned next to service results.

Operations that refuse bad input (unknown ticker, missing price, short
holdings, malformed backups) report why through these messages instead of
raising; the host decides how to render them.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MessageLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ServiceMessage:
    level: MessageLevel
    text: str


def info(text: str) -> ServiceMessage:
    return ServiceMessage(MessageLevel.INFO, text)


def warning(text: str) -> ServiceMessage:
    return ServiceMessage(MessageLevel.WARNING, text)


def error(text: str) -> ServiceMessage:
    return ServiceMessage(MessageLevel.ERROR, text)
