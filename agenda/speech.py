# -*- coding: utf-8 -*-
"""Speech notification sinks for reminders."""
from __future__ import annotations

import typing as t
from dataclasses import dataclass, field

from rich.console import Console


class Speaker(t.Protocol):
    """Fire-and-forget spoken notification."""

    def speak(self, utterance: str, locale: str) -> None:
        ...


class ConsoleSpeaker:
    """Announces reminders on the terminal, ringing the bell."""

    def __init__(self, console: t.Optional[Console] = None) -> None:
        self.console = console or Console()

    def speak(self, utterance: str, locale: str) -> None:
        self.console.bell()
        self.console.print(f"🔔 [bold magenta]{utterance}[/bold magenta] [dim]({locale})[/dim]")


@dataclass
class RecordingSpeaker:
    """Collects utterances instead of speaking them."""
    spoken: list[tuple[str, str]] = field(default_factory=list)

    def speak(self, utterance: str, locale: str) -> None:
        self.spoken.append((utterance, locale))
