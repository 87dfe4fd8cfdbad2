"""Media player abstractions: playback state, metadata and progress."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, TypeVar


class PlaybackStatus(Enum):
    STOPPED = auto()
    PAUSED = auto()
    PLAYING = auto()


class PlayerEvent(Enum):
    """Reasons a player's state should be refreshed."""

    SEEKED = auto()
    PROPERTIES = auto()
    TIMER = auto()


class Metadata(ABC):
    """Information about the track that is currently loaded."""

    @abstractmethod
    def title(self) -> str:
        """The track title; raise if it is unknown."""

    @abstractmethod
    def artists(self) -> str:
        """The artists, joined into one string; raise if unknown."""

    @abstractmethod
    def length(self) -> int:
        """The track length in microseconds; raise if unknown."""


M = TypeVar("M", bound=Metadata)


@dataclass
class Progress(Generic[M]):
    """A snapshot of a player: what is playing, where, and whether it plays."""

    metadata: M
    position: int
    status: PlaybackStatus


class Player(ABC):
    """A media player that can be queried asynchronously."""

    @abstractmethod
    async def metadata(self) -> Metadata:
        """Metadata of the current track."""

    @abstractmethod
    async def position(self) -> int:
        """Playback position in microseconds."""

    @abstractmethod
    async def name(self) -> str:
        """A human readable name of the player."""

    @abstractmethod
    async def playback_status(self) -> PlaybackStatus:
        """Whether the player is playing, paused or stopped."""

    async def progress(self) -> Progress[Metadata]:
        """Query metadata, position and status, in that order."""
        metadata = await self.metadata()
        position = await self.position()
        status = await self.playback_status()
        return Progress(metadata=metadata, position=position, status=status)