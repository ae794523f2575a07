"""Dictation as an async stream of transcript events.

A `RecognitionSource` is whatever does the actual listening. It is started
with a `TranscriptSubscription` and reports into it through `push`, `fail`
and `ended`. The consumer iterates the subscription and calls `cancel` when
it has heard enough. All calls are expected on the event loop's thread.
"""

import asyncio
import logging
from typing import Protocol, Self


logger = logging.getLogger(__name__)


SPEECH_ERRORS = {
    "not-allowed": (
        "Microphone access denied. Please enable it in your settings "
        "or type the recipe instead."
    ),
    "no-speech": "No speech detected. Please try again and speak clearly.",
    "network": "Network error. Speech recognition requires an internet connection.",
}


class SpeechError(Exception):
    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(SPEECH_ERRORS.get(code, f"Speech recognition error: {code}"))


class TranscriptEvent:
    def __init__(self, text: str, *, final: bool = False) -> None:
        self.text = text
        self.final = final

    def __repr__(self) -> str:
        return f"<TranscriptEvent(text={self.text!r}, final={self.final})>"


class RecognitionSource(Protocol):
    def start(self, subscription: "TranscriptSubscription") -> None:
        ...

    def stop(self) -> None:
        ...


_END = object()


class TranscriptSubscription:
    def __init__(
        self,
        source: RecognitionSource,
        *,
        restart_on_end: bool = True,
    ) -> None:
        self.source = source
        # Recognisers tend to stop after a pause. Keep listening until cancelled.
        self.restart_on_end = restart_on_end
        self.cancelled = False
        self._done = False
        self._queue: asyncio.Queue[object] = asyncio.Queue()

    def start(self) -> Self:
        self.source.start(self)
        return self

    # Called by the source.

    def push(self, event: TranscriptEvent) -> None:
        if not self.cancelled:
            self._queue.put_nowait(event)

    def fail(self, code: str) -> None:
        if not self.cancelled:
            self._queue.put_nowait(SpeechError(code))

    def ended(self) -> None:
        if self.cancelled:
            return
        if self.restart_on_end:
            try:
                self.source.start(self)
                return
            except RuntimeError as e:
                logger.warning("Could not restart recognition: %r", e)
        self._queue.put_nowait(_END)

    # Called by the consumer.

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        self.source.stop()
        self._queue.put_nowait(_END)

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> TranscriptEvent:
        if self._done or self.cancelled:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            self._done = True
            raise StopAsyncIteration
        if isinstance(item, SpeechError):
            self._done = True
            self.cancel()
            raise item
        assert isinstance(item, TranscriptEvent)
        return item


def subscribe(source: RecognitionSource, *, restart_on_end: bool = True) -> TranscriptSubscription:
    return TranscriptSubscription(source, restart_on_end=restart_on_end).start()


class Transcript:
    """Finished phrases plus whatever is still being heard."""

    def __init__(self, final: str = "") -> None:
        self.final = final
        self.interim = ""

    def feed(self, event: TranscriptEvent) -> None:
        if event.final:
            self.final += event.text + " "
            self.interim = ""
        else:
            self.interim = event.text

    @property
    def text(self) -> str:
        return self.final.strip()


async def dictate(subscription: TranscriptSubscription, transcript: Transcript | None = None) -> Transcript:
    transcript = Transcript() if transcript is None else transcript
    async for event in subscription:
        transcript.feed(event)
    return transcript
