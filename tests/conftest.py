import random
from collections.abc import Callable
from pathlib import Path
from typing import override

import pytest

from txtbeat.application.ports import AudioSink, CadenceTimer, DisplaySink
from txtbeat.application.scheduler import BeatScheduler
from txtbeat.domain.cursor import TextCursor
from txtbeat.domain.events import InterpretedEvent, StateSnapshot
from txtbeat.domain.interpreter import CommandInterpreter
from txtbeat.domain.models import PerformanceState, PlaybackSettings


class FakeAudio(AudioSink):
    """Registra as chamadas feitas ao sintetizador."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    @override
    def play_note(self, pitch: int, duration_seconds: float) -> None:
        self.calls.append(('play', pitch, duration_seconds))

    @override
    def set_volume(self, percent: int) -> None:
        self.calls.append(('volume', percent))

    @override
    def set_instrument(self, program_id: int) -> None:
        self.calls.append(('instrument', program_id))

    @override
    def stop_all(self) -> None:
        self.calls.append(('stop_all',))

    @override
    def close(self) -> None:
        self.calls.append(('close',))

    @property
    def pitches(self) -> list[int]:
        return [call[1] for call in self.calls if call[0] == 'play']

    def of_kind(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]


class FakeDisplay(DisplaySink):
    """Registra o progresso informado pelo escalonador."""

    def __init__(self) -> None:
        self.characters: list[tuple[str, int | None, int, int]] = []
        self.states: list[StateSnapshot] = []
        self.stopped: int = 0
        self.on_character: Callable[[str], None] | None = None

    @override
    def on_character_processed(
        self, char: str, pitch: int | None, processed: int, total: int
    ) -> None:
        self.characters.append((char, pitch, processed, total))
        if self.on_character:
            self.on_character(char)

    @override
    def on_state_changed(self, state: StateSnapshot) -> None:
        self.states.append(state)

    @override
    def on_stopped(self) -> None:
        self.stopped += 1


class FakeTimer(CadenceTimer):
    """Temporizador manual: as batidas só acontecem quando o teste chama `fire`."""

    def __init__(self) -> None:
        self.pending: dict[int, tuple[int, Callable[[], None]]] = {}
        self.delays: list[int] = []
        self.cancelled: list[int] = []
        self._next_handle: int = 1

    @override
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self.pending[handle] = (delay_ms, callback)
        self.delays.append(delay_ms)
        return handle

    @override
    def cancel(self, handle: int) -> None:
        self.cancelled.append(handle)
        self.pending.pop(handle, None)

    def fire(self) -> None:
        handle = next(iter(self.pending))
        _delay, callback = self.pending.pop(handle)
        callback()

    def run_until_idle(self, limit: int = 10_000) -> int:
        ticks = 0
        while self.pending and ticks < limit:
            self.fire()
            ticks += 1
        return ticks


@pytest.fixture
def audio() -> FakeAudio:
    return FakeAudio()


@pytest.fixture
def display() -> FakeDisplay:
    return FakeDisplay()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def interpreter() -> CommandInterpreter:
    return CommandInterpreter(rng=random.Random(1234))


@pytest.fixture
def scheduler(
    audio: FakeAudio,
    display: FakeDisplay,
    timer: FakeTimer,
    interpreter: CommandInterpreter,
) -> BeatScheduler:
    return BeatScheduler(
        audio=audio, display=display, timer=timer, interpreter=interpreter
    )


@pytest.fixture
def interpret_text(
    interpreter: CommandInterpreter,
) -> Callable[..., tuple[PerformanceState, list[tuple[str, InterpretedEvent]]]]:
    """Interpretar um texto inteiro, caractere a caractere, sem temporizador."""

    def run(
        text: str,
        settings: PlaybackSettings | None = None,
        state: PerformanceState | None = None,
    ) -> tuple[PerformanceState, list[tuple[str, InterpretedEvent]]]:
        state = state or PerformanceState(settings or PlaybackSettings())
        cursor = TextCursor(text)
        events: list[tuple[str, InterpretedEvent]] = []
        while not cursor.at_end():
            char = cursor.read_next() or ''
            events.append((char, interpreter.interpret(char, state, cursor)))
        return state, events

    return run


class AudioFactory:
    """Cria um `FakeAudio` por SoundFont pedido."""

    def __init__(self) -> None:
        self.created: list[tuple[Path, FakeAudio]] = []

    def __call__(self, soundfont_path: Path) -> FakeAudio:
        audio = FakeAudio()
        self.created.append((soundfont_path, audio))
        return audio


@pytest.fixture
def audio_factory() -> AudioFactory:
    return AudioFactory()
