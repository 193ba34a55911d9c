import importlib
import sys
import types
from collections.abc import Iterator
from pathlib import Path

import pytest

from txtbeat.domain.errors import AudioInitializationError


class FakeSynth:
    """Substitui `fluidsynth.Synth` registrando as chamadas."""

    sfload_result: int = 1
    start_error: Exception | None = None

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def start(self) -> None:
        if self.start_error:
            raise self.start_error
        self.calls.append(('start',))

    def sfload(self, filename: str) -> int:
        self.calls.append(('sfload', filename))
        return self.sfload_result

    def noteon(self, chan: int, key: int, vel: int) -> None:
        self.calls.append(('noteon', chan, key, vel))

    def noteoff(self, chan: int, key: int) -> None:
        self.calls.append(('noteoff', chan, key))

    def cc(self, chan: int, ctrl: int, val: int) -> None:
        self.calls.append(('cc', chan, ctrl, val))

    def program_change(self, chan: int, prg: int) -> None:
        self.calls.append(('program_change', chan, prg))

    def delete(self) -> None:
        self.calls.append(('delete',))


@pytest.fixture
def audio_player(monkeypatch: pytest.MonkeyPatch) -> Iterator[types.ModuleType]:
    """Importar o módulo de áudio com um `fluidsynth` falso."""
    module_name = 'txtbeat.infrastructure.audio_player'
    fake_fluidsynth = types.SimpleNamespace(Synth=FakeSynth)
    monkeypatch.setitem(sys.modules, 'fluidsynth', fake_fluidsynth)
    monkeypatch.delitem(sys.modules, module_name, raising=False)
    yield importlib.import_module(module_name)
    sys.modules.pop(module_name, None)


def test_initialization_loads_soundfont(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    assert sink.fs.calls == [('start',), ('sfload', 'gm.sf2')]


def test_failed_soundfont_load_raises(audio_player, monkeypatch) -> None:
    monkeypatch.setattr(FakeSynth, 'sfload_result', -1)

    with pytest.raises(AudioInitializationError):
        audio_player.FluidSynthSink(Path('missing.sf2'))


def test_failed_start_raises(audio_player, monkeypatch) -> None:
    monkeypatch.setattr(FakeSynth, 'start_error', OSError('no audio driver'))

    with pytest.raises(AudioInitializationError, match='no audio driver'):
        audio_player.FluidSynthSink(Path('gm.sf2'))


@pytest.mark.parametrize(('percent', 'value'), [(0, 0), (50, 64), (100, 127)])
def test_volume_maps_to_channel_volume(audio_player, percent, value) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    sink.set_volume(percent)

    assert sink.fs.calls[-1] == ('cc', 0, 7, value)


def test_set_instrument_changes_program(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'), channel=2)

    sink.set_instrument(40)

    assert sink.fs.calls[-1] == ('program_change', 2, 40)


def test_stop_all_cancels_pending_note_off(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    sink.play_note(60, 30.0)
    sink.stop_all()

    assert ('noteon', 0, 60, 100) in sink.fs.calls
    assert sink.fs.calls[-1] == ('cc', 0, 123, 0)
    assert not any(call[0] == 'noteoff' for call in sink.fs.calls)
    assert sink.timers == []


def test_note_off_fires_after_duration(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    sink.play_note(62, 0.01)
    sink.timers[0].join(timeout=2.0)

    assert ('noteoff', 0, 62) in sink.fs.calls


def test_close_deletes_synth(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    sink.close()

    assert sink.fs.calls[-1] == ('delete',)


def test_repeated_key_cancels_pending_note_off(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))

    sink.play_note(60, 30.0)
    sink.play_note(64, 30.0)
    first, other = sink.timers
    sink.play_note(60, 30.0)

    assert first.finished.is_set()
    assert not other.finished.is_set()
    assert first not in sink.timers
    assert [t.args[1] for t in sink.timers] == [64, 60]
    sink.stop_all()


def test_close_waits_for_note_off_threads(audio_player) -> None:
    sink = audio_player.FluidSynthSink(Path('gm.sf2'))
    sink.play_note(60, 30.0)
    timer = sink.timers[0]

    sink.close()

    assert not timer.is_alive()
    assert sink.fs.calls[-1] == ('delete',)
    assert not any(call[0] == 'noteoff' for call in sink.fs.calls)
