import logging
import threading
from pathlib import Path
from typing import Final, override

import fluidsynth

from txtbeat.application.ports import AudioSink
from txtbeat.config import MAX_MIDI_VALUE, MAX_VOLUME
from txtbeat.domain.errors import AudioInitializationError

logger = logging.getLogger(__name__)

CC_VOLUME: Final[int] = 7
CC_ALL_NOTES_OFF: Final[int] = 123


class FluidSynthSink(AudioSink):
    """Toca as notas em tempo real usando fluidsynth."""

    def __init__(
        self,
        soundfont_path: Path,
        channel: int = 0,
        velocity: int = 100,
    ) -> None:
        self.soundfont_path: Path = soundfont_path
        self.channel: int = channel
        self.velocity: int = velocity
        self.timers: list[threading.Timer] = []
        self.fs: fluidsynth.Synth = fluidsynth.Synth()
        self._initialize_fluidsynth()

    def _initialize_fluidsynth(self) -> None:
        try:
            self.fs.start()
            sfid = self.fs.sfload(str(self.soundfont_path))
        except Exception as e:
            logger.exception('Erro ao inicializar o FluidSynth')
            self.fs.delete()
            raise AudioInitializationError(str(e)) from e

        if sfid == -1:
            self.fs.delete()
            raise AudioInitializationError(
                f'SoundFont não carregado: {self.soundfont_path}'
            )
        logger.info('SoundFont carregado: %s', self.soundfont_path)

    @override
    def play_note(self, pitch: int, duration_seconds: float) -> None:
        # Um noteoff pendente da mesma tecla cortaria a nota reatacada.
        for timer in self.timers:
            if timer.args[1] == pitch:
                timer.cancel()
        self.timers = [
            t for t in self.timers if t.is_alive() and not t.finished.is_set()
        ]

        self.fs.noteon(chan=self.channel, key=pitch, vel=self.velocity)

        timer = threading.Timer(
            duration_seconds,
            self.fs.noteoff,
            args=[self.channel, pitch],
        )
        self.timers.append(timer)
        timer.start()

    @override
    def set_volume(self, percent: int) -> None:
        value = round(percent * MAX_MIDI_VALUE / MAX_VOLUME)
        self.fs.cc(self.channel, CC_VOLUME, value)

    @override
    def set_instrument(self, program_id: int) -> None:
        self.fs.program_change(chan=self.channel, prg=program_id)

    @override
    def stop_all(self) -> None:
        for timer in self.timers:
            timer.cancel()
        self.timers = []
        self.fs.cc(self.channel, CC_ALL_NOTES_OFF, 0)

    @override
    def close(self) -> None:
        timers = self.timers
        self.stop_all()
        for timer in timers:
            timer.join()
        self.fs.delete()
