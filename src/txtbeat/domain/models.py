from dataclasses import dataclass
from enum import StrEnum

from txtbeat.config import MAX_MIDI_VALUE, MAX_OCTAVE, MAX_VOLUME, MIN_OCTAVE
from txtbeat.domain.errors import ConfigurationError
from txtbeat.domain.events import StateSnapshot


class NoteCasePolicy(StrEnum):
    """Tratamento das letras minúsculas de nota e vogal."""

    CASE_INSENSITIVE = 'case_insensitive'
    UPPERCASE_ONLY = 'uppercase_only'


@dataclass
class PlaybackSettings:
    """Configuração definida pelo usuário na interface."""

    bpm: int = 120
    volume: int = 80
    octave: int = 4
    instrument_id: int = 0
    case_policy: NoteCasePolicy = NoteCasePolicy.CASE_INSENSITIVE

    def validate(self) -> None:
        """Levantar `ConfigurationError` se algum valor estiver fora da faixa."""
        if self.bpm <= 0:
            raise ConfigurationError(f'BPM inválido: {self.bpm}')
        if not 0 <= self.volume <= MAX_VOLUME:
            raise ConfigurationError(
                f'Volume fora da faixa 0-{MAX_VOLUME}: {self.volume}'
            )
        if not MIN_OCTAVE <= self.octave <= MAX_OCTAVE:
            raise ConfigurationError(
                f'Oitava fora da faixa {MIN_OCTAVE}-{MAX_OCTAVE}: {self.octave}'
            )
        if not 0 <= self.instrument_id <= MAX_MIDI_VALUE:
            raise ConfigurationError(f'Instrumento inválido: {self.instrument_id}')


class PerformanceState:
    """Estado mutável de uma execução, alterado apenas pelo interpretador."""

    def __init__(self, settings: PlaybackSettings) -> None:
        self.octave: int = settings.octave
        self.volume: int = settings.volume
        self.default_volume: int = settings.volume
        self.bpm: int = settings.bpm
        self.instrument_id: int = settings.instrument_id
        self.case_policy: NoteCasePolicy = settings.case_policy
        self.cycle_index: int = -1
        self.last_pitch: int | None = None
        self.was_note: bool = False
        self.pending_sequence: str = ''
        self.tempo_changed: bool = False

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            instrument_id=self.instrument_id,
            volume=self.volume,
            octave=self.octave,
            bpm=self.bpm,
        )

    def beat_seconds(self) -> float:
        """Calcular duração de uma batida em segundos."""
        return 60.0 / self.bpm
