import logging
from enum import StrEnum

from txtbeat.application.ports import AudioSink, CadenceTimer, DisplaySink
from txtbeat.domain.cursor import TextCursor
from txtbeat.domain.errors import ConfigurationError
from txtbeat.domain.events import InterpretedEvent
from txtbeat.domain.interpreter import CommandInterpreter
from txtbeat.domain.models import PerformanceState, PlaybackSettings

logger = logging.getLogger(__name__)


class SchedulerState(StrEnum):
    IDLE = 'idle'
    RUNNING = 'running'


class BeatScheduler:
    """Conduz o interpretador no ritmo das batidas.

    Cada batida consome um caractere. Eventos que pedem reprocessamento
    imediato fazem o próximo caractere ser lido na mesma batida. O período
    é recalculado depois de cada batida, então uma mudança de BPM só afeta
    o intervalo até a batida seguinte.
    """

    def __init__(
        self,
        audio: AudioSink,
        display: DisplaySink,
        timer: CadenceTimer,
        interpreter: CommandInterpreter | None = None,
    ) -> None:
        self.audio: AudioSink = audio
        self.display: DisplaySink = display
        self.timer: CadenceTimer = timer
        self.interpreter: CommandInterpreter = interpreter or CommandInterpreter()
        self.state: SchedulerState = SchedulerState.IDLE
        self._cursor: TextCursor | None = None
        self._performance: PerformanceState | None = None
        self._timer_handle: int | None = None

    @property
    def is_running(self) -> bool:
        return self.state == SchedulerState.RUNNING

    @property
    def performance(self) -> PerformanceState | None:
        return self._performance

    @property
    def processed(self) -> int:
        return self._cursor.position if self._cursor else 0

    def start(self, text: str | None, settings: PlaybackSettings) -> None:
        """Iniciar uma nova execução, encerrando a anterior se houver."""
        if not text:
            raise ConfigurationError('Nenhum texto para tocar.')
        settings.validate()

        if self.is_running:
            self.stop()

        self._cursor = TextCursor(text)
        self._performance = PerformanceState(settings)
        self.state = SchedulerState.RUNNING
        logger.info(
            'Iniciando execução: %d caracteres, %d BPM, oitava %d, instrumento %d',
            self._cursor.length,
            settings.bpm,
            settings.octave,
            settings.instrument_id,
        )

        self.audio.set_instrument(self._performance.instrument_id)
        self.audio.set_volume(self._performance.volume)
        self.display.on_state_changed(self._performance.snapshot())
        self._arm_timer(self._performance.bpm)

    def stop(self) -> None:
        """Encerrar a execução e silenciar o áudio; seguro em qualquer estado."""
        if self._timer_handle is not None:
            self.timer.cancel(self._timer_handle)
            self._timer_handle = None

        was_running = self.is_running
        self.state = SchedulerState.IDLE
        self._cursor = None
        self._performance = None
        self.audio.stop_all()

        if was_running:
            logger.info('Execução encerrada')
            self.display.on_stopped()

    def _arm_timer(self, bpm: int) -> None:
        delay_ms = max(1, round(60000 / bpm))
        self._timer_handle = self.timer.schedule(delay_ms, self._on_beat)

    def _on_beat(self) -> None:
        self._timer_handle = None
        cursor = self._cursor
        performance = self._performance
        if not self.is_running or cursor is None or performance is None:
            return

        if cursor.at_end():
            self.stop()
            return

        while True:
            event = self._process_next(cursor, performance)
            if not self.is_running:
                return
            if not event.immediate_reprocess or cursor.at_end():
                break

        if performance.tempo_changed:
            performance.tempo_changed = False
            logger.info('BPM alterado para %d', performance.bpm)

        self._arm_timer(performance.bpm)

    def _process_next(
        self, cursor: TextCursor, performance: PerformanceState
    ) -> InterpretedEvent:
        start = cursor.position
        char = cursor.read_next() or ''

        before = performance.snapshot()
        event = self.interpreter.interpret(char, performance, cursor)
        after = performance.snapshot()

        if after.instrument_id != before.instrument_id:
            self.audio.set_instrument(after.instrument_id)
        if after.volume != before.volume:
            self.audio.set_volume(after.volume)
        if event.pitch is not None:
            self.audio.play_note(event.pitch, performance.beat_seconds())

        self.display.on_character_processed(
            cursor.consumed_since(start), event.pitch, cursor.position, cursor.length
        )
        if after != before:
            self.display.on_state_changed(after)

        return event
