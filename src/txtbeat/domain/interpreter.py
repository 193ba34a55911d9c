import logging
import random
from collections.abc import Callable
from typing import Final

from txtbeat.config import (
    BPM_STEP,
    FALLBACK_INSTRUMENT,
    FALLBACK_PITCH,
    INSTRUMENT_CYCLE,
    MAX_OCTAVE,
    MAX_VOLUME,
    MIN_BPM,
    MIN_OCTAVE,
    NOTE_OFFSETS,
    RANDOM_BPM_RANGE,
)
from txtbeat.domain.cursor import TextCursor
from txtbeat.domain.events import CONTINUE, REST, InterpretedEvent
from txtbeat.domain.models import NoteCasePolicy, PerformanceState

logger = logging.getLogger(__name__)

Handler = Callable[[str, PerformanceState, TextCursor, bool], InterpretedEvent]


class CommandInterpreter:
    """Converte um caractere (e o lookahead necessário) em um evento musical.

    O estado da execução é recebido a cada chamada e alterado no próprio
    objeto; o interpretador guarda apenas a tabela de despacho e o gerador
    de números aleatórios.
    """

    OCTAVE_PREFIX: Final[str] = 'R'
    TEMPO_SUFFIX: Final[str] = 'PM+'

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng: random.Random = rng or random.Random()
        self.dispatch_table: dict[str, Handler] = self._build_dispatch_table()

    def _build_dispatch_table(self) -> dict[str, Handler]:
        """Construir a tabela de mapeamento Caractere -> Função."""
        table: dict[str, Handler] = {
            'B': self._handle_b_context,
            'R': self._handle_octave_prefix,
            ' ': self._handle_rest,
            '+': self._handle_volume_up,
            '-': self._handle_volume_reset,
            '?': self._handle_random_note,
            '\n': self._handle_newline,
            '\r': self._handle_newline,
            ';': self._handle_random_tempo,
        }

        for char in 'ACDEFG':
            table[char] = self._handle_note

        for char in 'OIU':
            table[char] = self._handle_vowel

        return table

    def interpret(
        self,
        char: str,
        state: PerformanceState,
        cursor: TextCursor,
    ) -> InterpretedEvent:
        """Interpretar `char`, já consumido do cursor, e atualizar `state`."""
        was_note = state.was_note
        state.was_note = False

        if state.pending_sequence == self.OCTAVE_PREFIX:
            state.pending_sequence = ''
            if char == '+':
                state.octave = min(state.octave + 1, MAX_OCTAVE)
                return CONTINUE
            if char == '-':
                state.octave = max(state.octave - 1, MIN_OCTAVE)
                return CONTINUE
            logger.debug('Sequência R abandonada em %r', char)

        handler = self.dispatch_table.get(self._command_key(char), self._handle_default)
        event = handler(char, state, cursor, was_note)
        logger.debug('%r -> %s', char, event)
        return event

    @staticmethod
    def _command_key(char: str) -> str:
        """Maiúscula ASCII do caractere; demais caracteres ficam como estão."""
        return char.upper() if char.isascii() else char

    def _is_silenced(self, char: str, state: PerformanceState) -> bool:
        return state.case_policy == NoteCasePolicy.UPPERCASE_ONLY and char.islower()

    def _resolve_note(self, letter: str, state: PerformanceState) -> InterpretedEvent:
        pitch = 12 * state.octave + NOTE_OFFSETS[letter]
        state.last_pitch = pitch
        state.was_note = True
        return InterpretedEvent(pitch=pitch)

    def _set_bpm(self, state: PerformanceState, bpm: int) -> None:
        state.bpm = max(MIN_BPM, bpm)
        state.tempo_changed = True

    def _handle_default(
        self,
        _char: str,
        _state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        return REST

    def _handle_b_context(
        self,
        char: str,
        state: PerformanceState,
        cursor: TextCursor,
        was_note: bool,
    ) -> InterpretedEvent:
        """Trata o caso ambíguo do 'B': Nota B ou comando BPM+."""
        lookahead = [cursor.peek(i) for i in range(len(self.TEMPO_SUFFIX))]
        suffix = ''.join(self._command_key(c) for c in lookahead if c is not None)
        if suffix == self.TEMPO_SUFFIX:
            for _ in self.TEMPO_SUFFIX:
                cursor.read_next()
            self._set_bpm(state, state.bpm + BPM_STEP)
            return CONTINUE

        return self._handle_note(char, state, cursor, was_note)

    def _handle_octave_prefix(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        state.pending_sequence = self.OCTAVE_PREFIX
        return CONTINUE

    def _handle_note(
        self,
        char: str,
        state: PerformanceState,
        cursor: TextCursor,
        was_note: bool,
    ) -> InterpretedEvent:
        if self._is_silenced(char, state):
            return self._handle_default(char, state, cursor, was_note)
        return self._resolve_note(char.upper(), state)

    def _handle_rest(
        self,
        _char: str,
        _state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        return REST

    def _handle_volume_up(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        state.volume = min(MAX_VOLUME, state.volume * 2)
        return REST

    def _handle_volume_reset(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        state.volume = state.default_volume
        return REST

    def _handle_vowel(
        self,
        char: str,
        state: PerformanceState,
        cursor: TextCursor,
        was_note: bool,
    ) -> InterpretedEvent:
        """Sustenta a nota anterior ou toca o telefone."""
        if self._is_silenced(char, state):
            return self._handle_default(char, state, cursor, was_note)

        if was_note and state.last_pitch is not None:
            state.was_note = True
            return InterpretedEvent(pitch=state.last_pitch)

        state.instrument_id = FALLBACK_INSTRUMENT
        return InterpretedEvent(pitch=FALLBACK_PITCH)

    def _handle_random_note(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        letter = self.rng.choice(list(NOTE_OFFSETS))
        return self._resolve_note(letter, state)

    def _handle_newline(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        if state.instrument_id in INSTRUMENT_CYCLE:
            state.cycle_index = INSTRUMENT_CYCLE.index(state.instrument_id)
        state.cycle_index = (state.cycle_index + 1) % len(INSTRUMENT_CYCLE)
        state.instrument_id = INSTRUMENT_CYCLE[state.cycle_index]
        return REST

    def _handle_random_tempo(
        self,
        _char: str,
        state: PerformanceState,
        _cursor: TextCursor,
        _was_note: bool,
    ) -> InterpretedEvent:
        self._set_bpm(state, self.rng.randint(*RANDOM_BPM_RANGE))
        return REST
