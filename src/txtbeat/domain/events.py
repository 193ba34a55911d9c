from dataclasses import dataclass


@dataclass(frozen=True)
class InterpretedEvent:
    """Resultado da interpretação de um caractere."""

    pitch: int | None = None
    immediate_reprocess: bool = False


@dataclass(frozen=True)
class StateSnapshot:
    """Valores do estado exibidos na interface."""

    instrument_id: int
    volume: int
    octave: int
    bpm: int


REST = InterpretedEvent()
CONTINUE = InterpretedEvent(immediate_reprocess=True)
