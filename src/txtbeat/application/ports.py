from abc import ABC, abstractmethod
from collections.abc import Callable

from txtbeat.domain.events import StateSnapshot


class AudioSink(ABC):
    """Destino dos eventos sonoros; nunca sintetiza nada no núcleo."""

    @abstractmethod
    def play_note(self, pitch: int, duration_seconds: float) -> None:
        """Tocar `pitch` durante `duration_seconds`."""

    @abstractmethod
    def set_volume(self, percent: int) -> None:
        """Definir o volume em porcentagem (0-100)."""

    @abstractmethod
    def set_instrument(self, program_id: int) -> None:
        """Trocar o programa General MIDI."""

    @abstractmethod
    def stop_all(self) -> None:
        """Silenciar imediatamente todas as notas."""

    def close(self) -> None:
        """Liberar recursos do sintetizador."""


class DisplaySink(ABC):
    """Destino das atualizações de progresso e estado."""

    @abstractmethod
    def on_character_processed(
        self, char: str, pitch: int | None, processed: int, total: int
    ) -> None:
        """Informar o caractere interpretado e o progresso da leitura."""

    @abstractmethod
    def on_state_changed(self, state: StateSnapshot) -> None:
        """Informar instrumento, volume, oitava e BPM atuais."""

    def on_stopped(self) -> None:
        """Informar que a execução terminou (parada ou fim do texto)."""


class CadenceTimer(ABC):
    """Temporizador de disparo único usado para marcar as batidas."""

    @abstractmethod
    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        """Agendar `callback` após `delay_ms` e retornar um identificador."""

    @abstractmethod
    def cancel(self, handle: int) -> None:
        """Cancelar um agendamento ainda pendente."""
