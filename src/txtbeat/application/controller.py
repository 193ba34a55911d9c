import logging
from collections.abc import Callable
from pathlib import Path

from txtbeat.application.ports import AudioSink, CadenceTimer, DisplaySink
from txtbeat.application.scheduler import BeatScheduler
from txtbeat.domain.errors import ConfigurationError
from txtbeat.domain.interpreter import CommandInterpreter
from txtbeat.domain.models import PlaybackSettings

logger = logging.getLogger(__name__)


class _SilentSink(AudioSink):
    def play_note(self, pitch: int, duration_seconds: float) -> None:
        pass

    def set_volume(self, percent: int) -> None:
        pass

    def set_instrument(self, program_id: int) -> None:
        pass

    def stop_all(self) -> None:
        pass


class MusicController:
    """Fachada usada pela interface para carregar textos e controlar a execução."""

    def __init__(
        self,
        display: DisplaySink,
        timer: CadenceTimer,
        audio_factory: Callable[[Path], AudioSink],
        interpreter: CommandInterpreter | None = None,
    ) -> None:
        self.audio_factory: Callable[[Path], AudioSink] = audio_factory
        self.current_audio: AudioSink | None = None
        self.soundfont_path: Path | None = None
        self.scheduler: BeatScheduler = BeatScheduler(
            audio=_SilentSink(),
            display=display,
            timer=timer,
            interpreter=interpreter,
        )

    @property
    def is_playing(self) -> bool:
        return self.scheduler.is_running

    def load_text(self, file_path: Path) -> str:
        """Ler um arquivo de texto UTF-8."""
        try:
            return file_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f'Não foi possível ler {file_path}: {e}') from e

    def play_music(
        self,
        text: str | None,
        settings: PlaybackSettings,
        soundfont_path: Path,
    ) -> None:
        """Validar a configuração e iniciar a execução."""
        self.stop_music()
        if not text:
            raise ConfigurationError('Nenhum texto para tocar.')
        settings.validate()

        self.scheduler.audio = self._get_audio(soundfont_path)
        self.scheduler.start(text, settings)

    def stop_music(self) -> None:
        """Parar a execução atual se estiver ativa."""
        self.scheduler.stop()

    def shutdown(self) -> None:
        """Parar a execução e liberar o sintetizador."""
        self.stop_music()
        self._close_audio()

    def _get_audio(self, soundfont_path: Path) -> AudioSink:
        if self.current_audio is None or soundfont_path != self.soundfont_path:
            # O sintetizador anterior só é liberado depois que o novo carregou.
            audio = self.audio_factory(soundfont_path)
            self._close_audio()
            self.current_audio = audio
            self.soundfont_path = soundfont_path
        return self.current_audio

    def _close_audio(self) -> None:
        if self.current_audio is not None:
            self.current_audio.close()
            logger.info('Sintetizador liberado')
        self.scheduler.audio = _SilentSink()
        self.current_audio = None
        self.soundfont_path = None
