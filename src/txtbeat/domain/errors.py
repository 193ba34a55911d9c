class ConfigurationError(ValueError):
    """Texto ou configuração inválidos; a execução não é iniciada."""


class AudioInitializationError(RuntimeError):
    """Falha ao iniciar o sintetizador ou carregar o SoundFont."""
