class TextCursor:
    """Buffer de texto somente leitura com posição de leitura e lookahead."""

    def __init__(self, text: str) -> None:
        self._text: str = text
        self._pos: int = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def length(self) -> int:
        return len(self._text)

    def read_next(self) -> str | None:
        """Retornar o caractere atual e avançar; `None` no fim do texto."""
        if self.at_end():
            return None
        char = self._text[self._pos]
        self._pos += 1
        return char

    def peek(self, offset: int = 0) -> str | None:
        """Retornar o caractere em `posição + offset` sem avançar."""
        index = self._pos + offset
        if index < 0 or index >= len(self._text):
            return None
        return self._text[index]

    def at_end(self) -> bool:
        return self._pos >= len(self._text)

    def consumed_since(self, start: int) -> str:
        """Retornar o trecho lido entre `start` e a posição atual."""
        return self._text[start : self._pos]
