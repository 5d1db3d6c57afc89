"""Parser errors."""


class ParseException(Exception):
    """Raised by the lexer and parser for text they cannot turn into a tree."""

    def __init__(self, message: str, line: int, col: int):
        super().__init__(f"{message} (line {line}, col {col})")
        self.message = message
        self.line = line
        self.col = col
