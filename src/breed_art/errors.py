"""Exceptions raised by breed_art."""


class ConfigurationError(ValueError):
    """Invalid parameters, reported before any randomness is consumed."""


class ShapeMismatchError(ConfigurationError):
    """Images that must be comparable have different shapes."""

    def __init__(self, expected: tuple, got: tuple):
        self.expected = tuple(expected)
        self.got = tuple(got)
        super().__init__(f"Image shape mismatch: expected {self.expected}, got {self.got}")
