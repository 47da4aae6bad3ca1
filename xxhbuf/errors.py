from __future__ import annotations


class InvalidSecretLength(ValueError):
    """A secret/key buffer is shorter than the primitive accepts."""

    def __init__(self, length: int, minimum: int, *, exact: bool = False) -> None:
        self.length = length
        self.minimum = minimum
        if exact:
            msg = f"secret must be exactly {minimum} bytes, got {length}"
        else:
            msg = f"secret must be at least {minimum} bytes, got {length}"
        super().__init__(msg)
