class MoveError(Exception):
    """Base class for every failure that aborts a move before anything is written."""


class MoveValidationError(MoveError):
    """Disallowed characters, conflicting options or an empty request."""


class MoveResolutionError(MoveError):
    """A path or project named by the request cannot be resolved."""


class PatternError(MoveError):
    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f'No files found matching glob pattern: "{pattern}"')
