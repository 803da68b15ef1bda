# Preprocessing error taxonomy
# Each fatal error carries the exit code the CLI reports for it


class PreprocessingError(Exception):
    """Base class for fatal preprocessing errors."""
    exit_code = 1


class InvalidInput(PreprocessingError):
    """Raised when the input CSV cannot be turned into a dataset."""
    exit_code = 1


class EmptyDataset(PreprocessingError):
    """Raised when no rows survive duplicate removal."""
    exit_code = 1


class InvalidState(PreprocessingError):
    """Raised when a dataset invariant is violated between passes or at the writer."""
    exit_code = 2


class NonFatalWarning(UserWarning):
    """Condition worth reporting that does not abort preprocessing."""
    pass
