from typing import Optional


class CommunityCrimeError(Exception):
    """Base Exception Class. `stage` names the pipeline stage that failed"""
    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage

    def __str__(self) -> str:
        message = super().__str__()
        return f'[{self.stage}] {message}' if self.stage else message

class LoadError(CommunityCrimeError):
    """Error class for a missing, unreadable or malformed input table"""
    def __init__(self, message: str, stage: Optional[str] = 'load') -> None:
        super().__init__(message, stage)

class ReshapeError(CommunityCrimeError):
    """Error for a month header that doesn't match the configured format"""
    def __init__(self, message: str, stage: Optional[str] = 'reshape') -> None:
        super().__init__(message, stage)

class EnrichError(CommunityCrimeError):
    """Error for census data that can't be averaged or joined"""
    def __init__(self, message: str, stage: Optional[str] = 'enrich') -> None:
        super().__init__(message, stage)

class ClassifyError(CommunityCrimeError):
    """Error for a totals table missing the columns the classifier needs"""
    def __init__(self, message: str, stage: Optional[str] = 'classify') -> None:
        super().__init__(message, stage)

class ConfigError(CommunityCrimeError):
    """Config Error"""
    def __init__(self, message: str, stage: Optional[str] = 'config') -> None:
        super().__init__(message, stage)
