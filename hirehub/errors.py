"""Error taxonomy shared by services and jobs.

Batch drivers catch ``HireHubError`` per applicant and continue, except for
``ConfigurationError`` which aborts the run.
"""


class HireHubError(Exception):
    pass


class TransientIOError(HireHubError):
    """Network or provider 5xx; safe to retry on the next pass."""


class NotFoundError(HireHubError):
    pass


class FormatError(HireHubError):
    """Unsupported or unrecognized file format."""


class DataIntegrityError(HireHubError):
    """Malformed input from a provider or a spreadsheet row."""


class ConfigurationError(HireHubError):
    """Missing template, credential or setting. Fatal for the run."""


class ProviderError(HireHubError):
    """Non-retryable 4xx from a collaborator, fatal for the current item."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ExtractError(HireHubError):
    pass


class FetchError(ExtractError):
    pass


class ConversionError(ExtractError):
    def __init__(self, message, stdout='', stderr=''):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self):
        base = super().__str__()
        if self.stderr:
            return f"{base}: {self.stderr.strip()}"
        return base
