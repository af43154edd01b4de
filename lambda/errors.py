class LabFilesError(Exception):
    """Base class for errors raised while serving lab files requests."""


class ClientInputError(LabFilesError):
    """A required route parameter or setting is missing."""


class UpstreamStatusError(LabFilesError):
    def __init__(self, status_code: int, path: str = ""):
        super().__init__(f"GitHub returned {status_code} for {path}")
        self.status_code = status_code
        self.path = path


class GitHubConnectionError(LabFilesError):
    def __init__(self, url: str, reason):
        super().__init__(f"HTTP request to GitHub failed: {reason}")
        self.url = url
        self.reason = reason


class GitHubDecodeError(LabFilesError):
    """The GitHub response body did not have the expected shape."""
