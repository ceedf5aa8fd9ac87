from typing import Optional


class NvenvError(Exception):
    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)

class ConfigError(NvenvError):
    exit_code = 2


class InvalidVersionError(ConfigError):
    pass


class UnsupportedPlatformError(NvenvError):
    exit_code = 3


class UnsupportedArchitectureError(NvenvError):
    exit_code = 3

class DownloadError(NvenvError):
    exit_code = 4


class DownloadFailedError(DownloadError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NetworkError(DownloadError):
    pass


class TooManyRedirectsError(DownloadError):
    pass

class ExtractionError(NvenvError):
    exit_code = 5


class ArchiveNotFoundError(ExtractionError):
    pass


class UnsupportedArchiveFormatError(ExtractionError):
    pass


class ExtractionFailedError(ExtractionError):
    pass


class InstallDirectoryNotFoundError(ExtractionError):
    pass


class AmbiguousInstallDirectoryError(ExtractionError):
    pass

class EnvironmentLockedError(NvenvError):
    exit_code = 6
