class AppwrapError(Exception):
    exit_code: int = 1

    def __init__(self, message: str):
        super().__init__(message)


class ConfigError(AppwrapError):
    exit_code = 2


class MissingValueError(ConfigError):
    pass


class InvalidFormatError(ConfigError):
    pass


class ConfigPathNotFoundError(ConfigError):
    pass


class DocumentSyntaxError(ConfigError):
    pass


class FilesystemError(AppwrapError):
    exit_code = 12


class ArchitectureError(AppwrapError, ValueError):
    exit_code = 3


class ConstructionError(AppwrapError):
    exit_code = 20


class ToolUnavailableError(AppwrapError):
    exit_code = 21


class ExternalToolError(AppwrapError):
    exit_code = 22
