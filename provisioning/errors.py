"""
Exit codes and fatal errors raised while provisioning the app registrations
"""

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    UNEXPECTED_ERROR = 1
    INVALID_INPUT = 5
    RESOURCE_GROUP_NOT_FOUND = 6
    RESOURCE_MISSING = 7
    CLIENT_SECRET_NOT_ISSUED = 8
    OBJECT_ID_NOT_FOUND = 14
    SCOPE_NOT_EXPOSED = 15
    PERMISSION_ID_NOT_FOUND = 16
    CLIENT_NOT_PRE_AUTHORIZED = 17
    APP_CREATION_FAILED = 18


class ProvisioningError(Exception):
    """Fatal error that stops the script with a stable exit code"""

    exit_code = ExitCode.UNEXPECTED_ERROR

    def __init__(self, message: str, exit_code: ExitCode = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidInputError(ProvisioningError):
    exit_code = ExitCode.INVALID_INPUT


class ResourceGroupNotFoundError(ProvisioningError):
    exit_code = ExitCode.RESOURCE_GROUP_NOT_FOUND


class ResourceMissingError(ProvisioningError):
    """A resource the deployment should have created is not in the group"""

    exit_code = ExitCode.RESOURCE_MISSING


class AppCreationError(ProvisioningError):
    exit_code = ExitCode.APP_CREATION_FAILED


class RetryExhaustedError(ProvisioningError):
    """The identity backend never returned the expected value"""

    def __init__(self, message: str, exit_code: ExitCode, attempts: int):
        super().__init__(message, exit_code)
        self.attempts = attempts
