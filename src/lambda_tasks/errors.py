"""Exception hierarchy for lambda-tasks."""

from __future__ import annotations

from typing import List, Optional


class LambdaTasksError(Exception):
    """Base class for every error raised by lambda-tasks."""


class ConfigLoadError(LambdaTasksError):
    """A lambda-config file is missing, unreadable or malformed."""

    def __init__(self, path, reason: str):
        super().__init__(f"Could not load {path}: {reason}")
        self.path = path
        self.reason = reason


class TaskError(LambdaTasksError):
    """Base class for task graph errors."""


class UnknownTaskError(TaskError):
    def __init__(self, name: str, required_by: Optional[str] = None):
        if required_by:
            message = f"Task '{name}' (required by '{required_by}') is not registered"
        else:
            message = f"Task '{name}' is not registered"
        super().__init__(message)
        self.name = name
        self.required_by = required_by


class DuplicateTaskError(TaskError):
    def __init__(self, name: str):
        super().__init__(f"Task '{name}' is already registered")
        self.name = name


class TaskCycleError(TaskError):
    def __init__(self, cycle: List[str]):
        super().__init__(f"Task dependency cycle: {' -> '.join(cycle)}")
        self.cycle = cycle


class TaskFailedError(TaskError):
    """A task body raised; the rest of the chain was not run."""

    def __init__(self, task: str, cause: BaseException):
        super().__init__(f"Task '{task}' failed: {cause}")
        self.task = task
        self.cause = cause


class CompileError(LambdaTasksError):
    def __init__(self, message: str, diagnostics: Optional[list] = None):
        super().__init__(message)
        self.diagnostics = diagnostics or []


class InstallError(LambdaTasksError):
    pass


class ArchiveError(LambdaTasksError):
    pass


class PlatformError(LambdaTasksError):
    """A request to AWS Lambda failed."""


class FunctionNotFoundError(PlatformError):
    def __init__(self, function_name: Optional[str]):
        super().__init__(f"Lambda function {function_name} does not exist")
        self.function_name = function_name


class DeployError(PlatformError):
    pass
