# Exception taxonomy for aix
# ABOUTME: Every error raised by aix derives from AixError
# ABOUTME: Not-found errors are LookupErrors, invalid-input errors are ValueErrors


class AixError(Exception):
    """Base class for all aix errors."""


# Not-found errors


class NotFoundError(AixError, LookupError):
    """An artifact or configuration entry does not exist."""


class CommandNotFoundError(NotFoundError):
    pass


class SkillNotFoundError(NotFoundError):
    pass


class AgentNotFoundError(NotFoundError):
    pass


class MCPServerNotFoundError(NotFoundError):
    pass


class RepoNotFoundError(NotFoundError):
    pass


class ResourceNotFoundError(NotFoundError):
    """No configured repository provides the requested resource."""


# Invalid-input errors


class InvalidInputError(AixError, ValueError):
    """Caller supplied an empty name, missing record, or malformed value."""


class InvalidCommandError(InvalidInputError):
    pass


class InvalidSkillError(InvalidInputError):
    pass


class InvalidAgentError(InvalidInputError):
    pass


class InvalidMCPServerError(InvalidInputError):
    pass


class UnknownPlatformError(InvalidInputError):
    pass


class DuplicatePlatformError(InvalidInputError):
    pass


class NoPlatformsAvailableError(AixError):
    def __init__(self, message: str = "no supported AI assistants found") -> None:
        super().__init__(message)


class InvalidGitURLError(InvalidInputError):
    pass


class InvalidRepoNameError(InvalidInputError):
    pass


# Parse errors


class FrontmatterError(AixError, ValueError):
    """Base class for frontmatter parse failures.

    ABOUTME: Carries the offending path when the caller knows it
    """

    default_message = "invalid frontmatter"

    def __init__(self, message: str | None = None, path: str | None = None) -> None:
        self.path = path
        text = message or self.default_message
        if path:
            text = f"{path}: {text}"
        super().__init__(text)


class InvalidYAMLError(FrontmatterError):
    default_message = "invalid YAML in frontmatter"


class MissingFrontmatterError(FrontmatterError):
    default_message = "missing frontmatter"


class MissingCloseError(FrontmatterError):
    default_message = "frontmatter is missing closing delimiter"


class ValidationFailedError(AixError):
    """An artifact failed validation.

    ABOUTME: errors and warnings hold the collected Issue values for reporting
    """

    def __init__(self, message: str, errors: list | None = None, warnings: list | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])


# Policy errors


class ConflictError(AixError):
    """Artifact already exists on a target platform and --force was not given."""


class NoReposConfiguredError(AixError):
    def __init__(self, message: str = "no repositories configured") -> None:
        super().__init__(message)


class RepoExistsError(AixError):
    pass


class ConfigError(AixError):
    """The aix configuration file is unreadable or fails validation."""


class UnsupportedVariableError(AixError, ValueError):
    pass


class GitError(AixError):
    """A git subprocess failed."""
