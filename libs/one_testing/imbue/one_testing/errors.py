class BaseOneTestingError(Exception):
    """Base exception for all one-testing errors."""


class OneTestingError(BaseOneTestingError):
    """Base exception for errors surfaced to test authors.

    Subclasses can provide a user_help_text attribute with additional context
    on how to resolve the error. It is appended by format_message().
    """

    user_help_text: str | None = None

    def format_message(self) -> str:
        if self.user_help_text:
            return str(self) + "  [" + self.user_help_text + "]"
        return str(self)


# === Configuration ===


class ConfigError(OneTestingError):
    """Base class for config errors."""


class ConfigParseError(ConfigError):
    """Failed to parse a config file or environment override."""


class InvalidPollSettingsError(ConfigError, ValueError):
    """Raised when a poll attempt budget or interval is out of range."""


# === Resource documents ===


class ResourceDocumentError(OneTestingError):
    """Base class for errors reading a resource's XML document."""


class XmlDocumentParseError(ResourceDocumentError, ValueError):
    """Raised when a resource document is not well-formed XML."""


class InvalidXPathError(ResourceDocumentError, ValueError):
    """Raised when a path expression cannot be compiled or evaluated."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid path expression {path!r}: {reason}")


class XPathNotFoundError(ResourceDocumentError, LookupError):
    """Nothing in the document matches the requested path."""

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Could not find {path}")


class XPathValueParseError(ResourceDocumentError, ValueError):
    """The requested path exists but its value is not of the expected type."""

    def __init__(self, path: str, raw_value: str) -> None:
        self.path = path
        self.raw_value = raw_value
        super().__init__(f"Could not parse value at {path}: {raw_value!r} is not an unsigned integer")


# === Users ===


class UserResolutionError(OneTestingError):
    """Base class for failures looking a user up in the user pool."""


class UserNotFoundError(UserResolutionError, LookupError):
    """No user with this name exists."""

    user_help_text = "Check that the user exists and that the test is running against the right endpoint."

    def __init__(self, user_name: str) -> None:
        self.user_name = user_name
        super().__init__(f"Cannot retrieve user ID for {user_name}")


class UserInfoError(UserResolutionError):
    """The user exists but its info document could not be retrieved."""

    def __init__(self, user_id: int, reason: str) -> None:
        self.user_id = user_id
        super().__init__(f"Cannot retrieve info for user {user_id}: {reason}")


class UserGroupNotFoundError(XPathNotFoundError):
    """The user's info document carries no primary group name."""

    def __init__(self, user_name: str, path: str) -> None:
        self.user_name = user_name
        super().__init__(path, f"Could not get group name of user {user_name} (missing {path})")


# === Waiting ===


class ResourceWaitTimeoutError(OneTestingError, TimeoutError):
    """Raised by the raising wait helpers when the attempt budget runs out."""
