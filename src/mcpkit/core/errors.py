"""Shared error types for the capability core."""


class McpKitError(Exception):
    """Base error for all capability-core failures."""


class DuplicateRegistrationError(McpKitError):
    """A capability with the same key is already registered."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Duplicate {kind} registration: {key}")


class RegistryFrozenError(McpKitError):
    """The registry was modified after being frozen for serving."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Cannot register {kind} '{key}': registry is frozen")


class ArgumentValidationError(McpKitError):
    """Arguments did not satisfy a capability's input schema."""

    def __init__(self, field: str | None, detail: str) -> None:
        self.field = field
        self.detail = detail
        prefix = f"Invalid argument '{field}'" if field else "Invalid arguments"
        super().__init__(f"{prefix}: {detail}")


class SamplingUnavailableError(McpKitError):
    """A handler asked the client for sampling over a one-way transport."""

    def __init__(self) -> None:
        super().__init__("Sampling is not available on this transport")


class ProgressOrderError(McpKitError):
    """A progress step moved backwards within one invocation."""

    def __init__(self, previous: int, current: int) -> None:
        self.previous = previous
        self.current = current
        super().__init__(f"Progress went backwards: {current} after {previous}")
