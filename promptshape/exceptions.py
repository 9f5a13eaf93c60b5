"""Custom exceptions for the prompt contract and rendering engine."""


class PromptError(RuntimeError):
    """Base exception for prompt parsing, resolution and rendering failures."""


class ContractError(PromptError):
    """Raised when wire data does not match the prompt data contract."""


class PartValidationError(ContractError):
    """Raised when a part does not carry exactly one payload."""


class PromptParseError(PromptError):
    """Raised when a prompt source or its frontmatter cannot be parsed."""


class TemplateRenderError(PromptError):
    """Raised when the template backend fails to render a prompt body."""


class ToolNotFoundError(PromptError):
    """Raised when a tool name cannot be resolved to a definition."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unable to resolve tool '{name}' to a recognized tool definition."
        )
        self.name = name


class SchemaNotFoundError(PromptError):
    """Raised when a schema name cannot be resolved."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unable to resolve schema '{name}'.")
        self.name = name


class PromptNotFoundError(PromptError):
    """Raised when a prompt cannot be located in the configured directories."""
