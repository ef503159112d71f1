"""
Authorization errors.

Two kinds of failure leave the ability engine:

- AuthorizationError: the caller is not allowed to do something. Raised
  only by Ability.throw_unless_can and handled by the HTTP error boundary.
- RuleValidationError: the rule data itself is broken. Raised while
  building rules, never during evaluation.

Usage:
    try:
        ability.throw_unless_can("read", "User")
    except AuthorizationError as exc:
        return JSONResponse(status_code=403, content={"error": exc.message})
"""

from typing import Any

DEFAULT_MESSAGE = "Not authorized"


class RuleValidationError(ValueError):
    """Raised when a rule or rule record is malformed."""


class AuthorizationError(Exception):
    """
    An action was denied by an ability.

    Attributes:
        action: The rejected action
        subject: The subject type the action was attempted on
        field: Field the check was narrowed to, if any
        reason: Reason taken from the deciding inverted rule, if any
        default_message: Message used when there is no reason
    """

    def __init__(
        self,
        action: str,
        subject: str,
        reason: str | None = None,
        *,
        field: str | None = None,
        default_message: str | None = None,
    ):
        self.action = action
        self.subject = subject
        self.field = field
        self.reason = reason
        self.default_message = default_message or DEFAULT_MESSAGE
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Human-readable message, safe to show to the caller."""
        return self.reason or self.default_message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}

    def __repr__(self) -> str:
        target = f"{self.subject}.{self.field}" if self.field else self.subject
        return f"<AuthorizationError {self.action} {target}: {self.message!r}>"
