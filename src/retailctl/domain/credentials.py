"""Database credential resolution.

The credential is a single opaque secret supplied by the caller's
environment. When it is absent (or empty) the fixed fallback value is
used and the operator is told which value is in effect. The credential
is handed to downstream processes and never persisted here.
"""

from __future__ import annotations

from pydantic import BaseModel

CREDENTIAL_ENV_VAR = "DB_PASSWORD"
FALLBACK_DB_PASSWORD = "mypassword123"
CREDENTIAL_TOKEN = "${DB_PASSWORD}"


class ResolvedCredential(BaseModel):
    """The credential in effect for this invocation.

    Attributes:
        value: The secret passed on to the compose tool and the database.
        defaulted: True when the fallback replaced a missing value.
    """

    model_config = {"frozen": True}

    value: str
    defaulted: bool = False

    @property
    def source(self) -> str:
        return "default" if self.defaulted else "environment"

    def notice(self) -> str | None:
        """Operator notice naming the fallback value, or None if supplied."""
        if not self.defaulted:
            return None
        return f"Using default database password: {self.value}"

    def __repr__(self) -> str:
        # Keep the secret out of tracebacks and debug logs.
        return f"ResolvedCredential(source={self.source!r})"

    __str__ = __repr__


def resolve_credential(
    value: str | None, *, fallback: str = FALLBACK_DB_PASSWORD
) -> ResolvedCredential:
    """Resolve *value* to the credential in effect.

    ``None`` and ``""`` both fall back: an empty password is never used.

    Examples:
        >>> resolve_credential(None).value
        'mypassword123'
        >>> resolve_credential("s3cret").defaulted
        False
    """
    if value:
        return ResolvedCredential(value=value, defaulted=False)
    return ResolvedCredential(value=fallback, defaulted=True)
