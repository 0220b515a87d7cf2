"""
WS-Trust actions and the token requests built from them.

A request is one of three closed variants: :class:`IssueRequest`,
:class:`RenewRequest` or :class:`ValidateRequest`.  Renew and Validate
cannot be constructed without a token identifier, so a request object that
exists is always complete.
"""

from __future__ import annotations

__all__ = [
    "Action",
    "IssueRequest",
    "RenewRequest",
    "TokenRequest",
    "ValidateRequest",
    "parse_action",
    "parse_request",
]

import enum
from dataclasses import dataclass
from typing import ClassVar

from .constants import NS_WST
from .errors import InvalidActionError


class Action(enum.Enum):
    """A WS-Trust binding operation supported by the client."""

    ISSUE = "Issue"
    RENEW = "Renew"
    VALIDATE = "Validate"

    @property
    def request_type(self) -> str:
        """WS-Trust ``RequestType`` URI."""
        return f"{NS_WST}/{self.value}"

    @property
    def soap_action(self) -> str:
        """WS-Addressing action URI of the RST message."""
        return f"{NS_WST}/RST/{self.value}"

    @property
    def arity(self) -> int:
        """Number of string parameters the action consumes."""
        return 0 if self is Action.ISSUE else 1


# "request" is the historical name of the issue operation
_ACTION_ALIASES: dict[str, Action] = {
    "issue": Action.ISSUE,
    "request": Action.ISSUE,
    "renew": Action.RENEW,
    "validate": Action.VALIDATE,
}


def parse_action(name: str) -> Action:
    """
    Resolve an action name (case-insensitive).

    Raises:
        InvalidActionError: If the name is not a recognized action.
    """
    action = _ACTION_ALIASES.get(name.strip().lower())
    if action is None:
        raise InvalidActionError(
            f"Invalid action {name!r}. Operations of type Issue, Renew and Validate are allowed."
        )
    return action


@dataclass(frozen=True)
class IssueRequest:
    """Request a new security token."""

    action: ClassVar[Action] = Action.ISSUE


@dataclass(frozen=True)
class _TargetedRequest:
    token_id: str

    action: ClassVar[Action]

    def __post_init__(self) -> None:
        if not isinstance(self.token_id, str) or not self.token_id.strip():
            raise InvalidActionError(
                f"{self.action.value} requires a non-empty security token identifier."
            )


@dataclass(frozen=True)
class RenewRequest(_TargetedRequest):
    """Renew the security token identified by ``token_id``."""

    action: ClassVar[Action] = Action.RENEW


@dataclass(frozen=True)
class ValidateRequest(_TargetedRequest):
    """Validate the security token identified by ``token_id``."""

    action: ClassVar[Action] = Action.VALIDATE


TokenRequest = IssueRequest | RenewRequest | ValidateRequest


def parse_request(action: str | Action, *parameters: str) -> TokenRequest:
    """
    Build a token request from an action and positional string parameters.

    Issue ignores any parameters.  Renew and Validate use the first one as
    the token identifier and ignore the rest.

    Raises:
        InvalidActionError: If the action is unknown or a required token
            identifier is missing.
    """
    resolved = action if isinstance(action, Action) else parse_action(action)

    if resolved is Action.ISSUE:
        return IssueRequest()

    if len(parameters) < resolved.arity:
        raise InvalidActionError(
            f"{resolved.value} requires a security token identifier parameter."
        )
    if resolved is Action.RENEW:
        return RenewRequest(parameters[0])
    return ValidateRequest(parameters[0])
