"""The action contract: name, description, argument schema and execute function."""

from __future__ import annotations

import enum
import inspect
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterator, Mapping

import httpx
from pydantic import BaseModel, ValidationError
from web3.exceptions import Web3Exception

from gasless_agentkit.config import IntegrationsConfig
from gasless_agentkit.errors import ActionValidationError, AgentkitError
from gasless_agentkit.llm.base import ToolDefinition


class ActionKind(enum.Enum):
    """How the dispatcher calls an action's execute function.

    ``STANDARD`` actions receive the resolved account handle; ``EXTENDED``
    actions receive an :class:`~gasless_agentkit.agentkit.ActionContext` so
    they can read or change dispatcher state (server-wallet selection, the
    signer adapter).
    """

    STANDARD = "standard"
    EXTENDED = "extended"


class ErrorKind(enum.Enum):
    VALIDATION = "validation"
    CAPABILITY = "capability"
    CREDENTIAL = "credential"
    EXTERNAL = "external"


class EmptyArgs(BaseModel):
    """Schema for actions that take no input."""


@dataclass(frozen=True)
class Action:
    name: str
    description: str
    args_schema: type[BaseModel]
    func: Callable[..., str] | Callable[..., Awaitable[str]]
    requires_account: bool = True
    kind: ActionKind = ActionKind.STANDARD
    is_async: bool = field(init=False)

    def __post_init__(self) -> None:
        if not self.name or not self.description:
            raise ValueError("Actions need a non-empty name and description")
        object.__setattr__(self, "is_async", inspect.iscoroutinefunction(self.func))

    def parse_args(self, raw: Mapping[str, Any] | BaseModel | None) -> BaseModel:
        """Validate *raw* against the schema, filling defaults.

        Unknown keys are dropped. Raises :class:`ActionValidationError`
        naming every offending field.
        """
        if isinstance(raw, self.args_schema):
            return raw
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        try:
            return self.args_schema.model_validate(dict(raw or {}))
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'args'}: {err['msg']}"
                for err in exc.errors()
            ]
            raise ActionValidationError(self.name, errors) from exc

    def to_definition(self) -> ToolDefinition:
        schema = self.args_schema.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return ToolDefinition(name=self.name, description=self.description, parameters=schema)

    async def invoke(self, target: Any, args: BaseModel) -> str:
        if self.is_async:
            return await self.func(target, args)
        return self.func(target, args)


@dataclass(frozen=True)
class ActionOk:
    message: str
    data: dict[str, Any] | None = None
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ActionErr:
    kind: ErrorKind
    message: str
    ok: bool = field(default=False, init=False)


ActionResult = ActionOk | ActionErr


def classify_result(message: str) -> ActionResult:
    """Turn a dispatcher string into a tagged result."""
    if message.startswith("Unable to run Action:"):
        if "API key validation failed" in message:
            return ActionErr(ErrorKind.CREDENTIAL, message)
        return ActionErr(ErrorKind.CAPABILITY, message)
    if message.startswith("Error") or " failed:" in message.split("\n", 1)[0]:
        return ActionErr(ErrorKind.EXTERNAL, message)
    return ActionOk(message)


# Failures an action reports as text rather than raising.
EXPECTED_ERRORS: tuple[type[BaseException], ...] = (
    AgentkitError,
    Web3Exception,
    httpx.HTTPError,
    ValueError,
    OSError,
)


# ---------------------------------------------------------------------------
# Integration settings for the running action
# ---------------------------------------------------------------------------

_integrations: ContextVar[IntegrationsConfig] = ContextVar(
    "gasless_agentkit_integrations", default=IntegrationsConfig()
)


@contextmanager
def use_integrations(config: IntegrationsConfig) -> Iterator[IntegrationsConfig]:
    """Make *config* the settings actions read until the block exits.

    Agentkit.run enters this around every call, so each instance's settings
    only reach its own actions, including across concurrent tasks.
    """
    token = _integrations.set(config)
    try:
        yield config
    finally:
        _integrations.reset(token)


def get_integrations() -> IntegrationsConfig:
    return _integrations.get()
