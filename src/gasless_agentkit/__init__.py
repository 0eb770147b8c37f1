"""gasless-agentkit - gasless ERC-4337 blockchain actions for AI agents."""

from gasless_agentkit.actions import get_all_actions, get_registry
from gasless_agentkit.actions.base import Action, ActionKind, ActionResult
from gasless_agentkit.agentkit import ActionContext, Agentkit
from gasless_agentkit.errors import (
    ActionValidationError,
    AgentkitError,
    ConfigurationError,
    CredentialError,
    UnsupportedChainError,
)
from gasless_agentkit.toolkit import AgentkitToolkit

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionContext",
    "ActionKind",
    "ActionResult",
    "ActionValidationError",
    "Agentkit",
    "AgentkitError",
    "AgentkitToolkit",
    "ConfigurationError",
    "CredentialError",
    "UnsupportedChainError",
    "get_all_actions",
    "get_registry",
]
