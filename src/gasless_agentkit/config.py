"""Configuration system for gasless-agentkit.

Loads configuration from a YAML file (or straight from the process
environment), supports ``${VAR}`` expansion, and exposes the settings the
smart account client, the integrations and the agent loop read.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from gasless_agentkit.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Environment-variable expansion helper
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def _expand_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with their environment values.

    Unset variables are left as-is so validation can catch them later.
    """

    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_env_recursive(obj: object) -> object:
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _expand_env_recursive(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_recursive(item) for item in obj]
    return obj


# ---------------------------------------------------------------------------
# Pydantic v2 models
# ---------------------------------------------------------------------------


class LLMProviderConfig(BaseModel):
    """A single OpenAI-compatible endpoint."""

    api_key: str = ""
    model: str = ""
    base_url: Optional[str] = None
    max_tokens: int = 4096
    temperature: float = 0.7


class LLMConfig(BaseModel):
    default_provider: str = "openrouter"
    openrouter: Optional[LLMProviderConfig] = None
    openai: Optional[LLMProviderConfig] = None


class WalletConfig(BaseModel):
    """Which credential mode to configure and the material it needs."""

    mode: Literal["local", "api_key", "server"] = "local"
    chain_id: int = 8453
    rpc_url: Optional[str] = None
    private_key: str = ""          # ${PRIVATE_KEY}
    mnemonic_phrase: str = ""      # ${MNEMONIC_PHRASE}
    account_index: int = 0
    api_key: str = ""              # ${API_KEY}
    server_url: str = "http://localhost:3001"  # ${AGENTKIT_API_URL}


class SmartAccountConfig(BaseModel):
    """ERC-4337 infrastructure used by the smart account client."""

    bundler_url: str = "https://bundler.0xgasless.com/{chain_id}"
    paymaster_url: str = "https://paymaster.0xgasless.com/v1/{chain_id}/rpc/{api_key}"
    entry_point: str = "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"
    account_factory: str = "0x000000a56Aaca3e9a4C479ea6b6CD0DbcB6634F5"
    ecdsa_module: str = "0x0000001c5b32F37F5beA87BDD5374eB2aC54eA8e"
    poll_interval: float = 2.0      # seconds between receipt polls
    receipt_timeout: float = 120.0  # give up waiting after this many seconds

    def bundler_for(self, chain_id: int) -> str:
        return self.bundler_url.format(chain_id=chain_id)

    def paymaster_for(self, chain_id: int, api_key: str) -> str:
        return self.paymaster_url.format(chain_id=chain_id, api_key=api_key)


class IntegrationsConfig(BaseModel):
    """Third-party HTTP APIs the actions talk to."""

    codex_api_key: str = ""        # ${CODEX_API_KEY}
    http_timeout: float = 30.0
    codex_api_url: str = "https://graph.codex.io/graphql"
    debridge_api_url: str = "https://dln.debridge.finance/v1.0"
    cow_api_url: str = "https://api.cow.fi"
    fourmeme_api_url: str = "https://four.meme/meme-api"
    # chain_id -> ticker -> deposit contract address
    deposit_contracts: dict[int, dict[str, str]] = Field(default_factory=dict)


class AgentConfig(BaseModel):
    max_iterations: int = 15
    system_prompt: Optional[str] = None  # Overrides the built-in context


class ApiKeyEntry(BaseModel):
    """A credential bundle the in-memory API-key authority hands out."""

    api_key: str
    private_key: str
    address: str
    rpc_url: str = "https://api.avax.network/ext/bc/C/rpc"
    chain_id: int = 43114


class AuthConfig(BaseModel):
    keys: list[ApiKeyEntry] = Field(default_factory=list)


class AgentkitConfig(BaseModel):
    """Root configuration object."""

    testnet_support: bool = False
    llm: LLMConfig = Field(default_factory=LLMConfig)
    wallet: WalletConfig = Field(default_factory=WalletConfig)
    smart_account: SmartAccountConfig = Field(default_factory=SmartAccountConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_CHAIN_ID = 8453

# Variables the chat command needs when no config file is given.
REQUIRED_ENV_VARS = [
    "OPENROUTER_API_KEY",
    "PRIVATE_KEY",
    "RPC_URL",
    "API_KEY",
    "CHAIN_ID",
    "CODEX_API_KEY",
]

# Missing these only produces a warning.
OPTIONAL_ENV_VARS = {"CHAIN_ID"}


def missing_env_vars(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the required variables that are unset or empty."""
    env = os.environ if environ is None else environ
    return [var for var in REQUIRED_ENV_VARS if not env.get(var)]


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def config_from_env(environ: Mapping[str, str] | None = None) -> AgentkitConfig:
    """Build a configuration from environment variables alone.

    Raises :class:`ConfigurationError` for non-numeric ``CHAIN_ID`` or
    ``ACCOUNT_INDEX`` values.
    """
    env = os.environ if environ is None else environ
    chain_id = _int_env(env, "CHAIN_ID", DEFAULT_CHAIN_ID)

    data: dict = {
        "testnet_support": env.get("TESTNET_SUPPORT", "").lower() == "true",
        "llm": {
            "default_provider": "openrouter",
            "openrouter": {
                "api_key": env.get("OPENROUTER_API_KEY", ""),
                "model": env.get("OPENROUTER_MODEL", DEFAULT_MODEL),
                "base_url": OPENROUTER_BASE_URL,
            },
        },
        "wallet": {
            "mode": env.get("AGENTKIT_MODE", "local"),
            "chain_id": chain_id,
            "rpc_url": env.get("RPC_URL") or None,
            "private_key": env.get("PRIVATE_KEY", ""),
            "mnemonic_phrase": env.get("MNEMONIC_PHRASE", ""),
            "account_index": _int_env(env, "ACCOUNT_INDEX", 0),
            "api_key": env.get("API_KEY", ""),
            "server_url": env.get("AGENTKIT_API_URL", "http://localhost:3001"),
        },
        "integrations": {"codex_api_key": env.get("CODEX_API_KEY", "")},
    }
    return AgentkitConfig.model_validate(data)


def load_config(path: Path) -> AgentkitConfig:
    """Load and validate configuration from a YAML file.

    Environment variable placeholders (``${VAR}``) are expanded before
    validation.
    """
    raw_text = path.read_text(encoding="utf-8")
    raw_data = yaml.safe_load(raw_text) or {}
    expanded = _expand_env_recursive(raw_data)
    return AgentkitConfig.model_validate(expanded)


def save_config(config: AgentkitConfig, path: Path) -> None:
    """Serialize an :class:`AgentkitConfig` to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="python", exclude_none=True)
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(data, fh, default_flow_style=False, sort_keys=False)
