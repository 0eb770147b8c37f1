from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from gasless_agentkit.agent import AgentEvent
from gasless_agentkit.cli.app import app, validate_environment
from gasless_agentkit.config import REQUIRED_ENV_VARS
from gasless_agentkit.errors import AgentkitError, ConfigurationError

runner = CliRunner()


@pytest.fixture
def clean_env(monkeypatch):
    for var in REQUIRED_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_chat_without_environment_exits_with_placeholders(clean_env):
    result = runner.invoke(app, ["chat"])
    assert result.exit_code == 1
    assert "Error: Required environment variables are not set" in result.output
    assert "OPENROUTER_API_KEY=your_openrouter_api_key_here" in result.output
    assert "CODEX_API_KEY=your_codex_api_key_here" in result.output
    assert "CHAIN_ID=" not in result.output


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["address", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_missing_chain_id_only_warns(capsys):
    env = {var: "x" for var in REQUIRED_ENV_VARS if var != "CHAIN_ID"}
    validate_environment(env)
    assert "CHAIN_ID not set, defaulting to Base (8453)" in capsys.readouterr().out


def test_validate_environment_raises_exit():
    with pytest.raises(typer.Exit):
        validate_environment({})


def test_actions_lists_every_action():
    result = runner.invoke(app, ["actions"])
    assert result.exit_code == 0
    for name in ("get_balance", "smart_transfer", "debridge_swap", "cowswap_cancel_order",
                 "select_server_wallet", "analyze_network"):
        assert name in result.output


@pytest.fixture
def full_env(monkeypatch):
    for var in REQUIRED_ENV_VARS:
        monkeypatch.setenv(var, "x")
    monkeypatch.setenv("CHAIN_ID", "8453")


def test_non_numeric_chain_id_is_reported(full_env, monkeypatch):
    monkeypatch.setenv("CHAIN_ID", "base")
    result = runner.invoke(app, ["chat"])
    assert result.exit_code == 1
    assert "CHAIN_ID must be an integer, got 'base'" in result.output


def test_chat_reports_configuration_errors(full_env):
    failing = AsyncMock(side_effect=ConfigurationError("Chain ID 1 is not supported"))
    with patch("gasless_agentkit.agentkit.Agentkit.from_config", failing):
        result = runner.invoke(app, ["chat"])
    assert result.exit_code == 1
    assert "Chain ID 1 is not supported" in result.output
    assert "Traceback" not in result.output


def test_chat_prints_each_event_as_it_arrives(full_env):
    async def stream(self, message):
        yield AgentEvent(source="agent", content="checking balances")
        raise AgentkitError("stream interrupted")

    with patch("gasless_agentkit.agentkit.Agentkit.from_config", AsyncMock(return_value=MagicMock())), \
            patch("gasless_agentkit.llm.LLMRouter.get_provider", return_value=MagicMock()), \
            patch("gasless_agentkit.agent.AgentkitAgent.stream", stream):
        result = runner.invoke(app, ["chat"], input="what do I hold?\nexit\n")

    assert "checking balances" in result.output
    assert "stream interrupted" in result.output
    assert result.exit_code == 1
