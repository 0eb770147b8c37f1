from gasless_agentkit.config import (
    DEFAULT_CHAIN_ID,
    AgentkitConfig,
    config_from_env,
    load_config,
    missing_env_vars,
    save_config,
)

FULL_ENV = {
    "OPENROUTER_API_KEY": "sk-or",
    "PRIVATE_KEY": "0xabc",
    "RPC_URL": "https://rpc.example",
    "API_KEY": "paymaster",
    "CHAIN_ID": "43114",
    "CODEX_API_KEY": "codex",
}


def test_missing_env_vars_lists_unset_and_empty():
    assert missing_env_vars(FULL_ENV) == []
    env = dict(FULL_ENV, RPC_URL="")
    del env["CODEX_API_KEY"]
    assert missing_env_vars(env) == ["RPC_URL", "CODEX_API_KEY"]


def test_config_from_env():
    config = config_from_env(FULL_ENV)
    assert config.wallet.chain_id == 43114
    assert config.wallet.private_key == "0xabc"
    assert config.wallet.rpc_url == "https://rpc.example"
    assert config.llm.openrouter.api_key == "sk-or"
    assert config.integrations.codex_api_key == "codex"
    assert not config.testnet_support


def test_config_from_env_defaults_to_base():
    config = config_from_env({})
    assert config.wallet.chain_id == DEFAULT_CHAIN_ID == 8453
    assert config.wallet.mode == "local"
    assert config.wallet.rpc_url is None


def test_load_config_expands_env_vars(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_PRIVATE_KEY", "0xfeed")
    monkeypatch.delenv("TEST_UNSET_VAR", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "wallet:\n"
        "  chain_id: 43114\n"
        "  private_key: ${TEST_PRIVATE_KEY}\n"
        "  api_key: ${TEST_UNSET_VAR}\n"
        "integrations:\n"
        "  http_timeout: 5\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.wallet.private_key == "0xfeed"
    assert config.wallet.api_key == "${TEST_UNSET_VAR}"
    assert config.integrations.http_timeout == 5.0


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AgentkitConfig()


def test_save_then_load(tmp_path):
    config = config_from_env(FULL_ENV)
    path = tmp_path / "nested" / "config.yaml"
    save_config(config, path)
    assert load_config(path) == config
