from gasless_agentkit.prompts import build_system_prompt


def test_prompt_lists_mainnets_only_by_default():
    prompt = build_system_prompt(testnet=False)
    assert "Avalanche (43114)" in prompt
    assert "Base (8453)" in prompt
    assert "Sepolia" not in prompt
    assert "test tokens" not in prompt


def test_prompt_mentions_testnets_when_enabled():
    prompt = build_system_prompt(testnet=True)
    assert "Sepolia Testnet (11155111) for testing" in prompt
    assert prompt.endswith("always inform users they are using test tokens.")
