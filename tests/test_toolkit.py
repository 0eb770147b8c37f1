from pydantic import BaseModel

from gasless_agentkit.actions.base import Action, EmptyArgs
from gasless_agentkit.actions.registry import ActionRegistry
from gasless_agentkit.agentkit import Agentkit
from gasless_agentkit.toolkit import AgentkitToolkit


class EchoInput(BaseModel):
    text: str


def _echo(account, args: EchoInput) -> str:
    return f"echo: {args.text}"


def _boom(account, args: EmptyArgs) -> str:
    raise RuntimeError("boom")


def _toolkit() -> AgentkitToolkit:
    registry = ActionRegistry([
        Action(name="echo", description="Echo text", args_schema=EchoInput, func=_echo,
               requires_account=False),
        Action(name="boom", description="Always raises", args_schema=EmptyArgs, func=_boom,
               requires_account=False),
    ])
    return AgentkitToolkit(Agentkit(8453), registry)


def test_tools_mirror_the_registry():
    tools = _toolkit().get_tools()
    assert [t.name for t in tools] == ["echo", "boom"]
    assert tools[0].parameters["required"] == ["text"]


async def test_successful_call():
    assert await _toolkit().execute("echo", {"text": "hi"}) == "echo: hi"


async def test_unknown_tool():
    assert await _toolkit().execute("nope", {}) == "Error: Unknown tool 'nope'"


async def test_invalid_arguments_come_back_as_text():
    result = await _toolkit().execute("echo", {})
    assert result.startswith("Error: Invalid arguments for echo: text:")


async def test_raising_action_is_contained():
    assert await _toolkit().execute("boom", None) == "Action boom failed: boom"


async def test_default_registry_is_used():
    toolkit = AgentkitToolkit(Agentkit(8453))
    result = await toolkit.execute("get_address", {})
    assert result.startswith("Unable to run Action: get_address. A Smart Account is required.")
