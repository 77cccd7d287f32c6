"""Tests for the capability catalogue."""

from operator_agent.tools import CAPABILITY_TOOLS, Capability, get_default_registry


def test_every_capability_registered() -> None:
    registry = get_default_registry()

    assert set(registry.list_tool_names()) == {c.value for c in Capability}
    assert len(registry) == len(CAPABILITY_TOOLS) == 6


def test_default_registry_is_shared() -> None:
    assert get_default_registry() is get_default_registry()


def test_argument_shapes() -> None:
    registry = get_default_registry()

    execute = registry.get_tool("executeDiscordCommand")
    play = registry.get_tool("playMusic")
    assert execute is not None and execute.required_parameters == {"commandDescription"}
    assert play is not None and play.required_parameters == {"query"}
    for name in ("skipTrack", "stopPlayback", "showQueue", "togglePauseResume"):
        tool = registry.get_tool(name)
        assert tool is not None
        assert tool.parameters == ()


def test_llm_definitions_cover_catalogue() -> None:
    names = [d["function"]["name"] for d in get_default_registry().get_tool_definitions_for_llm()]
    assert names == [tool.name for tool in CAPABILITY_TOOLS]
