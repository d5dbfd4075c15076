from toolhost.providers.diagnostics import MAX_ECHO_TIMES, DiagnosticsApi
from toolhost.registry import ToolRegistry
from toolhost.utils.config import ServerSettings


def _registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(DiagnosticsApi(registry, ServerSettings(providers=())))
    return registry


def _invoke(registry: ToolRegistry, tool_name: str, /, **arguments):
    from toolhost.registry.coercion import coerce_arguments

    found = registry.get(tool_name)
    return found.handler(coerce_arguments(found.params, arguments))


def test_diagnostics_declares_its_tools() -> None:
    assert _registry().names() == ["echo", "server_info", "list_tool_names", "describe_tool"]


def test_echo_repeats_text() -> None:
    registry = _registry()
    assert _invoke(registry, "echo", text="ab", times=2) == {"text": "abab", "times": 2}
    assert _invoke(registry, "echo", text="ab", times=-3) == {"text": "", "times": 0}


def test_server_info_counts_tools() -> None:
    info = _invoke(_registry(), "server_info")

    assert info["name"] == "toolhost"
    assert info["protocolVersion"] == "2024-11-05"
    assert info["tools"] == 4


def test_list_tool_names_filters_and_pages() -> None:
    registry = _registry()

    page = _invoke(registry, "list_tool_names", filter="*tool*", count=1)

    assert page["items"] == ["list_tool_names"]
    assert page["total"] == 2
    assert page["hasMore"] is True
    assert page["nextOffset"] == 1


def test_describe_tool_returns_schema_or_domain_error() -> None:
    registry = _registry()

    described = _invoke(registry, "describe_tool", name="echo")
    missing = _invoke(registry, "describe_tool", name="nope")

    assert described["inputSchema"]["required"] == ["text"]
    assert missing == {"error": "Tool not found: nope"}


def test_echo_caps_the_repeat_count() -> None:
    result = _invoke(_registry(), "echo", text="ab", times=10**10)

    assert result["times"] == MAX_ECHO_TIMES
    assert len(result["text"]) == 2 * MAX_ECHO_TIMES
