"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from fenceline.core.registry import ArtifactRegistry
from fenceline.reactive import ArtifactStore

SAMPLE_TRANSCRIPT = """\
Here is the component you asked for.
```artifact type="react" language="tsx" title="Counter"
export function Counter() {
  return <button>+1</button>;
}
```
And a diagram of the flow:
```mermaid
graph TD
  A --> B
```
Let me know if you need changes."""


@pytest.fixture()
def sample_transcript() -> str:
    return SAMPLE_TRANSCRIPT


@pytest.fixture()
def registry() -> ArtifactRegistry:
    """Return an empty registry isolated from the module-level default."""
    return ArtifactRegistry()


@pytest.fixture()
def store() -> ArtifactStore:
    return ArtifactStore()


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Return a Click CliRunner for invoking CLI commands."""
    return CliRunner()


@pytest.fixture()
def invoke(cli_runner: CliRunner):
    """Return a helper that invokes CLI commands.

    Usage::

        result = invoke("parse", input="```py\\nx\\n```")
    """
    from fenceline.cli.main import cli

    def _invoke(*args: str, **kwargs):
        return cli_runner.invoke(cli, list(args), **kwargs)

    return _invoke


@pytest.fixture()
def invoke_json(invoke):
    """Like invoke, but appends --json and parses the response.

    Returns (parsed_dict, exit_code) tuple.
    """

    def _invoke_json(*args: str, **kwargs) -> tuple[dict, int]:
        result = invoke(*args, "--json", **kwargs)
        parsed = json.loads(result.stdout)
        return parsed, result.exit_code

    return _invoke_json
