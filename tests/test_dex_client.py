"""Tests for the dex runner and client boundary."""

import asyncio
import json
import sys

import pytest

from modiqo.client import DexClient
from modiqo.models import DexInfo, RegistryWhoami
from modiqo.runner import DexCommandError, DexRunner, strip_ansi


class DummyProcess:
    def __init__(self, *, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode
        self.received_input = None

    async def communicate(self, _input=None):
        self.received_input = _input
        return self._stdout, self._stderr


class HangingProcess(DummyProcess):
    def __init__(self):
        super().__init__()
        self.killed = False

    async def communicate(self, _input=None):
        if not self.killed:
            await asyncio.sleep(10)
        return b"", b""

    def kill(self):
        self.killed = True


def _install_fake_exec(monkeypatch, responses):
    """Route ``asyncio.create_subprocess_exec`` to canned processes keyed by dex args."""

    calls = []

    async def fake_create_subprocess_exec(*command, **kwargs):
        args = tuple(command[1:])
        calls.append({"args": args, "env": kwargs.get("env")})
        response = responses.get(args)
        if response is None:
            return DummyProcess(stderr=b"unknown command", returncode=2)
        if isinstance(response, BaseException):
            raise response
        return response

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_create_subprocess_exec)
    return calls


@pytest.fixture()
def client(dex_settings):
    return DexClient(dex_settings)


@pytest.mark.asyncio
async def test_runner_falls_back_to_stderr(monkeypatch, dex_settings):
    _install_fake_exec(monkeypatch, {("info",): DummyProcess(stdout=b"  \n", stderr=b"Version: 1.0\n")})

    output = await DexRunner(dex_settings).run(["info"])

    assert output.text == "Version: 1.0"
    assert output.returncode == 0


@pytest.mark.asyncio
async def test_runner_strips_ansi(monkeypatch, dex_settings):
    _install_fake_exec(monkeypatch, {("info",): DummyProcess(stdout=b"\x1b[32mVersion:\x1b[0m 1.0")})

    output = await DexRunner(dex_settings).run(["info"])

    assert output.text == "Version: 1.0"
    assert strip_ansi("\x1b[?25lhidden\x1b[?25h") == "hidden"


@pytest.mark.asyncio
async def test_runner_raises_on_nonzero_exit(monkeypatch, dex_settings):
    _install_fake_exec(monkeypatch, {("info",): DummyProcess(stderr=b"boom", returncode=3)})

    with pytest.raises(DexCommandError) as exc_info:
        await DexRunner(dex_settings).run(["info"])

    assert exc_info.value.returncode == 3
    assert exc_info.value.stderr == "boom"


@pytest.mark.asyncio
async def test_runner_raises_when_binary_missing(monkeypatch, dex_settings):
    _install_fake_exec(monkeypatch, {("info",): FileNotFoundError("dex")})

    with pytest.raises(DexCommandError):
        await DexRunner(dex_settings).run(["info"])


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [PermissionError(13, "Permission denied"), NotADirectoryError(20, "Not a directory")])
async def test_runner_wraps_os_errors_at_launch(monkeypatch, dex_settings, error):
    _install_fake_exec(monkeypatch, {("info",): error})

    with pytest.raises(DexCommandError, match="failed to start") as exc_info:
        await DexRunner(dex_settings).run(["info"])

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_runner_kills_process_on_timeout(monkeypatch, dex_settings):
    process = HangingProcess()
    _install_fake_exec(monkeypatch, {("flow", "search", "x"): process})

    with pytest.raises(DexCommandError, match="timed out"):
        await DexRunner(dex_settings).run(["flow", "search", "x"], timeout_seconds=0.01)

    assert process.killed is True


class ExitedProcess(HangingProcess):
    def kill(self):
        self.killed = True
        raise ProcessLookupError


@pytest.mark.asyncio
async def test_runner_timeout_tolerates_already_exited_process(monkeypatch, dex_settings):
    process = ExitedProcess()
    _install_fake_exec(monkeypatch, {("info",): process})

    with pytest.raises(DexCommandError, match="timed out"):
        await DexRunner(dex_settings).run(["info"], timeout_seconds=0.01)

    assert process.killed is True


@pytest.mark.asyncio
async def test_runner_rejects_oversized_output(monkeypatch, dex_settings):
    settings = dex_settings.model_copy(update={"max_output_bytes": 4})
    _install_fake_exec(monkeypatch, {("info",): DummyProcess(stdout=b"0123456789")})

    with pytest.raises(DexCommandError, match="more than 4 bytes"):
        await DexRunner(settings).run(["info"])


@pytest.mark.asyncio
async def test_adapter_list_parses_table(monkeypatch, client):
    table = "acme (1 adapters)\n│ab  │ABC Co│12│rest│90%│88%│✓ ready│\n".encode()
    _install_fake_exec(monkeypatch, {("adapter", "list"): DummyProcess(stdout=table)})

    adapters = await client.adapter_list()

    assert [(a.id, a.group, a.has_token) for a in adapters] == [("ab", "acme", True)]


@pytest.mark.asyncio
async def test_failures_collapse_to_defaults(monkeypatch, client):
    _install_fake_exec(monkeypatch, {})

    assert await client.adapter_list() == []
    assert await client.flow_list() == []
    assert await client.vault_token_list() == []
    assert await client.catalog_info("stripe") == {}
    assert await client.dex_info() == DexInfo()
    assert await client.registry_whoami() == RegistryWhoami(status="error", connected=False)


@pytest.mark.asyncio
async def test_unlaunchable_binary_collapses_to_defaults(monkeypatch, client):
    async def refuse(*command, **kwargs):
        raise PermissionError(13, "Permission denied", command[0])

    monkeypatch.setattr(asyncio, "create_subprocess_exec", refuse)

    assert await client.adapter_list() == []
    assert await client.registry_whoami() == RegistryWhoami()
    assert await client.explore_skills("email") == []
    assert await client.exec_silent(["--version"]) is False
    assert await client.token_set("GITHUB_TOKEN", "x") is False
    assert await client.vault_pull("pw") is False
    assert await client.pull_associated_skills("gmail") == 0


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform == "win32", reason="POSIX execute permission bits")
async def test_non_executable_dex_path_collapses_to_defaults(tmp_path, dex_settings):
    not_executable = tmp_path / "dex"
    not_executable.write_text("#!/bin/sh\n")
    not_executable.chmod(0o644)

    file_client = DexClient(dex_settings.model_copy(update={"executable": str(not_executable)}))
    dir_client = DexClient(dex_settings.model_copy(update={"executable": str(tmp_path)}))

    assert await file_client.adapter_list() == []
    assert await dir_client.registry_whoami() == RegistryWhoami()


@pytest.mark.asyncio
async def test_invalid_json_collapses_to_empty(monkeypatch, client):
    _install_fake_exec(monkeypatch, {("flow", "list", "--json"): DummyProcess(stdout=b"Error: no flows dir")})

    assert await client.flow_list() == []


@pytest.mark.asyncio
async def test_explore_joins_three_queries(monkeypatch, client):
    tools = json.dumps([{"adapter_id": "gmail", "tool": "send", "score": 90}]).encode()
    skills = "@@skills\n│ send-email │ Send a message │ 82% │\n".encode()
    flows = b"@@flows\n1. [ATOMIC] send-email (82% match)\n   Endpoints: [OK] adapter/gmail\n"
    calls = _install_fake_exec(
        monkeypatch,
        {
            ("explore", "email", "--json"): DummyProcess(stdout=tools),
            ("explore", "email"): DummyProcess(stdout=skills),
            ("flow", "search", "email"): DummyProcess(stdout=flows),
        },
    )

    result = await client.explore("email")

    assert result.query == "email"
    assert [t.tool for t in result.tools] == ["send"]
    assert [s.name for s in result.skills] == ["send-email"]
    assert [(f.name, f.adapter) for f in result.flowSearchResults] == [("send-email", "gmail")]
    assert len(calls) == 3
    assert result.is_empty is False


@pytest.mark.asyncio
async def test_explore_partial_failure_keeps_other_results(monkeypatch, client):
    flows = b"@@flows\n1. [ATOMIC] send-email (82% match)\n"
    _install_fake_exec(monkeypatch, {("flow", "search", "email"): DummyProcess(stdout=flows)})

    result = await client.explore("email")

    assert result.tools == []
    assert result.skills == []
    assert [f.name for f in result.flowSearchResults] == ["send-email"]


@pytest.mark.asyncio
async def test_registry_queries_pass_community(monkeypatch, client):
    table = "│ Name │ Fingerprint │ Visibility │ Description │\n│ gmail │ ab12 │ public │ Mail │\n".encode()
    calls = _install_fake_exec(
        monkeypatch,
        {("registry", "adapter", "list", "--community", "acme"): DummyProcess(stdout=table)},
    )

    adapters = await client.registry_adapter_list("acme")

    assert [a.name for a in adapters] == ["gmail"]
    assert calls[0]["args"] == ("registry", "adapter", "list", "--community", "acme")


@pytest.mark.asyncio
async def test_token_set_sends_value_on_stdin(monkeypatch, client):
    process = DummyProcess()
    calls = _install_fake_exec(monkeypatch, {("token", "set", "GITHUB_TOKEN"): process})

    assert await client.token_set("GITHUB_TOKEN", "ghp_secret") is True
    assert process.received_input == b"ghp_secret"
    assert "ghp_secret" not in calls[0]["args"]


@pytest.mark.asyncio
async def test_vault_pull_passes_passphrase_env(monkeypatch, client):
    calls = _install_fake_exec(monkeypatch, {("vault", "pull"): DummyProcess()})

    assert await client.vault_pull("hunter2") is True
    assert calls[0]["env"]["DEX_VAULT_PASSPHRASE"] == "hunter2"


@pytest.mark.asyncio
async def test_vault_pull_failure(monkeypatch, client):
    _install_fake_exec(monkeypatch, {("vault", "pull"): DummyProcess(returncode=1)})

    assert await client.vault_pull("wrong") is False


@pytest.mark.asyncio
async def test_is_available_requires_deno_runtime(monkeypatch, client, dex_settings):
    _install_fake_exec(monkeypatch, {("--version",): DummyProcess(stdout=b"dex 1.0")})

    assert await client.is_available() is False

    dex_settings.deno_path.parent.mkdir(parents=True)
    dex_settings.deno_path.write_text("")
    assert await client.is_available() is True


@pytest.mark.asyncio
async def test_is_setup_complete(monkeypatch, client):
    _install_fake_exec(
        monkeypatch,
        {
            ("adapter", "list"): DummyProcess(stdout="│gmail│Gmail│4│openapi│1│100%│✓ ready│".encode()),
            ("token", "list"): DummyProcess(stdout="GSUITE_TOKEN  gmail  ✓ configured".encode()),
        },
    )

    assert await client.is_setup_complete() is True


@pytest.mark.asyncio
async def test_pull_associated_skills_counts_successes(monkeypatch, client):
    search = "│ Name │ Description │\n│ send-email │ a │\n│ read-inbox │ b │\n".encode()
    calls = _install_fake_exec(
        monkeypatch,
        {
            ("registry", "skill", "search", "gmail"): DummyProcess(stdout=search),
            ("registry", "skill", "pull", "bootstrap/send-email"): DummyProcess(),
            ("registry", "skill", "pull", "bootstrap/read-inbox"): DummyProcess(returncode=1),
        },
    )

    assert await client.pull_associated_skills("gmail") == 1
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_adapter_dry_run(monkeypatch, client):
    payload = json.dumps({"adapter_id": "stripe", "toolsets": [{"name": "charges", "tool_count": 3}]}).encode()
    _install_fake_exec(
        monkeypatch,
        {
            ("adapter", "new", "stripe", "spec.json", "--dry-run", "--base-url", "https://api"): DummyProcess(
                stdout=payload
            )
        },
    )

    result = await client.adapter_dry_run("stripe", "spec.json", base_url="https://api")

    assert result.adapter_id == "stripe"
    assert result.toolsets[0].tool_count == 3


@pytest.mark.asyncio
async def test_adapter_dry_run_raises_on_garbage(monkeypatch, client):
    _install_fake_exec(monkeypatch, {("adapter", "new", "x", "s", "--dry-run"): DummyProcess(stdout=b"oops")})

    with pytest.raises(DexCommandError, match="dry-run failed"):
        await client.adapter_dry_run("x", "s")


@pytest.mark.asyncio
async def test_verify_adapter_runs_proof_flow(monkeypatch, client):
    args = ("deno", "run", "--allow-all", "bootstrap/gmail", "--output=summary")
    _install_fake_exec(monkeypatch, {args: DummyProcess(stdout=b"ok")})

    assert await client.verify_adapter("gmail") is True
    assert await client.verify_adapter("stripe") is False
