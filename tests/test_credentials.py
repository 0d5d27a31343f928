from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List

import pytest

from imagepin.modules.auth import CredsHelper, DockerConfig
from imagepin.modules.auth import docker_config as docker_config_module


class FakeProcess:
    def __init__(self, returncode: int, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr
        self.stdin_data: bytes | None = None

    async def communicate(self, data: bytes | None = None) -> tuple[bytes, bytes]:
        self.stdin_data = data
        return self._stdout, self._stderr


def _patch_exec(monkeypatch: pytest.MonkeyPatch, process: FakeProcess) -> List[tuple]:
    calls: List[tuple] = []

    async def fake_exec(*args: Any, **kwargs: Any) -> FakeProcess:
        calls.append(args)
        return process

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)
    return calls


def test_docker_config_reads_helpers_and_auths(write_docker_config: Any) -> None:
    config = write_docker_config(
        {
            "credHelpers": {"gcr.io": "gcloud"},
            "auths": {"my-reg.io": {"auth": "dXNlcjpwYXNz"}, "other.io": {"identitytoken": "x"}},
        }
    )
    assert config.get_cred_helper("gcr.io") == "gcloud"
    assert config.get_cred_helper("my-reg.io") is None
    assert config.get_auth("my-reg.io") == "dXNlcjpwYXNz"
    assert config.get_auth("other.io") is None
    assert config.get_auth("gcr.io") is None


def test_docker_config_missing_file_is_empty(
    empty_docker_config: DockerConfig, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        assert empty_docker_config.get_cred_helper("docker.io") is None
        assert empty_docker_config.get_auth("docker.io") is None
    # read once, warned once
    assert len([r for r in caplog.records if "Could not read docker config" in r.getMessage()]) == 1


def test_docker_config_invalid_json_is_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        assert DockerConfig(path).get_auth("docker.io") is None
    assert "Could not read docker config" in caplog.text


def test_docker_config_sections_of_wrong_type_are_empty(
    write_docker_config: Any, caplog: pytest.LogCaptureFixture
) -> None:
    config = write_docker_config({"credHelpers": ["gcloud"], "auths": "dXNlcjpwYXNz"})
    with caplog.at_level(logging.WARNING):
        for _ in range(2):
            assert config.get_cred_helper("docker.io") is None
            assert config.get_auth("docker.io") is None
    warnings = [r.getMessage() for r in caplog.records if "not an object" in r.getMessage()]
    assert len(warnings) == 2
    assert any("credHelpers" in w for w in warnings)
    assert any("auths" in w for w in warnings)


def test_docker_config_helper_name_of_wrong_type_is_ignored(write_docker_config: Any) -> None:
    config = write_docker_config({"credHelpers": {"gcr.io": {"name": "gcloud"}, "quay.io": ""}})
    assert config.get_cred_helper("gcr.io") is None
    assert config.get_cred_helper("quay.io") is None


def test_docker_config_is_read_once(write_docker_config: Any) -> None:
    config = write_docker_config({"auths": {"my-reg.io": {"auth": "first"}}})
    assert config.get_auth("my-reg.io") == "first"
    config.path.write_text(json.dumps({"auths": {"my-reg.io": {"auth": "second"}}}), encoding="utf-8")
    assert config.get_auth("my-reg.io") == "first"


def test_docker_config_path_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DOCKER_CONFIG_PATH", str(tmp_path / "explicit.json"))
    monkeypatch.setenv("DOCKER_CONFIG", str(tmp_path / "dir"))
    assert DockerConfig().path == tmp_path / "explicit.json"

    monkeypatch.delenv("DOCKER_CONFIG_PATH")
    assert DockerConfig().path == tmp_path / "dir" / "config.json"
    assert docker_config_module.docker_config_path() == tmp_path / "dir" / "config.json"


@pytest.mark.asyncio
async def test_creds_helper_returns_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    process = FakeProcess(0, stdout=json.dumps({"ServerURL": "gcr.io", "Username": "_token", "Secret": "s3cr3t"}).encode())
    calls = _patch_exec(monkeypatch, process)

    secret = await CredsHelper("gcloud").get_secret("gcr.io")

    assert secret == "s3cr3t"
    assert calls == [("docker-credential-gcloud", "get")]
    assert process.stdin_data == b"gcr.io"


@pytest.mark.asyncio
async def test_creds_helper_failure_returns_none(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    _patch_exec(monkeypatch, FakeProcess(1, stderr=b"credentials not found in native keychain"))

    with caplog.at_level(logging.WARNING):
        secret = await CredsHelper("osxkeychain").get_secret("my-reg.io")

    assert secret is None
    assert "credentials not found" in caplog.text


@pytest.mark.asyncio
async def test_creds_helper_missing_executable_returns_none(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    async def missing(*args: Any, **kwargs: Any) -> FakeProcess:
        raise FileNotFoundError(args[0])

    monkeypatch.setattr(asyncio, "create_subprocess_exec", missing)
    with caplog.at_level(logging.WARNING):
        assert await CredsHelper("nope").get_secret("my-reg.io") is None
    assert "docker-credential-nope" in caplog.text
