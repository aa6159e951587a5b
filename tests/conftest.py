# tests/conftest.py

from typing import Collection, List, Optional

import pytest

from core.config import AppSettings


class FakeCredentialSource:
    """Credential source returning scripted discovery results.

    Each call to `discover_credentials` pops the next batch (the last batch is
    reused once the script runs out) and records the `excluding` argument. A
    batch that is an exception instance is raised instead.
    """

    def __init__(self, batches: List[List[str]], origin: Optional[str] = "https://alkalimakersuite-pa.clients6.google.com"):
        self._batches = [b if isinstance(b, Exception) else list(b) for b in batches]
        self._origin = origin
        self.discover_calls: List[List[str]] = []
        self.origin_calls = 0

    async def discover_credentials(self, excluding: Collection[str] = ()) -> List[str]:
        self.discover_calls.append(list(excluding))
        batch = self._batches.pop(0) if len(self._batches) > 1 else self._batches[0]
        if isinstance(batch, Exception):
            raise batch
        return [k for k in batch if k not in excluding]

    async def discover_service_origin(self) -> str:
        from core.errors import OriginNotFoundError

        self.origin_calls += 1
        if self._origin is None:
            raise OriginNotFoundError("No API URL found")
        return self._origin


@pytest.fixture
def settings(tmp_path, monkeypatch) -> AppSettings:
    """Settings isolated from any local/user .env file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    return AppSettings(_env_file=None, page_url="https://aistudio.google.com")


@pytest.fixture
def fake_source_factory():
    return FakeCredentialSource
