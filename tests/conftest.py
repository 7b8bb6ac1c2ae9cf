"""Shared pytest fixtures for HyperCards tests."""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import httpx
import pytest

from hypercards.api.client import GenerationServiceClient
from hypercards.api.models import StatusResponse
from hypercards.core.config import HypercardsConfig
from hypercards.core.errors import SignerCancelled
from hypercards.core.models import CreationRequest, JobHandle, JobStatus, Visibility


class ManualClock:
    """Replacement for ``asyncio.sleep`` that only wakes up on :meth:`tick`.

    Every requested delay is recorded so tests can assert the polling
    cadence without waiting in real time.
    """

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._waiters: list[asyncio.Future] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def pending(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def tick(self) -> None:
        """Wake every sleeper, then let the woken tasks run."""
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
        await settle()


async def settle(rounds: int = 20) -> None:
    """Give scheduled tasks a chance to run to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ScriptedStatusClient:
    """Status client returning scripted responses in order.

    Script items are ``StatusResponse`` objects or exceptions to raise. When
    the script runs out, ``generating`` is returned. Setting ``gate`` to an
    ``asyncio.Event`` holds every request until the event is set.
    """

    def __init__(self, script=()) -> None:
        self.script = list(script)
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.outstanding = 0
        self.max_outstanding = 0
        self.cancelled = 0

    async def get_status(self, job_id: str) -> StatusResponse:
        self.calls.append(job_id)
        self.outstanding += 1
        self.max_outstanding = max(self.max_outstanding, self.outstanding)
        try:
            if self.gate is not None:
                await self.gate.wait()
            item = self.script.pop(0) if self.script else status("generating")
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.outstanding -= 1

        if isinstance(item, Exception):
            raise item
        return item


class FakeSigner:
    """Payment signer double recording every amount it is asked to sign."""

    payer = "0x00000000000000000000000000000000000000aa"

    def __init__(self, header: str | None = "signed-payment-header", error: Exception | None = None):
        self.header = header
        self.error = error
        self.calls: list[str] = []

    async def sign(self, amount: str) -> str | None:
        self.calls.append(amount)
        if self.error is not None:
            raise self.error
        return self.header


def status(value: str, **fields) -> StatusResponse:
    """Build a status response, e.g. ``status("completed", word_count=420)``."""
    return StatusResponse.model_validate({"status": value, **fields})


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> HypercardsConfig:
    """Create a test configuration with a temporary data directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        HypercardsConfig instance for testing
    """
    return HypercardsConfig(
        _env_file=None,
        api_base_url="http://testserver/api",
        data_dir=str(temp_dir / "data"),
        poll_interval_seconds=5.0,
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def status_client() -> ScriptedStatusClient:
    return ScriptedStatusClient()


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def cancelling_signer() -> FakeSigner:
    """Signer whose operator dismisses the prompt."""
    return FakeSigner(error=SignerCancelled())


@pytest.fixture
def make_client(test_config: HypercardsConfig) -> Callable[..., GenerationServiceClient]:
    """Factory building a client whose HTTP traffic goes to ``handler``.

    Returns:
        Function taking an ``httpx.MockTransport`` handler
    """

    def _make(handler) -> GenerationServiceClient:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url=test_config.api_base_url,
        )
        return GenerationServiceClient(settings=test_config, http_client=http_client)

    return _make


@pytest.fixture
def valid_request() -> CreationRequest:
    """Creation request matching the documented happy-path scenario."""
    from decimal import Decimal

    return CreationRequest(
        theme_text="A warm holiday greeting",
        target_resource_id="bonfire-1",
        visibility=Visibility.PUBLIC,
        quoted_price_usd=Decimal("9.99"),
    )


@pytest.fixture
def generating_handle() -> JobHandle:
    return JobHandle(id="abc123", status=JobStatus.GENERATING)
