"""
Polling Coordinator — terminação, estados terminais, uma consulta
por vez e cancelamento.
"""

import asyncio

import pytest

from src.core.entities.analysis_result import AnalysisStatus
from src.core.entities.document import FileType, SubmissionHandle
from src.core.errors import (
    AnalysisFailedError,
    ErrorSide,
    MalformedResponseError,
    PollingTimeoutError,
    TransportError,
)
from src.core.interfaces.analysis_transport import IAnalysisTransport
from src.core.use_cases.poll_analysis import PollingCoordinator, PollSession, PollState
from tests.payloads import ANALYSIS_ID, async_payload

PROCESSING = {"id": ANALYSIS_ID, "status": "processing"}
FAILED = {"id": ANALYSIS_ID, "status": "failed"}
COMPLETED = async_payload(fraude={"isFraudulento": True})


class ScriptedTransport(IAnalysisTransport):
    """Devolve as respostas na ordem; a última se repete."""

    def __init__(self, responses, on_fetch=None):
        self.responses = list(responses)
        self.on_fetch = on_fetch
        self.fetches = 0
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_by_id(self, analysis_id: str) -> dict:
        self.fetches += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.on_fetch:
                self.on_fetch(self.fetches)
            item = self.responses[min(self.fetches, len(self.responses)) - 1]
            if isinstance(item, Exception):
                raise item
            return item
        finally:
            self.in_flight -= 1

    async def submit_sync(self, file):
        raise NotImplementedError

    async def submit_async(self, file):
        raise NotImplementedError

    async def health_check(self):
        raise NotImplementedError


@pytest.fixture
def handle() -> SubmissionHandle:
    return SubmissionHandle(id=ANALYSIS_ID, file_name="boleto.png", file_size=72, file_type=FileType.PNG)


def make_session(transport, handle, max_attempts=30, interval_ms=0) -> PollSession:
    return PollingCoordinator(transport).start(handle, max_attempts=max_attempts, interval_ms=interval_ms)


def test_completes_on_last_allowed_attempt(handle):
    transport = ScriptedTransport([PROCESSING] * 29 + [COMPLETED])
    session = make_session(transport, handle)

    result = asyncio.run(session.run())

    assert result.status == AnalysisStatus.FRAUDULENT
    assert transport.fetches == 30
    assert session.attempt == 30
    assert session.state == PollState.COMPLETED


def test_times_out_without_extra_fetch(handle):
    transport = ScriptedTransport([PROCESSING])
    session = make_session(transport, handle)

    with pytest.raises(PollingTimeoutError) as exc:
        asyncio.run(session.run())

    assert transport.fetches == 30
    assert exc.value.attempts == 30
    assert exc.value.analysis_id == ANALYSIS_ID
    assert session.state == PollState.TIMED_OUT


@pytest.mark.parametrize("max_attempts", [1, 3, 7])
def test_never_exceeds_max_attempts(handle, max_attempts):
    transport = ScriptedTransport([PROCESSING])

    with pytest.raises(PollingTimeoutError):
        asyncio.run(make_session(transport, handle, max_attempts=max_attempts).run())

    assert transport.fetches == max_attempts


def test_server_failure_stops_immediately(handle):
    transport = ScriptedTransport([PROCESSING] * 4 + [FAILED, COMPLETED])
    session = make_session(transport, handle)

    with pytest.raises(AnalysisFailedError):
        asyncio.run(session.run())

    assert transport.fetches == 5
    assert session.state == PollState.FAILED


def test_fetch_error_is_not_retried(handle):
    boom = TransportError("Erro no servidor", ErrorSide.SERVER_SIDE, status_code=503)
    transport = ScriptedTransport([PROCESSING, PROCESSING, boom, COMPLETED])
    session = make_session(transport, handle)

    with pytest.raises(TransportError) as exc:
        asyncio.run(session.run())

    assert exc.value is boom
    assert transport.fetches == 3
    assert session.state == PollState.FAILED


def test_unknown_status_is_malformed(handle):
    transport = ScriptedTransport([{"status": "queued"}])

    with pytest.raises(MalformedResponseError):
        asyncio.run(make_session(transport, handle).run())

    assert transport.fetches == 1


def test_completed_with_unknown_shape_fails_session(handle):
    transport = ScriptedTransport([{"status": "completed"}])
    session = make_session(transport, handle)

    with pytest.raises(MalformedResponseError):
        asyncio.run(session.run())

    assert session.state == PollState.FAILED


def test_only_one_fetch_in_flight(handle):
    transport = ScriptedTransport([PROCESSING] * 10 + [COMPLETED])

    asyncio.run(make_session(transport, handle).run())

    assert transport.max_in_flight == 1


def test_cancel_during_fetch_discards_result(handle):
    sessions = []
    transport = ScriptedTransport(
        [PROCESSING, COMPLETED],
        on_fetch=lambda n: sessions[0].cancel() if n == 2 else None,
    )
    session = make_session(transport, handle)
    sessions.append(session)

    async def main():
        with pytest.raises(asyncio.CancelledError):
            await session.run()

    asyncio.run(main())

    assert transport.fetches == 2
    assert session.state == PollState.CANCELLED


def test_cancel_while_waiting_stops_scheduling(handle):
    transport = ScriptedTransport([PROCESSING])
    session = make_session(transport, handle, interval_ms=60_000)

    async def main():
        task = asyncio.create_task(session.run())
        while transport.fetches < 1 or transport.in_flight:
            await asyncio.sleep(0)
        assert session.cancel() is True
        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=5)

    asyncio.run(main())

    assert transport.fetches == 1
    assert session.state == PollState.CANCELLED


def test_cancel_before_start_fetches_nothing(handle):
    transport = ScriptedTransport([COMPLETED])
    session = make_session(transport, handle)
    session.cancel()

    async def main():
        with pytest.raises(asyncio.CancelledError):
            await session.run()

    asyncio.run(main())

    assert transport.fetches == 0


def test_cancel_after_completion_is_noop(handle):
    session = make_session(ScriptedTransport([COMPLETED]), handle)
    asyncio.run(session.run())

    assert session.cancel() is False
    assert session.state == PollState.COMPLETED


def test_session_runs_only_once(handle):
    session = make_session(ScriptedTransport([COMPLETED]), handle)
    asyncio.run(session.run())

    with pytest.raises(RuntimeError):
        asyncio.run(session.run())


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"interval_ms": -1}])
def test_invalid_budget_is_rejected(handle, kwargs):
    with pytest.raises(ValueError):
        make_session(ScriptedTransport([COMPLETED]), handle, **kwargs)


def test_coordinator_defaults_apply(handle):
    coordinator = PollingCoordinator(ScriptedTransport([COMPLETED]), max_attempts=5, interval_ms=10)

    session = coordinator.start(handle)

    assert session.max_attempts == 5
    assert session.interval_ms == 10
    assert session.state == PollState.PENDING


def test_independent_sessions_keep_own_counters(handle):
    fast = ScriptedTransport([PROCESSING, COMPLETED])
    slow = ScriptedTransport([PROCESSING] * 4 + [COMPLETED])

    async def main():
        return await asyncio.gather(
            PollingCoordinator(fast).poll(handle, interval_ms=0),
            PollingCoordinator(slow).poll(handle, interval_ms=0),
        )

    results = asyncio.run(main())

    assert all(r.status == AnalysisStatus.FRAUDULENT for r in results)
    assert fast.fetches == 2
    assert slow.fetches == 5
