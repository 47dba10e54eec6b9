import pytest

from domain.errors import AggregateProviderFailure, ProviderHardFailure, ProviderSoftFailure
from domain.schemas import AIRequest, SoftFailureResponse, SuccessResponse
from domain.services.provider_resolver import ProviderResolver

from conftest import FakeAI

REQUEST = AIRequest(prompt="How do I tailor my resume?")


@pytest.mark.asyncio
async def test_head_provider_is_called_without_model():
    ai = FakeAI(outcomes={None: SuccessResponse(content="Use keywords.")})

    resolved = await ProviderResolver(ai).resolve(["gpt-4.1-nano", "openai/gpt-4o"], REQUEST)

    assert resolved.provider == "gpt-4.1-nano"
    assert resolved.response.content == "Use keywords."
    assert resolved.failures == []
    assert ai.models == [None]


@pytest.mark.asyncio
async def test_soft_failure_falls_through_to_next_provider_with_model():
    ai = FakeAI(outcomes={
        None: SoftFailureResponse(reason="quota exceeded"),
        "P2": SuccessResponse(content="ok"),
    })

    resolved = await ProviderResolver(ai).resolve(["P1", "P2"], REQUEST)

    assert resolved.provider == "P2"
    assert ai.models == [None, "P2"]
    assert isinstance(resolved.failures[0], ProviderSoftFailure)
    assert resolved.failures[0].detail == "quota exceeded"


@pytest.mark.asyncio
async def test_hard_failure_falls_through_and_stops_at_first_success():
    ai = FakeAI(outcomes={
        None: RuntimeError("connection refused"),
        "P2": RuntimeError("502 Bad Gateway"),
        "P3": SuccessResponse(content="third time"),
        "P4": SuccessResponse(content="never asked"),
    })

    resolved = await ProviderResolver(ai).resolve(["P1", "P2", "P3", "P4"], REQUEST)

    assert resolved.provider == "P3"
    assert ai.models == [None, "P2", "P3"]
    assert [type(f) for f in resolved.failures] == [ProviderHardFailure, ProviderHardFailure]


@pytest.mark.asyncio
async def test_each_provider_is_tried_once_in_caller_order():
    ai = FakeAI(outcomes={None: RuntimeError("down"), "B": RuntimeError("down"), "C": RuntimeError("down")})

    with pytest.raises(AggregateProviderFailure):
        await ProviderResolver(ai).resolve(["A", "B", "C"], REQUEST)

    assert ai.models == [None, "B", "C"]
    assert all(request is REQUEST for request, _ in ai.calls)


@pytest.mark.asyncio
async def test_aggregate_failure_keeps_last_failure_detail():
    ai = FakeAI(outcomes={
        None: RuntimeError("first"),
        "B": SoftFailureResponse(reason="second"),
        "C": RuntimeError("third and last"),
    })

    with pytest.raises(AggregateProviderFailure) as excinfo:
        await ProviderResolver(ai).resolve(["A", "B", "C"], REQUEST)

    failure = excinfo.value
    assert failure.attempted == ["A", "B", "C"]
    assert isinstance(failure.last_failure, ProviderHardFailure)
    assert failure.last_failure.provider == "C"
    assert failure.last_failure.detail == "third and last"
    assert "third and last" in str(failure)


@pytest.mark.asyncio
async def test_empty_provider_list_fails_immediately():
    ai = FakeAI()

    with pytest.raises(AggregateProviderFailure) as excinfo:
        await ProviderResolver(ai).resolve([], REQUEST)

    assert excinfo.value.last_failure is None
    assert ai.calls == []
