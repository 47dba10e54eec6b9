"""Ordered fallback across interchangeable AI providers.

Contract of ``ProviderResolver.resolve``:

* providers are tried strictly in the order the caller gives, one at a time;
* each provider is invoked at most once per resolution and never retried;
* the head of the list is called without a model parameter (default tier),
  every later provider with ``model=<provider id>``;
* the first success wins; when every provider fails the caller gets an
  ``AggregateProviderFailure`` holding the most recent failure.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from domain.errors import (
    AggregateProviderFailure,
    ProviderFailure,
    ProviderHardFailure,
    ProviderSoftFailure,
)
from domain.ports import AICapability
from domain.schemas import AIRequest, AIResponse, SoftFailureResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedResponse:
    provider: str
    response: AIResponse
    failures: List[ProviderFailure] = field(default_factory=list)


class ProviderResolver:
    def __init__(self, ai: AICapability):
        self._ai = ai

    async def _attempt(self, provider: str, request: AIRequest, use_default: bool) -> AIResponse:
        model: Optional[str] = None if use_default else provider
        try:
            response = await self._ai.invoke(request, model=model)
        except Exception as exc:
            raise ProviderHardFailure(provider, str(exc) or exc.__class__.__name__) from exc
        if isinstance(response, SoftFailureResponse):
            raise ProviderSoftFailure(provider, response.reason)
        return response

    async def resolve(self, providers: Sequence[str], request: AIRequest) -> ResolvedResponse:
        failures: List[ProviderFailure] = []
        for index, provider in enumerate(providers):
            logger.info("Trying provider %s (%d/%d)", provider, index + 1, len(providers))
            try:
                response = await self._attempt(provider, request, use_default=index == 0)
            except ProviderFailure as failure:
                logger.warning("Provider %s failed: %s", provider, failure.detail)
                failures.append(failure)
                continue
            logger.info("Provider %s answered", provider)
            return ResolvedResponse(provider=provider, response=response, failures=failures)

        last = failures[-1] if failures else None
        logger.error("No provider produced a usable response (tried %d)", len(failures))
        raise AggregateProviderFailure([f.provider for f in failures], last)
