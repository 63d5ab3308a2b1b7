"""
Response Aggregator

Fans one prompt out to every ready provider concurrently and reconciles the
replies into a single answer:

- no replies     -> fixed locale-specific fallback (never raises)
- one reply      -> returned with the advisory label
- two or more    -> ranked by a length + medical-keyword confidence score;
                    if the top two share most of their condition keywords
                    the best reply is returned alone as the expert consensus,
                    otherwise every reply is shown with its rank and
                    confidence followed by a "consult a professional" line.

Each provider call is individually bounded by ``timeout`` seconds, and one
provider failing never affects the others.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from ..locale import check_locale, t
from ..providers import (
    ProviderAdapter,
    ProviderError,
    ProviderId,
    ProviderNetworkError,
    ProviderRegistry,
)

logger = logging.getLogger(__name__)

CONFIDENCE_LEXICON = (
    "symptom", "diagnosis", "treatment", "medicine", "doctor", "hospital",
    "লক্ষণ", "রোগ", "চিকিৎসা", "ওষুধ", "ডাক্তার", "হাসপাতাল",
)

CONSENSUS_TERMS = (
    "fever", "headache", "cough", "cold", "flu", "pain", "infection",
    "জ্বর", "মাথাব্যথা", "কাশি", "সর্দি", "ব্যথা", "সংক্রমণ",
)

LENGTH_NORMALIZER = 200
KEYWORD_BONUS = 0.1
CONSENSUS_THRESHOLD = 0.5
SECTION_SEPARATOR = "\n\n---\n\n"


@dataclass
class ProviderResponse:
    provider_id: ProviderId
    text: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "provider": self.provider_id.value,
            "text": self.text,
            "confidence": round(self.confidence, 3),
        }


@dataclass
class AggregatedAnswer:
    text: str
    consensus: bool = False
    responses: List[ProviderResponse] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def best(self) -> Optional[ProviderResponse]:
        return self.responses[0] if self.responses else None

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "consensus": self.consensus,
            "responses": [r.to_dict() for r in self.responses],
            "failures": dict(self.failures),
        }


def score_confidence(text: str) -> float:
    """Length up to 200 chars plus 0.1 per medical keyword, capped at 1.0."""
    lowered = text.lower()
    score = min(len(text) / LENGTH_NORMALIZER, 1.0)
    score += KEYWORD_BONUS * sum(1 for word in CONFIDENCE_LEXICON if word in lowered)
    return min(score, 1.0)


def extract_terms(text: str) -> Set[str]:
    lowered = text.lower()
    return {term for term in CONSENSUS_TERMS if term in lowered}


def keyword_overlap(a: Set[str], b: Set[str]) -> float:
    """|A & B| / max(|A|, |B|); two empty sets share nothing."""
    if not a and not b:
        return 0.0
    return len(a & b) / max(len(a), len(b))


def rank_responses(responses: Iterable[ProviderResponse]) -> List[ProviderResponse]:
    """Descending confidence; ties keep their incoming (registration) order."""
    return sorted(responses, key=lambda r: -r.confidence)


class ResponseAggregator:
    """Concurrent multi-provider query with consensus detection."""

    def __init__(self, registry: ProviderRegistry, timeout: float = 20.0):
        self.registry = registry
        self.timeout = timeout

    async def _call(self, adapter: ProviderAdapter, prompt: str, locale: str):
        """One guarded provider call: returns the reply text or a ProviderError."""
        try:
            return await asyncio.wait_for(adapter.generate(prompt, locale), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs", adapter.provider_id.value, self.timeout)
            return ProviderNetworkError(adapter.provider_id, f"timed out after {self.timeout:g}s")
        except ProviderError as e:
            logger.warning("%s failed: %s", adapter.provider_id.value, e)
            return e

    async def aggregate(self, prompt: str, locale: str = "bn") -> AggregatedAnswer:
        """
        Query all ready providers and combine their replies.

        Args:
            prompt: User question
            locale: "bn" or "en"

        Returns:
            AggregatedAnswer (never raises for provider failures)
        """
        check_locale(locale)
        adapters = self.registry.ready_adapters()
        if not adapters:
            logger.info("No providers configured; returning fallback")

        outcomes = await asyncio.gather(*(self._call(a, prompt, locale) for a in adapters))

        responses, failures = [], {}
        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, ProviderError):
                failures[adapter.provider_id.value] = str(outcome)
            else:
                responses.append(ProviderResponse(adapter.provider_id, outcome, score_confidence(outcome)))
                logger.debug("%s replied (%d chars)", adapter.provider_id.value, len(outcome))

        return self.combine(responses, locale, failures)

    def combine(
        self,
        responses: List[ProviderResponse],
        locale: str = "bn",
        failures: Optional[Dict[str, str]] = None,
    ) -> AggregatedAnswer:
        """Reconcile already-collected replies into one answer."""
        check_locale(locale)
        failures = dict(failures or {})

        if not responses:
            return AggregatedAnswer(t("aggregator.fallback", locale), failures=failures)

        ranked = rank_responses(responses)
        if len(ranked) == 1:
            return AggregatedAnswer(
                t("aggregator.advisory_label", locale) + ranked[0].text,
                responses=ranked,
                failures=failures,
            )

        best, runner_up = ranked[0], ranked[1]
        overlap = keyword_overlap(extract_terms(best.text), extract_terms(runner_up.text))
        consensus = overlap > CONSENSUS_THRESHOLD
        logger.info(
            "%d replies, top-two keyword overlap %.2f, consensus=%s",
            len(ranked), overlap, consensus,
        )

        header = t("aggregator.expert_header", locale)
        if consensus:
            text = header + t("aggregator.consensus_label", locale) + best.text
        else:
            sections = [
                t("aggregator.analysis_label", locale, rank=i, confidence=round(r.confidence * 100)) + r.text
                for i, r in enumerate(ranked, start=1)
            ]
            text = header + SECTION_SEPARATOR.join(sections) + "\n\n" + t("aggregator.consult_professional", locale)

        return AggregatedAnswer(text, consensus=consensus, responses=ranked, failures=failures)
