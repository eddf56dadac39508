"""
Top-level itinerary generation: try the model, extend, or degrade a tier.

Tiers, best first: ai-full, ai-extended, real-places-sample, generic-sample.
generate() always returns a complete itinerary; failures only lower the tier.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from tripwise.core.itinerary_planner import (
    build_generic_sample,
    build_real_places_sample,
    extend,
)
from tripwise.core.llm_provider import GenerationFailure, LLMProvider, ITINERARY_OPTIONS
from tripwise.core.normalizer import NormalizationFailure, normalize_itinerary
from tripwise.core.place_aggregator import PlaceAggregator
from tripwise.core.prompts import build_itinerary_prompt
from tripwise.core.schemas import AI_FIDELITIES, Fidelity, Itinerary, Place, TripRequest
from tripwise.core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    itinerary: Itinerary
    places: list[Place] = field(default_factory=list)
    debug_info: dict[str, Any] = field(default_factory=dict)
    error_details: str | None = None

    @property
    def fidelity(self) -> Fidelity:
        return self.itinerary.fidelity

    @property
    def ai_powered(self) -> bool:
        return self.itinerary.fidelity in AI_FIDELITIES

    @property
    def real_places(self) -> bool:
        return bool(self.places) and self.itinerary.fidelity != "generic-sample"


class ItineraryOrchestrator:
    """Sequences place aggregation, generation, repair and extension."""

    def __init__(self, aggregator: PlaceAggregator, llm: LLMProvider, settings: Settings):
        self.aggregator = aggregator
        self.llm = llm
        self.settings = settings

    def _debug_info(self, request: TripRequest, ai_days: int, places: list[Place]) -> dict[str, Any]:
        return {
            "ollama_url": self.llm.base_url,
            "model": self.llm.model,
            "ai_days_requested": ai_days,
            "total_days": request.duration_days,
            "places_found": len(places),
        }

    async def _attempt_ai(
        self, request: TripRequest, places: list[Place], ai_days: int
    ) -> Itinerary | GenerationFailure | NormalizationFailure:
        prompt = build_itinerary_prompt(request, places, ai_days)
        raw = await self.llm.generate(
            prompt,
            options=ITINERARY_OPTIONS,
            timeout=self.settings.generation_timeout_seconds,
        )
        if isinstance(raw, GenerationFailure):
            return raw

        partial = normalize_itinerary(raw, request)
        if isinstance(partial, NormalizationFailure):
            return partial

        extended = extend(partial, request, places)
        added = request.duration_days - len(partial.days)
        fidelity: Fidelity = "ai-extended" if added > 0 else "ai-full"
        return extended.model_copy(update={"fidelity": fidelity})

    async def generate(self, request: TripRequest) -> GenerationResult:
        """
        Produce an itinerary for the request at the best tier available.

        Never raises: an unexpected exception anywhere yields the
        generic-sample tier with error_details set.
        """
        ai_days = min(self.settings.ai_max_days, request.duration_days)
        places: list[Place] = []
        debug_info = self._debug_info(request, ai_days, places)

        try:
            places = await self.aggregator.collect(request.destination, request.interests)
            debug_info["places_found"] = len(places)

            outcome = await self._attempt_ai(request, places, ai_days)
            if isinstance(outcome, Itinerary):
                logger.info(
                    f"[Orchestrator] {outcome.fidelity}: {len(outcome.days)} days for "
                    f"{request.destination}"
                )
                return GenerationResult(itinerary=outcome, places=places, debug_info=debug_info)

            if isinstance(outcome, GenerationFailure):
                debug_info["failure"] = outcome.kind
                debug_info["failure_detail"] = outcome.detail
                logger.warning(
                    f"[Orchestrator] Generation failed ({outcome.kind}: {outcome.detail}), "
                    "degrading"
                )
            else:
                debug_info["failure"] = "malformed"
                debug_info["failure_detail"] = outcome.reason
                logger.warning(
                    f"[Orchestrator] Normalization failed ({outcome.reason}), degrading"
                )

            if not places:
                logger.warning("[Orchestrator] No places available, using generic-sample")
                itinerary = build_generic_sample(request)
            else:
                itinerary = build_real_places_sample(request, places)

            logger.info(
                f"[Orchestrator] {itinerary.fidelity}: {len(itinerary.days)} days for "
                f"{request.destination}"
            )
            return GenerationResult(itinerary=itinerary, places=places, debug_info=debug_info)

        except Exception as e:
            logger.exception(f"[Orchestrator] Unexpected error, using generic-sample: {e}")
            debug_info["failure"] = "unexpected"
            return GenerationResult(
                itinerary=build_generic_sample(request),
                places=places,
                debug_info=debug_info,
                error_details=str(e),
            )
