"""
Carousel Generator
==================

Runs one AI fill: analyze the template, ask the text-generation service
for slot content and build new slides. Only a complete, successful build
is returned; every failure raises GenerationFailed.
"""

import logging
from typing import Optional

from ..errors import GenerationFailed
from ..models.canvas_models import CanvasTemplate
from ..models.generation_models import CarouselBuildResult, CarouselGenerationInput
from ..templates.analyzer import analyze_template
from .carousel_builder import build_slides_from_content, score_content_quality
from .llm_service import LLMService, get_llm_service

logger = logging.getLogger(__name__)


class CarouselGenerator:
    """
    Fills template slots with generated text.

    Args:
        llm: Text-generation collaborator (the shared LLMService by default)
    """

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or get_llm_service()

    async def generate(
        self,
        template: CanvasTemplate,
        input: CarouselGenerationInput
    ) -> CarouselBuildResult:
        """
        Generate a filled carousel from a template.

        Args:
            template: Template to fill
            input: Topic, tone and CTA settings

        Returns:
            CarouselBuildResult with freshly built slides

        Raises:
            GenerationFailed: template has no slots, upstream failure, or
                a response without slot content
        """
        analysis = analyze_template(template)
        if analysis.total_slots == 0:
            raise GenerationFailed(f"Template '{template.name}' has no text slots to fill")

        logger.info(
            f"[CAROUSEL-GEN] Generating for template={template.id}, "
            f"slots={analysis.total_slots}, tone={input.tone.value}"
        )

        try:
            response = await self.llm.generate_carousel_content(input, analysis)
        except GenerationFailed:
            raise
        except Exception as e:
            logger.error(f"[CAROUSEL-GEN] Generation request failed: {e}")
            raise GenerationFailed("Content generation request failed", upstream_error=str(e)) from e

        if response.success is not True:
            message = response.error or "Content generation failed"
            logger.error(f"[CAROUSEL-GEN] Upstream failure: {message}")
            raise GenerationFailed(message, upstream_error=response.error)

        if response.slots is None:
            raise GenerationFailed("Generation response contained no slot content")

        result = build_slides_from_content(template, analysis, response.slots)
        result.quality = score_content_quality(analysis, response.slots)
        logger.info(
            f"[CAROUSEL-GEN] Built {len(result.slides)} slides, "
            f"{result.filled_slots}/{result.total_slots} slots filled"
        )
        return result
