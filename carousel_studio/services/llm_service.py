"""
LLM Service for Carousel Studio
===============================

Gemini text integration for carousel content generation.
"""

import os
import time
import logging
from typing import Optional, Dict, Any
from pydantic import BaseModel

from ..models.generation_models import (
    CarouselGenerationInput, GeneratedSlotContent, GenerationResponse, TemplateAnalysis
)
from .carousel_prompts import (
    build_carousel_system_prompt, build_carousel_user_prompt, parse_carousel_response,
    truncate_to_fit, validate_content
)

logger = logging.getLogger(__name__)

# Try to import Vertex AI
try:
    import vertexai
    from vertexai.generative_models import GenerativeModel, GenerationConfig
    VERTEXAI_AVAILABLE = True
except ImportError:
    VERTEXAI_AVAILABLE = False
    logger.warning("vertexai not available, AI generation will be disabled")


class LLMConfig(BaseModel):
    """Configuration for LLM service."""
    project_id: str = os.getenv("VERTEX_PROJECT_ID", "carousel-studio")
    location: str = os.getenv("VERTEX_LOCATION", "us-central1")
    text_model: str = os.getenv("CAROUSEL_TEXT_MODEL", "gemini-2.0-flash-001")
    temperature: float = float(os.getenv("CAROUSEL_LLM_TEMPERATURE", "0.7"))
    max_output_tokens: int = int(os.getenv("CAROUSEL_LLM_MAX_TOKENS", "4096"))


class LLMResponse(BaseModel):
    """Response from LLM."""
    success: bool
    content: str = ""
    error: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None


class LLMService:
    """
    Service for Gemini text operations.

    Used for:
    - Filling carousel template slots from a topic
    - Free-form text generation
    """

    def __init__(self, config: Optional[LLMConfig] = None):
        self.config = config or LLMConfig()
        self._initialized = False
        self._text_model = None

    def _initialize(self) -> bool:
        """Initialize Vertex AI and the text model."""
        if self._initialized:
            return True

        if not VERTEXAI_AVAILABLE:
            logger.error("[LLM-SERVICE] vertexai not installed")
            return False

        try:
            vertexai.init(
                project=self.config.project_id,
                location=self.config.location
            )
            self._text_model = GenerativeModel(self.config.text_model)

            self._initialized = True
            logger.info(f"[LLM-SERVICE] Initialized with project={self.config.project_id}")
            return True

        except Exception as e:
            logger.error(f"[LLM-SERVICE] Initialization failed: {e}")
            return False

    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None
    ) -> LLMResponse:
        """
        Generate text response from Gemini.

        Args:
            prompt: User prompt
            system_instruction: Optional system context
            temperature: Override default temperature

        Returns:
            LLMResponse with generated content
        """
        if not self._initialize():
            return LLMResponse(
                success=False,
                error="LLM service not initialized"
            )

        try:
            gen_config = GenerationConfig(
                temperature=self.config.temperature if temperature is None else temperature,
                max_output_tokens=self.config.max_output_tokens,
            )

            full_prompt = prompt
            if system_instruction:
                full_prompt = f"{system_instruction}\n\n{prompt}"

            response = await self._text_model.generate_content_async(
                full_prompt,
                generation_config=gen_config
            )

            content = response.text if response.text else ""

            logger.info(f"[LLM-SERVICE] Generated text, length={len(content)}")

            return LLMResponse(
                success=True,
                content=content
            )

        except Exception as e:
            logger.error(f"[LLM-SERVICE] Text generation failed: {e}")
            return LLMResponse(
                success=False,
                error=str(e)
            )

    async def generate_carousel_content(
        self,
        input: CarouselGenerationInput,
        analysis: TemplateAnalysis
    ) -> GenerationResponse:
        """
        Generate text for every slot of an analyzed template.

        Args:
            input: Topic, tone, audience and CTA settings
            analysis: Slots to fill

        Returns:
            GenerationResponse with one entry per slot returned by the model
        """
        start_time = time.time()

        response = await self.generate_text(
            prompt=build_carousel_user_prompt(input, analysis),
            system_instruction=build_carousel_system_prompt(input, analysis),
        )
        elapsed_ms = (time.time() - start_time) * 1000

        if not response.success:
            return GenerationResponse(
                success=False,
                error=response.error or "Content generation failed",
                model=self.config.text_model,
                generation_time_ms=elapsed_ms
            )

        content = parse_carousel_response(response.content, analysis.slots)
        if content is None:
            return GenerationResponse(
                success=False,
                error="Failed to parse AI response",
                model=self.config.text_model,
                generation_time_ms=elapsed_ms
            )

        is_valid, issues = validate_content(content, analysis.slots)
        if not is_valid:
            logger.warning(f"[LLM-SERVICE] Content validation issues: {issues}")

        # Keep known slots in template order, trimmed to their limits
        slots = []
        for slot in analysis.slots:
            text = content.get(slot.id, "")
            if len(text) > slot.max_length:
                text = truncate_to_fit(text, slot.max_length)
            if text:
                slots.append(GeneratedSlotContent(slot_id=slot.id, content=text))

        logger.info(
            f"[LLM-SERVICE] Carousel content for {analysis.template_id}: "
            f"{len(slots)}/{analysis.total_slots} slots in {elapsed_ms:.0f}ms"
        )

        return GenerationResponse(
            success=True,
            slots=slots,
            model=self.config.text_model,
            generation_time_ms=elapsed_ms
        )


# Singleton instance
_llm_service: Optional[LLMService] = None


def get_llm_service() -> LLMService:
    """Get or create LLM service singleton."""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService()
    return _llm_service
