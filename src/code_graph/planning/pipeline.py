"""Combine retrieved context with a prompt and ask an LLM for a step plan."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Protocol

from pydantic import ValidationError

from code_graph.models import Plan, PlanStep, StepType
from code_graph.prompts.prompt_layer import load_prompt, render_prompt
from code_graph.retrieval.retriever import ContextRetriever

logger = logging.getLogger(__name__)

NO_CONTEXT = "(no relevant code found)"
FALLBACK_THOUGHT = "Could not automatically generate a plan for this request."


class TextGenerator(Protocol):
    def generate(self, prompt: str, system_prompt: str = "") -> str: ...


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_plan(response: str) -> Plan:
    """Parse an LLM reply into a Plan, falling back to a single THINK step."""
    try:
        data = json.loads(_strip_fences(response))
        if isinstance(data, list):
            data = {"steps": data}
        return Plan.model_validate(data)
    except (ValueError, ValidationError):
        logger.warning("LLM reply is not a valid plan: %.200s", response)
        return Plan(steps=[PlanStep(type=StepType.THINK, thought=FALLBACK_THOUGHT)])


class PlanningPipeline:
    """Retrieval + generation. Executing the returned steps is up to the caller."""

    def __init__(self, retriever: ContextRetriever, llm_service: TextGenerator | None = None) -> None:
        self.retriever = retriever
        self._llm_service = llm_service

    @property
    def llm_service(self) -> TextGenerator:
        if self._llm_service is None:
            from code_graph.config import get_model_config
            from code_graph.services.llm_service import LLMService

            self._llm_service = LLMService(get_model_config("planner"))
        return self._llm_service

    def build_instruction(self, prompt: str, context: str) -> str:
        return render_prompt(
            "plan",
            step_types=", ".join(t.value for t in StepType),
            prompt=prompt,
            context=context or NO_CONTEXT,
        )

    async def create_plan(self, prompt: str) -> Plan:
        context = await self.retriever.get_context_for_prompt(prompt)
        instruction = self.build_instruction(prompt, context)
        logger.info("Requesting plan (%d chars of instruction)", len(instruction))
        response = await asyncio.to_thread(
            self.llm_service.generate, instruction, load_prompt("plan_system"),
        )
        plan = parse_plan(response)
        logger.info("Plan has %d steps", len(plan.steps))
        return plan
