"""Dialogue inference: instructions, prompt assembly and the responder boundary."""

from tag_intake.inference.prompts import TAG_INTAKE_SYSTEM_PROMPT, build_prompt
from tag_intake.inference.responder import DialogueResponder, LLMResponder, create_dialogue_agent

__all__ = [
    "DialogueResponder",
    "LLMResponder",
    "TAG_INTAKE_SYSTEM_PROMPT",
    "build_prompt",
    "create_dialogue_agent",
]
