"""Injects retrieved documents into a prompt or message list."""

from __future__ import annotations

from dataclasses import replace

from rag_gateway.generation.prompt_templates import (
    PROMPT_WITH_CONTEXT,
    SYSTEM_REINFORCEMENT,
    format_context,
)
from rag_gateway.models.domain import Document, GenerationRequest


class ContextInjector:
    """Applies the single-point-of-truth policy to a request.

    With no documents every method hands back its input unchanged, so the
    no-match path is indistinguishable from an unaugmented request.
    """

    def build(self, request: GenerationRequest, docs: list[Document]) -> GenerationRequest:
        if not docs:
            return request
        if request.is_chat:
            return replace(request, messages=self.build_messages(request.messages or [], docs))
        prompt, system = self.build_prompt(request.prompt or "", request.system, docs)
        return replace(request, prompt=prompt, system=system)

    def build_prompt(
        self, prompt: str, system: str | None, docs: list[Document]
    ) -> tuple[str, str | None]:
        if not docs:
            return prompt, system
        context = format_context([d.content for d in docs])
        enhanced_prompt = PROMPT_WITH_CONTEXT.format(context=context, prompt=prompt)
        enhanced_system = f"{system}\n\n{SYSTEM_REINFORCEMENT}" if system else SYSTEM_REINFORCEMENT
        return enhanced_prompt, enhanced_system

    def build_messages(self, messages: list[dict], docs: list[Document]) -> list[dict]:
        if not docs:
            return messages
        context = format_context([d.content for d in docs])
        enhanced = [dict(m) for m in messages]

        for message in enhanced:
            if message.get("role") == "system":
                original = message.get("content") or ""
                message["content"] = f"{original}\n\n{context}" if original else context
                return enhanced

        return [{"role": "system", "content": context}, *enhanced]
