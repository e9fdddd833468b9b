"""Request shaping and response extraction for each endpoint shape."""

from __future__ import annotations

from dataclasses import dataclass

from rag_gateway.models.domain import Endpoint, GenerationRequest, GenerationResult


def _int_or_none(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _base_fields(req: GenerationRequest) -> dict:
    payload: dict = {"model": req.model, "stream": req.stream}
    options = dict(req.options or {})
    if req.temperature is not None:
        options.setdefault("temperature", req.temperature)
        payload["temperature"] = req.temperature
    if options:
        payload["options"] = options
    return payload


def flatten_messages(messages: list[dict]) -> tuple[str, str | None]:
    """Render a message list as a (prompt, system) pair."""
    system_parts = [m.get("content") or "" for m in messages if m.get("role") == "system"]
    turns = [m for m in messages if m.get("role") != "system"]
    if len(turns) == 1:
        prompt = turns[0].get("content") or ""
    else:
        lines = [f"{(m.get('role') or 'user').capitalize()}: {m.get('content') or ''}" for m in turns]
        lines.append("Assistant:")
        prompt = "\n".join(lines)
    system = "\n\n".join(p for p in system_parts if p) or None
    return prompt, system


@dataclass(frozen=True)
class ChatShape:
    path: str
    endpoint: Endpoint = Endpoint.CHAT

    def build_payload(self, req: GenerationRequest) -> dict:
        if req.messages is not None:
            messages = [dict(m) for m in req.messages]
        else:
            messages = []
            if req.system:
                messages.append({"role": "system", "content": req.system})
            messages.append({"role": "user", "content": req.prompt or ""})
        return {**_base_fields(req), "messages": messages}

    def extract(self, raw: dict) -> GenerationResult:
        # Ollama native: {"message": {...}, "prompt_eval_count", "eval_count", "done_reason"}
        # OpenAI style: {"choices": [{"message": {...}, "finish_reason"}], "usage": {...}}
        if "choices" in raw:
            choices = raw.get("choices") or [{}]
            first = choices[0] or {}
            usage = raw.get("usage") or {}
            return GenerationResult(
                text=(first.get("message") or {}).get("content") or "",
                prompt_token_count=_int_or_none(usage.get("prompt_tokens")),
                completion_token_count=_int_or_none(usage.get("completion_tokens")),
                finish_reason=first.get("finish_reason"),
            )
        return GenerationResult(
            text=(raw.get("message") or {}).get("content") or "",
            prompt_token_count=_int_or_none(raw.get("prompt_eval_count")),
            completion_token_count=_int_or_none(raw.get("eval_count")),
            finish_reason=raw.get("done_reason"),
        )


@dataclass(frozen=True)
class CompletionShape:
    path: str
    endpoint: Endpoint = Endpoint.COMPLETION

    def build_payload(self, req: GenerationRequest) -> dict:
        if req.messages is not None:
            prompt, system = flatten_messages(req.messages)
        else:
            prompt, system = req.prompt or "", req.system
        payload = {**_base_fields(req), "prompt": prompt}
        if system:
            payload["system"] = system
        return payload

    def extract(self, raw: dict) -> GenerationResult:
        return GenerationResult(
            text=raw.get("response") or "",
            prompt_token_count=_int_or_none(raw.get("prompt_eval_count")),
            completion_token_count=_int_or_none(raw.get("eval_count")),
            finish_reason=raw.get("done_reason"),
        )


EndpointShape = ChatShape | CompletionShape


def build_shapes(chat_path: str = "/api/chat", completion_path: str = "/api/generate") -> dict[Endpoint, EndpointShape]:
    return {
        Endpoint.CHAT: ChatShape(path=chat_path),
        Endpoint.COMPLETION: CompletionShape(path=completion_path),
    }
