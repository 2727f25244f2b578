# anonychat/domain/game/generator.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError

from anonychat.domain.common.errors import ExternalServiceError
from anonychat.domain.game.catalog import GameSpec

logger = logging.getLogger(__name__)

ANSWER_FORMAT = (
    'Balas HANYA dengan JSON satu baris berformat '
    '{"question": "<pertanyaan>", "answer": "<jawaban>"} tanpa teks lain.'
)


class GeneratedQuestion(BaseModel):
    prompt: str = Field(min_length=1)
    answer: str = Field(min_length=1)


def build_prompt(game: GameSpec) -> str:
    return f"{game.instruction} {ANSWER_FORMAT}"


def _json_object(raw: str) -> Dict[str, Any]:
    """
    Pull the first JSON object out of a reply that may be wrapped in prose
    or a ``` fence.
    """
    start = raw.find("{")
    end = raw.rfind("}")
    if start < 0 or end <= start:
        raise ExternalServiceError("no JSON object in generated question")
    try:
        data = json.loads(raw[start:end + 1])
    except ValueError as e:
        raise ExternalServiceError(f"malformed generated question: {e}") from e
    if not isinstance(data, dict):
        raise ExternalServiceError("generated question is not an object")
    return data


def parse_question(raw: str) -> GeneratedQuestion:
    data = _json_object(raw or "")
    prompt = data.get("question", data.get("prompt"))
    answer = data.get("answer")
    if isinstance(answer, (int, float)) and not isinstance(answer, bool):
        answer = str(answer)
    try:
        return GeneratedQuestion(
            prompt=str(prompt).strip() if isinstance(prompt, str) else "",
            answer=answer.strip() if isinstance(answer, str) else "",
        )
    except ValidationError as e:
        raise ExternalServiceError("generated question is missing question/answer") from e


async def generate_question(textgen, game: GameSpec) -> GeneratedQuestion:
    """One generation call; failures surface as ExternalServiceError, no retry."""
    raw = await textgen.generate(build_prompt(game))
    q = parse_question(raw)
    logger.debug("generated %s question", game.key)
    return q
