"""
Turns a raw language-model completion into task candidates.

The completion is free text that should contain a JSON array of objects.
We do not tokenize it: the first `[` that is eventually followed by `{`, up
to the last `}` closing an array, is taken as the payload.
"""

import json
import logging
import re
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from llm.schemas import ExtractedTask
from taskboard.errors import MalformedExtraction, NoExtractableJSON
from taskboard.models import TaskCandidate

logger = logging.getLogger(__name__)

_ARRAY_OF_OBJECTS = re.compile(r"\[\s*\{.*\}\s*\]", re.DOTALL)
# an empty array counts only as the whole reply or its standalone last token
_EMPTY_ARRAY = re.compile(r"(?:^|[\s:])\[\s*\]\s*(?:```)?\s*$")


def find_json_array(completion: str) -> Optional[str]:
    """Return the first array-of-objects looking substring, or None."""
    match = _ARRAY_OF_OBJECTS.search(completion or "")
    return match.group(0) if match else None


def parse_candidates(
    completion: str,
    source_text: str,
    folder_id: Optional[str] = None,
) -> List[TaskCandidate]:
    """
    Map every element of the extracted array to a TaskCandidate.

    Raises NoExtractableJSON when no array is present and MalformedExtraction
    when the array does not parse or an element is not task-shaped. A bare
    `[]` means the model found nothing actionable and yields no candidates.
    """
    payload = find_json_array(completion)
    if payload is None:
        if _EMPTY_ARRAY.search((completion or "").strip()):
            logger.info("Completion contained an empty task array")
            return []
        raise NoExtractableJSON(
            "No valid JSON found in response",
            details={"completion": (completion or "")[:200]},
        )

    try:
        items = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedExtraction(f"Could not parse extracted JSON: {e.msg}") from e

    if not isinstance(items, list):
        raise MalformedExtraction("Extracted JSON is not an array")

    candidates = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MalformedExtraction(
                f"Extracted element {index} is not an object",
                details={"index": index},
            )
        try:
            extracted = ExtractedTask.model_validate(item)
        except PydanticValidationError as e:
            raise MalformedExtraction(
                f"Extracted element {index} is not a valid task",
                details={"index": index, "errors": str(e)},
            ) from e

        candidates.append(
            TaskCandidate(
                text=extracted.text,
                priority=extracted.priority,
                category=extracted.category,
                completed=False,
                flagged=False,
                status="todo",
                source_text=source_text,
                folder_id=folder_id,
            )
        )

    logger.info(f"Parsed {len(candidates)} task candidates from completion")
    return candidates
