"""
Parsing of model replies that are meant to be a JSON object.

Models wrap JSON in code fences, add a sentence of preamble, use smart or
single quotes, leave trailing commas and write Python literals. The reply
is parsed strictly first; if that fails, exactly one repair pass runs and
the result is parsed again. A reply that still does not parse, or parses to
something other than an object, raises ClassificationError.
"""

import json
import logging
import re
from typing import Any, Dict, List, Tuple

from tradeline.classifier.models import ClassificationError

logger = logging.getLogger(__name__)

_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_PY_LITERALS = {"None": "null", "True": "true", "False": "false"}
_PY_LITERAL = re.compile(r"\b(None|True|False)\b")


def parse_model_json(text: str) -> Dict[str, Any]:
    """Parse a model reply into a dict, repairing it once if needed.

    Raises:
        ClassificationError: Empty reply, unrepairable JSON or a non-object.
    """
    if not isinstance(text, str) or not text.strip():
        raise ClassificationError("Model returned no output")

    try:
        parsed = json.loads(text.strip())
    except json.JSONDecodeError:
        repaired = repair_json_text(text)
        try:
            parsed = json.loads(repaired)
        except json.JSONDecodeError as exc:
            logger.warning(f"Model output parse failed after repair: {text[:200]!r}")
            raise ClassificationError("Failed to parse model output") from exc

    if not isinstance(parsed, dict):
        raise ClassificationError(
            f"Model output is a JSON {type(parsed).__name__}, expected an object"
        )
    return parsed


def repair_json_text(text: str) -> str:
    """Apply the repair pass to a reply that failed strict parsing."""
    text = _strip_code_fences(text.strip())

    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        text = text[start : end + 1]

    text = text.translate(_SMART_QUOTES)

    pieces = []
    for is_string, chunk in _split_strings(text):
        if not is_string:
            chunk = _PY_LITERAL.sub(lambda m: _PY_LITERALS[m.group(1)], chunk)
            chunk = _TRAILING_COMMA.sub(r"\1", chunk)
        pieces.append(chunk)
    return "".join(pieces)


def _strip_code_fences(text: str) -> str:
    if text.startswith("```"):
        lines = text.split("\n")
        # Remove first line (```json or ```)
        lines = lines[1:]
        # Remove last line (```)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def _split_strings(text: str) -> List[Tuple[bool, str]]:
    """Split text into string literals and the code between them.

    Single-quoted literals come back re-quoted with double quotes so the
    caller only ever sees JSON-style strings.
    """
    pieces: List[Tuple[bool, str]] = []
    buf: List[str] = []
    i, n = 0, len(text)

    while i < n:
        quote = text[i]
        if quote not in ('"', "'"):
            buf.append(quote)
            i += 1
            continue

        if buf:
            pieces.append((False, "".join(buf)))
            buf = []

        j = i + 1
        body: List[str] = []
        while j < n and text[j] != quote:
            if text[j] == "\\" and j + 1 < n:
                body.append(text[j : j + 2])
                j += 2
                continue
            body.append(text[j])
            j += 1

        literal = "".join(body)
        if quote == "'":
            literal = literal.replace("\\'", "'").replace('"', '\\"')
        pieces.append((True, f'"{literal}"'))
        i = j + 1

    if buf:
        pieces.append((False, "".join(buf)))
    return pieces
