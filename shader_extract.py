"""Turn a free-form LLM reply into a validated vertex/fragment shader pair."""

import bisect
import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

ENTRY_POINT_MARKER = "void main"

MISSING_MAIN_ERROR = "Generated shaders missing void main function"
MISSING_FIELDS_ERROR = "Invalid JSON format - missing required shader fields"
UNPARSEABLE_ERROR = "Failed to parse LLM response as JSON"
NETWORK_ERROR_PREFIX = "Network or API error: "

_JSON_FENCE_RE = re.compile(r"^```json\s*")
_OPEN_FENCE_RE = re.compile(r"^```\s*")
_CLOSE_FENCE_RE = re.compile(r"```\s*\Z")

_VERTEX_RE = re.compile("vertex", re.IGNORECASE)
_FRAGMENT_RE = re.compile("fragment", re.IGNORECASE)
_SHADER_RE = re.compile("shader", re.IGNORECASE)


@dataclass(frozen=True)
class ShaderPair:
    vertex_shader: str
    fragment_shader: str
    mode: Any = None
    geometry: Any = None


@dataclass(frozen=True)
class ShaderResult:
    pair: ShaderPair
    display: str

    def to_json(self):
        payload = {
            "vertex_shader": self.pair.vertex_shader,
            "fragment_shader": self.pair.fragment_shader,
        }
        if self.pair.mode is not None:
            payload["mode"] = self.pair.mode
        if self.pair.geometry is not None:
            payload["geometry"] = self.pair.geometry
        payload["raw_code"] = self.display
        return payload


@dataclass(frozen=True)
class ExtractionError:
    """Terminal failure; ``raw_code`` is what the model produced, after sanitizing."""

    message: str
    raw_code: str = ""

    def to_json(self):
        return {"error": self.message, "raw_code": self.raw_code}


class DecodeFailure(enum.Enum):
    PARSE_FAILURE = "parse_failure"
    SCHEMA_MISMATCH = "schema_mismatch"


@dataclass(frozen=True)
class ExtractFailure:
    message: str


def sanitize(raw):
    """Strip markdown code fences and surrounding whitespace from a reply.

    Anything that is not a string (e.g. a reply with no text part) becomes "".
    """
    if not isinstance(raw, str):
        return ""

    text = raw.strip()
    while True:
        stripped = _JSON_FENCE_RE.sub("", text)
        stripped = _CLOSE_FENCE_RE.sub("", stripped)
        stripped = _OPEN_FENCE_RE.sub("", stripped)
        stripped = stripped.strip()
        if stripped == text:
            return text
        text = stripped


def _reject_constant(name):
    raise ValueError(f"{name} is not valid JSON")


def decode_structured(text):
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return DecodeFailure.PARSE_FAILURE

    if not isinstance(data, dict):
        return DecodeFailure.SCHEMA_MISMATCH
    vertex = data.get("vertex_shader")
    fragment = data.get("fragment_shader")
    if not isinstance(vertex, str) or not isinstance(fragment, str):
        return DecodeFailure.SCHEMA_MISMATCH

    return ShaderPair(
        vertex_shader=vertex,
        fragment_shader=fragment,
        mode=data.get("mode"),
        geometry=data.get("geometry"),
    )


def _find_section(text, heading_re, stop_re):
    # A heading is a heading word followed, anywhere later, by "shader". The
    # section runs to the next stop heading or the end of the text. Linear in
    # len(text).
    shaders = list(_SHADER_RE.finditer(text))
    if not shaders:
        return None
    last_shader = shaders[-1].start()

    heading = next(
        (m for m in heading_re.finditer(text) if m.end() <= last_shader), None
    )
    if heading is None:
        return None
    starts = [m.start() for m in shaders]
    start = shaders[bisect.bisect_left(starts, heading.end())].end()

    end = next(
        (m.start() for m in stop_re.finditer(text, start) if m.end() <= last_shader),
        len(text),
    )
    return text[start:end].strip()


def find_vertex_section(text):
    """Return the trimmed text under a "vertex ... shader" heading, if any."""
    return _find_section(text, _VERTEX_RE, _FRAGMENT_RE)


def find_fragment_section(text):
    """Return the trimmed text under a "fragment ... shader" heading, if any."""
    return _find_section(text, _FRAGMENT_RE, _VERTEX_RE)


def validate(vertex, fragment):
    return ENTRY_POINT_MARKER in vertex and ENTRY_POINT_MARKER in fragment


def extract_from_free_text(text):
    """Recover a shader pair from prose with labelled vertex/fragment sections.

    Pairs found this way never carry ``mode`` or ``geometry``.
    """
    vertex = find_vertex_section(text)
    fragment = find_fragment_section(text)
    if vertex is None or fragment is None:
        return ExtractFailure("Could not parse shader format")
    if not validate(vertex, fragment):
        return ExtractFailure("Could not extract valid shaders")
    return ShaderPair(vertex_shader=vertex, fragment_shader=fragment)


def format_display(pair):
    return (
        f"// VERTEX SHADER\n{pair.vertex_shader}\n\n"
        f"// FRAGMENT SHADER\n{pair.fragment_shader}\n"
    )


def _accept(pair):
    return ShaderResult(pair=pair, display=format_display(pair))


def process_response(raw):
    """Run a raw reply through the pipeline: a ShaderResult or an ExtractionError."""
    sanitized = sanitize(raw)
    logger.debug("Sanitized LLM response:\n%s", sanitized)

    decoded = decode_structured(sanitized)
    if isinstance(decoded, ShaderPair):
        if validate(decoded.vertex_shader, decoded.fragment_shader):
            return _accept(decoded)
        logger.warning("Structured response rejected: %s", MISSING_MAIN_ERROR)
        return ExtractionError(MISSING_MAIN_ERROR, sanitized)

    if decoded is DecodeFailure.SCHEMA_MISMATCH:
        logger.warning("Structured response rejected: %s", MISSING_FIELDS_ERROR)
        return ExtractionError(MISSING_FIELDS_ERROR, sanitized)

    logger.info("Response is not JSON, falling back to free-text extraction")
    extracted = extract_from_free_text(sanitized)
    if isinstance(extracted, ExtractFailure):
        logger.warning("Free-text extraction failed: %s", extracted.message)
        return ExtractionError(UNPARSEABLE_ERROR, sanitized)
    return _accept(extracted)


def request_shader(prompt, generate):
    """Ask ``generate`` for a reply to ``prompt`` and extract shaders from it.

    Any exception from ``generate`` becomes an ExtractionError with no raw code.
    """
    try:
        raw = generate(prompt)
    except Exception as e:
        logger.exception("Shader generation call failed")
        return ExtractionError(f"{NETWORK_ERROR_PREFIX}{e}", "")
    return process_response(raw)
