"""
JSON object extraction for streamed structured output.

The model is asked to answer with a single JSON object, but text may arrive
with leading prose or markdown fences. Extraction locates the first
syntactically balanced ``{...}`` region by brace-depth counting, ignoring
braces inside string literals, and parses it.
"""

from typing import Any, Dict, Optional
import json
import logging

logger = logging.getLogger(__name__)


def safe_json_parse(text: str) -> Optional[Any]:
    """Parse JSON text, returning None instead of raising."""
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return None


def canonical_json(value: Any) -> str:
    """Serialization used to decide whether two snapshots are the same object."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class _BalancedObjectScanner:
    """Incremental brace-depth scanner for the first ``{...}`` in a text."""

    def __init__(self):
        self.start: Optional[int] = None
        self.end: Optional[int] = None
        self.position = 0
        self.depth = 0
        self.in_string = False
        self.escape_next = False

    def feed(self, text: str) -> Optional[int]:
        """
        Scan ``text`` (the whole buffer so far) from where the previous call stopped.

        Returns:
            The index of the closing brace once the first object is balanced,
            None while it is still open or no ``{`` has been seen.
        """
        if self.end is not None:
            return self.end

        if self.start is None:
            start = text.find("{", self.position)
            if start < 0:
                self.position = len(text)
                return None
            self.start = start
            self.position = start

        i = self.position
        while i < len(text):
            char = text[i]
            i += 1

            if self.escape_next:
                self.escape_next = False
                continue

            if self.in_string:
                if char == "\\":
                    self.escape_next = True
                elif char == '"':
                    self.in_string = False
                continue

            if char == '"':
                self.in_string = True
            elif char == "{":
                self.depth += 1
            elif char == "}":
                self.depth -= 1
                if self.depth == 0:
                    self.end = i - 1
                    break

        self.position = i
        return self.end


def extract_first_balanced_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` slice of ``text``.

    Braces inside string literals (including escaped quotes) do not affect
    depth. Returns None when no object has closed yet.
    """
    scanner = _BalancedObjectScanner()
    end = scanner.feed(text)
    if end is None or scanner.start is None:
        return None
    return text[scanner.start:end + 1]


def parse_json_object_from_text(text: str) -> Optional[Any]:
    """Extract the first balanced object from ``text`` and parse it."""
    object_slice = extract_first_balanced_json_object(text)
    if object_slice is None:
        return None
    return safe_json_parse(object_slice)


class PartialObjectExtractor:
    """
    Surfaces JSON objects from a growing text buffer as chunks arrive.

    ``process_chunk`` returns a snapshot only when the parsed object differs
    (by canonical serialization) from the last snapshot returned.
    """

    def __init__(self):
        self.buffer = ""
        self.last_snapshot: Optional[str] = None
        self.snapshots_emitted = 0
        self._scanner = _BalancedObjectScanner()

    def process_chunk(self, chunk: str) -> Optional[Dict[str, Any]]:
        """
        Add a text chunk and return a new object snapshot if one appeared.

        Args:
            chunk: Text fragment from the model

        Returns:
            The parsed object if it is new, None otherwise
        """
        if not chunk:
            return None

        self.buffer += chunk
        end = self._scanner.feed(self.buffer)
        if end is None:
            return None

        parsed = safe_json_parse(self.buffer[self._scanner.start:end + 1])
        if not isinstance(parsed, dict):
            return None

        serialized = canonical_json(parsed)
        if serialized == self.last_snapshot:
            return None

        self.last_snapshot = serialized
        self.snapshots_emitted += 1
        logger.debug("Partial object snapshot %d (%d chars buffered)", self.snapshots_emitted, len(self.buffer))
        return parsed

    def get_final_object(self, text: Optional[str] = None) -> Optional[Any]:
        """Re-scan the final text (or the buffer) from scratch and parse its first object."""
        return parse_json_object_from_text(self.buffer if text is None else text)

    def reset(self):
        """Reset the extractor state."""
        self.buffer = ""
        self.last_snapshot = None
        self.snapshots_emitted = 0
        self._scanner = _BalancedObjectScanner()
