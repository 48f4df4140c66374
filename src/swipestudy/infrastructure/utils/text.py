import re
import unicodedata
from typing import Any

import yaml  # type: ignore
import yaml.constructor

# ---------- Frontmatter helpers ----------


def parse_frontmatter(md_text: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from markdown text.
    Uses line-by-line parsing instead of regex for reliability.
    """
    # Handle potential BOM (Byte Order Mark)
    md_text = md_text.lstrip("\ufeff")

    lines = md_text.split("\n")

    # Check for opening ---
    if not lines or lines[0].strip() != "---":
        return {}, md_text

    # Find closing ---
    yaml_end_line = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            yaml_end_line = i
            break

    if yaml_end_line is None:
        # No closing ---, return empty
        return {}, md_text

    raw = "\n".join(lines[1:yaml_end_line])
    body = "\n".join(lines[yaml_end_line + 1 :])

    # Fix tabs (common user error)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        meta = yaml.load(raw, Loader=UniqueKeyLoader) or {}
    except yaml.YAMLError as e:
        return {"__yaml_error__": str(e)}, md_text

    if not isinstance(meta, dict):
        return {"__yaml_error__": "frontmatter is not a mapping"}, md_text
    return meta, body


class UniqueKeyLoader(yaml.SafeLoader):
    """Custom YAML loader that forbids duplicate keys."""

    def construct_mapping(self, node, deep=False):
        mapping = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in mapping:
                raise yaml.constructor.ConstructorError(
                    None, None, f"found duplicate key '{key}'", key_node.start_mark
                )
            mapping.add(key)
        return super().construct_mapping(node, deep)


def scrub_internal_keys(d: Any) -> Any:
    """Recursively remove keys starting with __"""
    if isinstance(d, dict):
        return {k: scrub_internal_keys(v) for k, v in d.items() if not str(k).startswith("__")}
    elif isinstance(d, list):
        return [scrub_internal_keys(v) for v in d]
    return d


# ---------- Body card syntax ----------

_QUESTION = re.compile(r"^\s*(?:[-*]\s+)?Q\s*[:.]\s*(.+?)\s*$", re.IGNORECASE)
_ANSWER = re.compile(r"^\s*(?:[-*]\s+)?A\s*[:.]\s*(.+?)\s*$", re.IGNORECASE)
_TERM = re.compile(r"^\s*(?:[-*]\s+)?(.+?)\s+::\s+(.+?)\s*$")


def extract_body_pairs(body: str) -> list[tuple[str, str]]:
    """
    Pull (front, back) pairs out of a markdown body.

    Recognised forms:
        Q: question          term :: definition
        A: answer
    A `Q:` line without a following `A:` line is dropped.
    """
    pairs: list[tuple[str, str]] = []
    pending_q: str | None = None

    for line in body.splitlines():
        if m := _QUESTION.match(line):
            pending_q = m.group(1)
            continue
        if m := _ANSWER.match(line):
            if pending_q:
                pairs.append((pending_q, m.group(1)))
            pending_q = None
            continue
        if m := _TERM.match(line):
            pairs.append((m.group(1), m.group(2)))
            pending_q = None

    return pairs


# ---------- Answer comparison ----------


def normalize_answer(text: str) -> str:
    """Casefold, strip accents and punctuation, and collapse whitespace."""
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[^\w\s]", " ", text.casefold())
    return " ".join(text.split())
