import json
from typing import Any, Optional

import yaml

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def extract_yaml_frontmatter(content: str) -> Optional[str]:
    if content.startswith("---\n"):
        start = 4
    elif content.startswith("---\r\n"):
        start = 5
    else:
        return None

    offset = start
    for line in content[start:].split("\n"):
        if line.rstrip("\r").strip() == "---":
            return content[start:offset]
        offset = min(len(content), offset + len(line) + 1)
    return None


def extract_json_frontmatter(content: str) -> Optional[str]:
    """The leading balanced JSON object, if followed by a newline or EOF."""
    if not content.startswith("{"):
        return None

    depth = 0
    in_string = False
    escape_next = False
    for idx, ch in enumerate(content):
        if in_string:
            if escape_next:
                escape_next = False
            elif ch == "\\":
                escape_next = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                end = idx + 1
                remainder = content[end:].lstrip(" \t\r")
                if not remainder or remainder.startswith("\n"):
                    return content[:end]
                return None
    return None


def parse_frontmatter(content: str) -> Optional[dict]:
    raw = extract_yaml_frontmatter(content)
    if raw is not None:
        try:
            data = yaml.safe_load(raw)
        except (yaml.YAMLError, RecursionError):
            return None
    else:
        raw = extract_json_frontmatter(content)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            return None
    return data if isinstance(data, dict) else None


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
        return None
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    return None


def is_draft(content: str) -> bool:
    fm = parse_frontmatter(content)
    if fm is None:
        return False
    return bool(parse_bool(fm.get("draft")))
