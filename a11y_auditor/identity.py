"""
Stable finding identity.

An id is a 32-bit djb2 hash over the normalized (url, category, type,
selector, text) tuple, rendered as 8 lowercase hex characters. Identical
normalized tuples always produce the same id, so an ignore rule written
against an id keeps matching on later runs.
"""

import dataclasses
import re
from typing import Dict, Iterable, List, Union

from .findings import Category, Finding
from .utils.log import get_logger


ZERO_WIDTH_PATTERN = re.compile('[\u200b\u200c\u200d\u2060\ufeff]')
WHITESPACE_PATTERN = re.compile(r'\s+')
FIELD_SEPARATOR = '|'

logger = get_logger("identity")


def normalize(value) -> str:
    """Lowercase, drop zero-width characters and collapse whitespace."""
    text = ZERO_WIDTH_PATTERN.sub('', str(value or '')).lower()
    return WHITESPACE_PATTERN.sub(' ', text).strip()


def djb2(text: str) -> int:
    h = 5381
    # Hash UTF-16 code units so ids match those produced by browser-side tooling
    data = text.encode('utf-16-le')
    for i in range(0, len(data), 2):
        h = ((h << 5) + h + (data[i] | data[i + 1] << 8)) & 0xFFFFFFFF
    return h


def identity_key(
    url: str,
    category: Union[Category, str],
    type: str,
    selector: str,
    text: str
) -> str:
    if isinstance(category, Category):
        category = category.value
    return FIELD_SEPARATOR.join(normalize(v) for v in (url, category, type, selector, text))


def issue_id(
    url: str,
    category: Union[Category, str],
    type: str,
    selector: str,
    text: str
) -> str:
    """
    Compute the stable id of a finding.

    Args:
        url: Page URL
        category: Finding category
        type: Finding type
        selector: Element selector, may be empty
        text: Text sample, or the message when there is none

    Returns:
        8 lowercase hex characters
    """
    return f"{djb2(identity_key(url, category, type, selector, text)):08x}"


def assign_ids(findings: Iterable[Finding], url: str) -> List[Finding]:
    """
    Return copies of the findings with id and url set.

    Logs a warning when two different identity tuples in the same run hash
    to the same id.
    """
    seen: Dict[str, str] = {}
    assigned = []
    for finding in findings:
        key = identity_key(url, finding.category, finding.type, finding.selector, finding.text)
        finding_id = f"{djb2(key):08x}"
        if finding_id in seen and seen[finding_id] != key:
            logger.warning(
                f"Finding id collision on {finding_id}: {seen[finding_id]!r} and {key!r}"
            )
        seen.setdefault(finding_id, key)
        assigned.append(dataclasses.replace(finding, id=finding_id, url=url))
    return assigned
