"""
Suppression engine.

Loads human-curated ignore rules and marks matching findings as ignored.
The ignore document looks like::

    {"version": 1, "rules": [{"id": "1a2b3c4d"},
                             {"domain": "example.com", "type": "missing_skip_links"}]}

Rules are evaluated in order and the first match wins. A store that is
missing or unreadable behaves as an empty rule set.
"""

import dataclasses
import json
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import urlparse

from .errors import AuditError, IgnoreRuleError
from .findings import Finding, Severity
from .utils.constants import MAX_IGNORE_RULES
from .utils.log import get_logger


IDENTIFYING_FIELDS = ('id', 'url', 'domain', 'category', 'type', 'selector')
SCOPES = ('global', 'domain', 'url')
WILDCARD = '*'
EXPIRY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

logger = get_logger("ignore")


@dataclass(frozen=True)
class IgnoreRule:
    """One suppression rule. Unset fields match anything."""
    id: Optional[str] = None
    scope: Optional[str] = None
    pattern: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    selector: Optional[str] = None
    text_includes: Optional[str] = None
    severity_at_most: Optional[str] = None
    expires: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IgnoreRule":
        """
        Build a rule from its stored form.

        Accepts the shorthand written by the authoring tool: ``domain`` and
        ``url`` set the scope and pattern, ``expiry`` is read as ``expires``.
        An explicit ``domain`` or ``url`` scope without a ``pattern`` takes
        it from the field of the same name.
        A rule without any scope is global, unless it names an id, in which
        case it only ever matches by id.
        """
        def text(key, *aliases):
            for k in (key,) + aliases:
                value = data.get(k)
                if value not in (None, ''):
                    return str(value)
            return None

        scope = text('scope')
        pattern = text('pattern')
        if scope is None:
            if text('domain'):
                scope, pattern = 'domain', text('domain')
            elif text('url'):
                scope, pattern = 'url', text('url')
            elif text('id') is None:
                scope = 'global'
        elif pattern is None and scope.lower() in ('domain', 'url'):
            pattern = text(scope.lower())

        return cls(
            id=text('id'),
            scope=scope.lower() if scope else None,
            pattern=pattern,
            category=text('category'),
            type=text('type'),
            selector=text('selector'),
            text_includes=text('textIncludes', 'text_includes'),
            severity_at_most=text('severityAtMost', 'severity_at_most'),
            expires=text('expires', 'expiry'),
        )


def _parse_date(value: str) -> Optional[datetime]:
    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(rule: IgnoreRule, now: Optional[datetime] = None) -> bool:
    """A rule is expired when ``expires`` parses to a moment in the past."""
    if not rule.expires:
        return False
    expires = _parse_date(rule.expires)
    if expires is None:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return expires < now


def scope_matches(rule: IgnoreRule, url: Optional[str]) -> bool:
    if rule.scope == 'global':
        return True
    if not url or not rule.pattern:
        return False
    if rule.scope == 'domain':
        host = (urlparse(url).hostname or '').lower()
        pattern = rule.pattern.lower()
        if pattern.startswith('*.'):
            pattern = pattern[2:]
        return host == pattern or host.endswith(f".{pattern}")
    if rule.scope == 'url':
        return url.startswith(rule.pattern)
    return False


def _field_matches(expected: Optional[str], actual: str) -> bool:
    return not expected or expected == WILDCARD or expected == actual


def _severity_matches(rule: IgnoreRule, severity: Severity) -> bool:
    if not rule.severity_at_most or rule.severity_at_most == WILDCARD:
        return True
    ceiling = Severity.parse(rule.severity_at_most)
    return ceiling is not None and severity.ordinal <= ceiling.ordinal


def matches(rule: IgnoreRule, finding: Finding, now: Optional[datetime] = None) -> bool:
    """
    Check whether a rule suppresses a finding.

    Args:
        rule: Ignore rule
        finding: Finding with id and url assigned
        now: Reference time for expiry, defaults to the current time

    Returns:
        True if the finding should be ignored
    """
    if is_expired(rule, now):
        return False

    if rule.id and finding.id and rule.id.lower() == finding.id.lower():
        return True

    if not scope_matches(rule, finding.url):
        return False
    if not _field_matches(rule.category, finding.category.value):
        return False
    if not _field_matches(rule.type, finding.type):
        return False
    if not _severity_matches(rule, finding.severity):
        return False
    if rule.selector and rule.selector not in (finding.selector or ''):
        return False
    if rule.text_includes and rule.text_includes.lower() not in finding.text.lower():
        return False
    return True


def apply_suppression(
    findings: Iterable[Finding],
    rules: List[IgnoreRule],
    now: Optional[datetime] = None
) -> List[Finding]:
    """Return copies of the findings with ``ignored`` set where a rule matches."""
    now = now or datetime.now(timezone.utc)
    rules = rules[:MAX_IGNORE_RULES]
    result = []
    for finding in findings:
        if any(matches(rule, finding, now) for rule in rules):
            finding = dataclasses.replace(finding, ignored=True)
        result.append(finding)
    return result


def _is_identifying(data: Dict[str, Any]) -> bool:
    if any(data.get(k) not in (None, '') for k in IDENTIFYING_FIELDS):
        return True
    return data.get('scope') in ('domain', 'url') and bool(data.get('pattern'))


def load_ignore_rules(path: Union[str, Path]) -> List[IgnoreRule]:
    """
    Load ignore rules from a JSON document.

    Args:
        path: Path to the ignore file

    Returns:
        List of rules; empty when the file is missing or unusable
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"No ignore file at {path}")
        return []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read ignore file {path}: {e}")
        return []

    if not isinstance(document, dict) or not isinstance(document.get('rules'), list):
        logger.warning(f"Ignore file {path} has no 'rules' list, ignoring it")
        return []

    raw_rules = document['rules']
    if len(raw_rules) > MAX_IGNORE_RULES:
        logger.warning(
            f"Ignore file has {len(raw_rules)} rules, only the first {MAX_IGNORE_RULES} are used"
        )
        raw_rules = raw_rules[:MAX_IGNORE_RULES]

    rules = []
    for position, raw in enumerate(raw_rules):
        if not isinstance(raw, dict) or not _is_identifying(raw):
            logger.warning(f"Skipping ignore rule #{position}: it identifies nothing")
            continue
        rules.append(IgnoreRule.from_dict(raw))

    logger.debug(f"Loaded {len(rules)} ignore rules from {path}")
    return rules


def validate_rule(rule: Dict[str, Any]) -> None:
    """
    Validate a rule before it is written.

    Raises:
        IgnoreRuleError: If the rule identifies nothing or a field is malformed
    """
    if not rule:
        raise IgnoreRuleError("Empty rule")
    if not _is_identifying(rule):
        raise IgnoreRuleError(
            "Rule must include at least one of: " + ", ".join(IDENTIFYING_FIELDS)
        )
    expiry = rule.get('expiry') or rule.get('expires')
    if expiry and not EXPIRY_PATTERN.match(str(expiry)):
        raise IgnoreRuleError("expiry must be YYYY-MM-DD")
    severity = rule.get('severityAtMost')
    if severity and severity != WILDCARD and Severity.parse(severity) is None:
        raise IgnoreRuleError(f"Unknown severity: {severity!r}")
    scope = rule.get('scope')
    if scope and scope not in SCOPES:
        raise IgnoreRuleError(f"Unknown scope: {scope!r}")


def add_ignore_rule(path: Union[str, Path], rule: Dict[str, Any]) -> bool:
    """
    Append a rule to the ignore file.

    The existing file is copied to ``<path>.bak`` before it is rewritten.

    Args:
        path: Path to the ignore file, created with its directories if missing
        rule: Rule in stored form (camelCase keys, ``domain``/``url``/``expiry``
            shorthand allowed)

    Returns:
        True if the rule was added, False if a rule with the same id exists

    Raises:
        IgnoreRuleError: If the rule is invalid
        AuditError: If the existing file cannot be read or the new one written
    """
    path = Path(path)
    rule = {k: v for k, v in rule.items() if v not in (None, '')}
    validate_rule(rule)

    document: Dict[str, Any] = {'version': 1, 'rules': []}
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise AuditError(f"Failed to read ignore file {path}: {e}")
        if not isinstance(document, dict):
            raise AuditError(f"Ignore file {path} is not a JSON object")

    rules = document.get('rules')
    if not isinstance(rules, list):
        rules = []

    if rule.get('id') and any(
        isinstance(r, dict) and r.get('id') == rule['id'] for r in rules
    ):
        logger.info(f"Rule with id {rule['id']} already exists, no changes made")
        return False

    rules.append(rule)
    document['rules'] = rules
    document['version'] = document.get('version') or 1

    try:
        if path.exists():
            shutil.copyfile(path, path.with_name(path.name + '.bak'))
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(json.dumps(document, indent=2, ensure_ascii=False) + '\n')
    except OSError as e:
        raise AuditError(f"Failed to write ignore file {path}: {e}")

    logger.info(f"Ignore rule added to {path}")
    return True
