"""CMS fingerprinting by response body signatures."""

import logging
from collections.abc import Sequence

import httpx

from riskscan.tools.http import HTTPClient

from .models import CMS_TYPES, CMSInfo, ProbeResult
from .rules import DEFAULT_RULES, CMSRule

logger = logging.getLogger(__name__)


def detect_cms(
    body: str,
    rules: Sequence[CMSRule] = DEFAULT_RULES.cms_rules,
    threshold: int = 2,
) -> CMSInfo:
    """First CMS (in rule order) with at least *threshold* matching patterns."""
    for rule in rules:
        matches = sum(1 for pattern in rule.patterns if pattern.search(body))
        if matches >= threshold:
            cms_type = rule.name if rule.name in CMS_TYPES else "other"
            return CMSInfo(detected=True, cms_type=cms_type)
    return CMSInfo(detected=False)


async def fingerprint_cms(
    client: HTTPClient,
    target: str,
    rules: Sequence[CMSRule] = DEFAULT_RULES.cms_rules,
    threshold: int = 2,
) -> ProbeResult[CMSInfo]:
    """Fetch *target* and match its body against the CMS rule table."""
    try:
        response = await client.get(target)
    except httpx.HTTPError as exc:
        logger.debug("CMS fetch for %s failed: %s", target, exc)
        return ProbeResult.degrade(CMSInfo(detected=False), f"fetch failed: {exc}")
    return ProbeResult.ok(detect_cms(response.body, rules, threshold))
