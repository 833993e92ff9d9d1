"""
Hybrid classification: keyword pass plus escalation to the external
classifier.

Keyword hits (even Spam) are provisional and get confirmed by the external
classifier when it is ready. Override keywords are the exception: a trusted
denylist that is never escalated. Every degraded path yields Suspicious.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..capability.base import SessionProvider
from .rules import KeywordTables, Tier, match_keywords


logger = logging.getLogger(__name__)


@dataclass
class ClassificationResult:
    """Result of classifying a single comment."""
    tier: Tier
    used_external: bool
    matched_keyword: Optional[str] = None


def parse_response(response: str) -> Tier:
    """
    Map a free-text classifier response to a tier.

    "spam" wins over "safe"; anything else is Suspicious.
    """
    response = (response or "").lower().strip()

    if "spam" in response:
        return Tier.SPAM
    if "safe" in response:
        return Tier.SAFE
    return Tier.SUSPICIOUS


async def classify_with_external(
    text: str,
    capability: Optional[SessionProvider],
    timeout: Optional[float] = None,
) -> Tier:
    """
    Classify a text with the external classifier.

    Never raises: an absent or not-ready capability, a failure or a timeout
    all fall back to Suspicious.

    Args:
        text: Comment text
        capability: Provider of the ready session, or None
        timeout: Seconds to wait for the response (None = no limit)

    Returns:
        Tier
    """
    if capability is None or not capability.is_ready or capability.session is None:
        return Tier.SUSPICIOUS

    try:
        logger.debug("Escalating: %r", text[:60])
        response = await asyncio.wait_for(capability.session.classify(text), timeout)
    except asyncio.TimeoutError:
        logger.warning("External classification timed out after %ss", timeout)
        return Tier.SUSPICIOUS
    except Exception as e:
        logger.warning("External classification failed: %s", e)
        return Tier.SUSPICIOUS

    tier = parse_response(response)
    logger.debug("External response %r -> %s", response, tier.value)
    return tier


async def classify_comment(
    text: str,
    capability: Optional[SessionProvider],
    tables: Optional[KeywordTables] = None,
    timeout: Optional[float] = None,
) -> ClassificationResult:
    """
    Classify a comment with keywords, escalating keyword hits.

    Args:
        text: Comment text
        capability: Provider of the ready session, or None
        tables: Keyword tables (defaults to the built-in tables)
        timeout: Seconds to wait for the external response

    Returns:
        ClassificationResult with tier and whether the external
        classifier was used
    """
    match = match_keywords(text, tables)

    if match.terminal:
        return ClassificationResult(Tier.SPAM, False, match.keyword)

    ready = capability is not None and capability.is_ready
    if match.tier in (Tier.SPAM, Tier.SUSPICIOUS) and ready:
        tier = await classify_with_external(text, capability, timeout)
        return ClassificationResult(tier, True, match.keyword)

    return ClassificationResult(match.tier, False, match.keyword)
