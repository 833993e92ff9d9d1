"""
commentguard - incremental spam triage for live comment streams.

Keyword tiering with escalation of keyword hits to a local LLM, a
deduplicated record cache and running stats that stay consistent across
rescans, resets and in-flight escalations.
"""

__version__ = "0.1.0"
