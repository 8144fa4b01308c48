"""
LangGraph Agents for CivicAI

This module contains the analysis pipeline agents:
detection (vision), complaint drafting and the commissioner persona.
"""

from civicai.agents.detector import detect_issue
from civicai.agents.drafter import draft_complaint
from civicai.agents.commissioner import commissioner_response
from civicai.agents import utils

__all__ = [
    "detect_issue",
    "draft_complaint",
    "commissioner_response",
    "utils",
]
