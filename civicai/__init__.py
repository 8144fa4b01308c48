"""
CivicAI - civic issue reporting backend

Ticket lifecycle with time-based escalation and a Gemini-powered
analysis pipeline (detect → draft → commissioner persona).
"""
__version__ = "1.0.0"
