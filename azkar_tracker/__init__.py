"""
Azkar recitation tracker
Streaming Arabic transcript matching against a reference zeker
"""

from azkar_tracker.arabic_text import normalize_arabic, remove_tashkeel, tokenize_arabic_text, bounded_distance
from azkar_tracker.azkar_matcher import MatchResult, match_batch
from azkar_tracker.session_manager import RecitationSession, SessionManager

__version__ = "0.1.0"
