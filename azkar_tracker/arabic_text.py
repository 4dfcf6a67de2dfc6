"""
Arabic text utilities for recitation matching
normalization, tokenization and bounded Levenshtein comparison
"""

from typing import List, Optional
from Levenshtein import distance as levenshtein_distance
import re

from azkar_tracker import config as app_config


# ============================================================================
# Normalization
# ============================================================================

# Tashkeel: small high marks, harakat/tanween, superscript alef, Quranic marks
DIACRITICS_RE = re.compile(r'[\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED]')
TATWEEL_RE = re.compile(r'\u0640')

# Letter variants mapped to one canonical form
CHAR_MAP = str.maketrans({
    '\u0622': '\u0627',  # Alef-Madda -> Alef
    '\u0623': '\u0627',  # Alef-Hamza-Above -> Alef
    '\u0625': '\u0627',  # Alef-Hamza-Below -> Alef
    '\u0671': '\u0627',  # Alef-Wasla -> Alef
    '\u0624': '\u0648',  # Waw-Hamza -> Waw
    '\u0626': '\u064A',  # Yaa-Hamza -> Yaa
    '\u0629': '\u0647',  # Taa-Marbuta -> Haa
    '\u0649': '\u064A',  # Alef-Maksura -> Yaa
})

NON_ARABIC_RE = re.compile(
    r'[^\u0621-\u064A\u0660-\u0669\u066E-\u066F\u0671-\u06D3\u06D5'
    r'\u06EE-\u06EF\u06FA-\u06FF\u0750-\u077F\uFB50-\uFDFF\uFE70-\uFEFF]'
)

WHITESPACE_RE = re.compile(r'\s+')


def remove_tashkeel(text: str) -> str:
    """Strip diacritics and tatweel, keep letter shapes (display use)"""
    text = DIACRITICS_RE.sub('', text)
    return TATWEEL_RE.sub('', text)


def normalize_arabic(text: str) -> str:
    """
    Normalize Arabic text for comparison

    Removes tashkeel and tatweel, unifies Alef/Hamza/Taa-Marbuta/Alef-Maksura
    forms and drops every character outside the Arabic script (including
    whitespace, so apply it per token).
    """
    text = remove_tashkeel(text)
    text = text.translate(CHAR_MAP)
    return NON_ARABIC_RE.sub('', text)


def tokenize_arabic_text(text: str) -> List[str]:
    """Split text on whitespace runs, dropping empty tokens"""
    return [w for w in WHITESPACE_RE.split(text) if w]


def normalize_words(text: str) -> List[str]:
    """Tokenize then normalize each token; tokens that normalize to nothing are dropped"""
    words = (normalize_arabic(token) for token in tokenize_arabic_text(text))
    return [w for w in words if w]


# ============================================================================
# Edit Distance
# ============================================================================

def bounded_distance(a: str, b: str, max_dist: Optional[int] = None) -> int:
    """
    Levenshtein distance with an optional early-exit threshold

    When max_dist is given, any distance above it is reported as max_dist + 1.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    if max_dist is None:
        return levenshtein_distance(a, b)

    if abs(len(a) - len(b)) > max_dist:
        return max_dist + 1

    return levenshtein_distance(a, b, score_cutoff=max_dist)


def max_allowed_distance(length: int) -> int:
    """Number of edits tolerated for a target word of the given length"""
    if length < app_config.MIN_FUZZY_LENGTH:
        return 0
    if length <= app_config.MEDIUM_WORD_MAX_LENGTH:
        return app_config.MEDIUM_WORD_MAX_DISTANCE
    return app_config.LONG_WORD_MAX_DISTANCE


def words_match(spoken: str, target: str) -> bool:
    """Exact or threshold-bounded fuzzy equality of two normalized words"""
    if spoken == target:
        return True
    threshold = max_allowed_distance(len(target))
    return threshold > 0 and bounded_distance(spoken, target, threshold) <= threshold


def calculate_similarity(word1: str, word2: str) -> float:
    """Calculate similarity between two words (0 to 1)"""
    if not word1 or not word2:
        return 0.0
    max_len = max(len(word1), len(word2))
    dist = levenshtein_distance(word1, word2)
    return 1.0 - (dist / max_len)
