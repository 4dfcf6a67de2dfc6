"""
Configuration file for tunable parameters
"""

import logging

# ==============================================================================
# Matching Settings
# ==============================================================================

# Look-ahead
MAX_SKIP = 2  # Max target words that may be skipped to re-sync on a spoken word

# Fuzzy Thresholds (by normalized target word length)
MIN_FUZZY_LENGTH = 3          # Words shorter than this must match exactly
MEDIUM_WORD_MAX_LENGTH = 5    # Upper length bound of the "medium" band
MEDIUM_WORD_MAX_DISTANCE = 1  # Allowed edits for words up to MEDIUM_WORD_MAX_LENGTH
LONG_WORD_MAX_DISTANCE = 2    # Allowed edits for longer words

# Strategy
DEFAULT_STRATEGY = "sequential"  # Only "sequential" is available

# ==============================================================================
# Session Settings
# ==============================================================================

DEFAULT_AUTO_RESET = False  # True = hands-free continuous recitation
                            # False = complete once, then request stop

# ==============================================================================
# ASR Settings
# ==============================================================================

ASR_CLOUD_PROVIDER = "groq"  # "groq" or "openai" (env ASR_CLOUD_PROVIDER overrides)
GROQ_WHISPER_MODEL = "whisper-large-v3-turbo"
OPENAI_WHISPER_MODEL = "whisper-1"
ASR_LANGUAGE = "ar"

# ==============================================================================
# Logging Settings
# ==============================================================================

LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_MATCH_DETAILS = False  # Log every per-word match decision (DEBUG level)


def configure_logging(level: str = None):
    """Apply LOG_LEVEL (or the given level) to the root logger"""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )


# ==============================================================================
# Tuning Notes
# ==============================================================================

"""
If results show:

1. Unrelated speech completes a zeker:
   - Decrease MAX_SKIP to 1
   - Decrease LONG_WORD_MAX_DISTANCE to 1

2. Correctly recited words are not picked up (highlight stalls):
   - Increase LONG_WORD_MAX_DISTANCE to 3 for long supplications
   - Avoid raising MEDIUM_WORD_MAX_DISTANCE (short words start colliding)

3. Short particles (من، في، ما) match each other:
   - Keep MIN_FUZZY_LENGTH at 3 or higher
"""
