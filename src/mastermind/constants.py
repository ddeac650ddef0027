from __future__ import annotations

# Game limits
MAX_ATTEMPTS = 7
PER_TURN_GAME_DURATION = 2  # slots per turn
COMBINATION_LENGTH = 4
MAX_DIGIT = 7

# Public combination encoding (one decimal digit per slot)
MIN_COMBINATION = 1000
MAX_COMBINATION = 9999

# Clue scores
NO_MATCH = 0
BLOW = 1
HIT = 2

# Packed widths
CLUE_FIELD_BITS = 2  # per clue position
CLUE_BITS = COMBINATION_LENGTH * CLUE_FIELD_BITS  # 8 per turn record
COMBINATION_BITS = 14  # 9999 < 2**14

# Turn word radices: turn_count * 10000 + max_attempts * 100 + solved
TURN_RADIX = 100
TURN_FIELD_LIMIT = 100

# Reward word: reward * 2**32 + finalize_slot
SLOT_BITS = 32
REWARD_BITS = 64

ACTIONS = ("initialize", "accept", "guess", "clue", "claim", "forfeit", "submit_proof")
