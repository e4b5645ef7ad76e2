from __future__ import annotations

# Gameplay constants. The server is the source of truth for scoring and timing.

# Timer settings (seconds)
TIMER_DURATION = 120
# Absorbs network latency so a word in flight at the deadline still counts
TIMER_GRACE = 5

# Word validation
MIN_WORD_LENGTH = 3
MAX_WORD_LENGTH = 8  # largest puzzle (8 letters at level 11+)

# Scoring: points = (length * BASE) + ((length - MIN_WORD_LENGTH) * BONUS)
POINTS_PER_LETTER = 10
BONUS_PER_EXTRA_LETTER = 5

# Puzzle display limit per word length
MAX_WORDS_PER_LENGTH = 12

# Session lifetimes (seconds)
SESSION_TTL_SECONDS = 2 * 60 * 60
ADMIN_SESSION_TTL_SECONDS = 24 * 60 * 60
CLEANUP_INTERVAL_SECONDS = 10 * 60
# After a shared-store failure, serve from memory this long before trying Redis again
BACKEND_RETRY_SECONDS = 5

# Redis key namespaces
SESSION_KEY_PREFIX = 'wordtwist:session:'
ADMIN_KEY_PREFIX = 'wordtwist:admin:'

GAME_MODES = ('timed', 'untimed')

# Level progression: (name, highest level inclusive, letter count)
LEVEL_THRESHOLDS = (
    ('six', 5, 6),
    ('seven', 10, 7),
    ('eight', None, 8),
)

# Base words with many sub-words. No two words in one list share a signature.
PUZZLE_WORDS_6 = (
    'ALMOST', 'BASKET', 'CASTLE', 'GARDEN', 'HANDLE', 'ISLAND', 'LAMENT',
    'PALACE', 'RAISIN', 'SAILOR', 'TABLES', 'WALNUT', 'BRANCH', 'DREAMS',
    'FLAUNT', 'GRAINS', 'HASTEN', 'INSERT', 'PLANET', 'REASON', 'SENIOR',
    'TANGLE', 'STRIPE', 'MASTER', 'LISTEN', 'TRADES', 'PASTEL', 'ANTLER',
    'CREATE',
)

PUZZLE_WORDS_7 = (
    'PAINTER', 'GARDENS', 'BLANKET', 'KITCHEN', 'MONSTER', 'PARTIES',
    'STAPLER', 'MINERAL', 'WEATHER', 'BROTHER', 'MARINES', 'TRAINED',
    'READING',
)

PUZZLE_WORDS_8 = (
    'CLARINET', 'PAINTERS', 'TRIANGLE', 'MINERALS', 'CREATION', 'DAUGHTER',
    'HOSPITAL', 'ELEPHANT', 'MOUNTAIN',
)

PUZZLE_WORDS = {
    6: PUZZLE_WORDS_6,
    7: PUZZLE_WORDS_7,
    8: PUZZLE_WORDS_8,
}
