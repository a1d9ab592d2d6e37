"""Weight tables, mood keyword map and option lists that tune recommendation behavior."""

PERSONALIZED = "personalized"
GENERAL = "general"

DEFAULT_LIMIT = 6

# One weight profile per ranking mode (personalized "for you" vs general filler)
WEIGHTS = {
    PERSONALIZED: {
        "popularity": 10.0,
        "shelf_liked": 8.0,
        "like": 5.0,
        "played": 2.0,
        "not_now": -3.5,
        "shown": -1.2,
        "recent_shown": -6.0,
        "mood_match": 5.0,
        "mood_affinity": 1.2,
        "novelty": 2.4,
        "diversity_genre_penalty": 2.2,
        "diversity_primary_genre_penalty": 1.4,
    },
    GENERAL: {
        "popularity": 14.0,
        "shelf_liked": 8.0,
        "like": 4.0,
        "played": 1.5,
        "not_now": -3.0,
        "shown": -1.6,
        "recent_shown": -9.0,
        "mood_match": 4.0,
        "mood_affinity": 0.8,
        "novelty": 1.5,
        "diversity_genre_penalty": 1.6,
        "diversity_primary_genre_penalty": 1.0,
    },
}

POPULARITY_SCALE = 64.0 # score_hint at which the popularity term saturates

# Caps keep a handful of strong signals dominant without long-tail runaway
LIKE_CAP = 3
PLAYED_CAP = 2
NOT_NOW_CAP = 3
SHOWN_CAP = 4
MOOD_AFFINITY_CLAMP = 4.0

SHOWN_COOLDOWN_HOURS = 48

# Interaction actions, grouped by the signal they carry
SHOWN_ACTIONS = {"shown"}
LIKE_ACTIONS = {"like"}
PLAYED_ACTIONS = {"played"}
NOT_NOW_ACTIONS = {"not_now", "dismiss"}
DONT_RECOMMEND_ACTIONS = {"dont_recommend", "blocked"}
EVENT_ACTIONS = (
    "shown",
    "like",
    "played",
    "not_now",
    "dismiss",
    "dont_recommend",
    "blocked",
    "wishlist",
    "reroll",
)

# Per-tag affinity carried from an event's context tags
MOOD_AFFINITY_WEIGHTS = {
    "like": 2,
    "played": 1,
    "not_now": -1,
    "dismiss": -1,
    "dont_recommend": -3,
    "blocked": -3,
}

INFERRED_MOOD_LIMIT = 2

# Mood preset -> representative genre keywords (matched by substring either way)
MOOD_GENRE_KEYWORDS = {
    "cozy": ["simulation", "casual", "family", "farming", "life"],
    "hard": ["action", "fighting", "shooter", "strategy", "souls-like", "roguelike"],
    "story": ["adventure", "role-playing", "rpg", "visual novel", "narrative"],
    "focus": ["puzzle", "strategy", "card", "board games"],
    "short": ["arcade", "casual", "platformer", "puzzle"],
    "coop": ["massively multiplayer", "co-op", "sports", "racing", "party"],
}

MOOD_OPTIONS = [
    {"code": "cozy", "label": "Cozy"},
    {"code": "hard", "label": "Challenging"},
    {"code": "story", "label": "Story driven"},
    {"code": "focus", "label": "Focused"},
    {"code": "short", "label": "Short sessions"},
    {"code": "coop", "label": "Play with others"},
]

PLATFORM_OPTIONS = [
    {"code": "pc", "label": "PC"},
    {"code": "playstation", "label": "PlayStation"},
    {"code": "switch", "label": "Switch"},
    {"code": "xbox", "label": "Xbox"},
    {"code": "mobile", "label": "Mobile"},
]

GENRE_OPTIONS = [
    {"code": "rpg", "label": "RPG"},
    {"code": "act", "label": "Action"},
    {"code": "adv", "label": "Adventure"},
    {"code": "slg", "label": "Strategy"},
    {"code": "fps", "label": "Shooter"},
    {"code": "indie", "label": "Indie"},
]
