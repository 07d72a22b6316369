MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 15

# inclusive upper bounds of vehicle tiers 1..3; tier 4 covers the rest
VEHICLE_TIER_LIMITS = (2, 4, 12)
VEHICLE_TIER_COUNT = 4

PARAMS_STORAGE_KEY = "byg_pricing_params_v8"
TICKETS_STORAGE_KEY = "byg_pricing_tickets_v5"
QUOTES_STORAGE_KEY = "byg_pricing_saved_quotes_v1"

MEAL_PRESETS = (100, 200, 300, 500, 800, 1000, 1500, 2000, 3000, 4000)

SUPPORTED_LANGUAGES = ("zh", "en")
DEFAULT_LANGUAGE = "zh"

CURRENCY_SYMBOL = "฿"

NEW_TICKET_ID_PREFIX = "t_"
NEW_TICKET_NAMES = {"zh": "新项目", "en": "New Item"}
