"""Shared constants and default thresholds."""

# Google endpoints
OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
OAUTH_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_ADS_SCOPE = "https://www.googleapis.com/auth/adwords"
GOOGLE_ADS_API_BASE = "https://googleads.googleapis.com/v22"

# Client behaviour
TOKEN_REFRESH_MARGIN_SECONDS = 60
DEFAULT_RETRY_ATTEMPTS = 2
DEFAULT_RETRY_DELAY_SECONDS = 1.0
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0

# Delivery
NO_DELIVERY_HOURS = 24
BUDGET_DEPLETION_RATIO = 0.95
BUDGET_CUTOFF_HOUR = 18
LOST_IMPRESSION_SHARE_THRESHOLD = 0.20
RECOMMENDED_BUDGET_RATIO = 1.2

# Tracking
TRACKING_MIN_COST = 100.0
TRACKING_ACCOUNT_MIN_COST = 200.0
TRACKING_MIN_CLICKS = 50

# Trend comparisons
PERFORMANCE_DROP_WARNING = 0.25
PERFORMANCE_DROP_CRITICAL = 0.50
CPC_SPIKE_INCREASE = 0.30
CPC_SPIKE_CRITICAL = 0.50
CPC_MIN_DAYS = 10
CPC_RECENT_DAYS = 3
CPC_BASELINE_DAYS = 7
CPA_MIN_CONVERSIONS = 5
CPA_INCREASE_WARNING = 0.20
CPA_INCREASE_CRITICAL = 0.40
ROAS_MIN_SPEND = 50.0
ROAS_MIN_VALUE = 100.0
ROAS_DECREASE_WARNING = 0.20
ROAS_DECREASE_CRITICAL = 0.35
SPEND_GROWTH_WARNING = 0.30
SPEND_GROWTH_CRITICAL = 0.50
SPEND_VALUE_TOLERANCE = 0.10
SPEND_VALUE_CRITICAL_GROWTH = 0.10
MIN_PERIOD_SPEND = 100.0

# Hygiene
QUALITY_SCORE_FLOOR = 4
MIN_IMPRESSIONS = 100
HIGH_SPEND_THRESHOLD = 500.0

# Search terms
SEARCH_TERM_MIN_SPEND = 10.0
SEARCH_TERM_MIN_CLICKS = 10
SEARCH_TERM_TOP_N = 20
SEARCH_TERM_WARNING_TOTAL = 100.0
SEARCH_TERM_CRITICAL_TOTAL = 500.0
SEARCH_TERM_EXACT_MATCH_COST = 20.0
MAX_NEGATIVE_SUGGESTIONS = 15
