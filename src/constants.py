"""Application-wide constants.

This module centralizes the fixed values the webhook bridge relies on so
there is a single source of truth for protocol strings and defaults.
"""

# =============================================================================
# Webhook Protocol
# =============================================================================

# Subscription mode sent by the platform during the verification handshake
WEBHOOK_SUBSCRIBE_MODE = "subscribe"

# Only events from page subscriptions are accepted
PAGE_OBJECT = "page"

# Acknowledgment body the platform expects for every accepted batch
EVENT_RECEIVED = "EVENT_RECEIVED"

# Path the platform calls back on, appended to APP_URL
WEBHOOK_PATH = "/webhook"

# =============================================================================
# Profile Setup
# =============================================================================

# Modes accepted by GET /profile
PROFILE_MODE_WEBHOOK = "webhook"
PROFILE_MODE_PROFILE = "profile"
PROFILE_MODE_ALL = "all"

# Advisory shown when APP_URL is not served over HTTPS
INSECURE_APP_URL_MESSAGE = "ERROR - Need a proper APP_URL in the .env file"

# Webhook fields requested when subscribing the app
WEBHOOK_SUBSCRIPTION_FIELDS = [
    "messages",
    "messaging_postbacks",
    "messaging_optins",
    "message_deliveries",
    "messaging_referrals",
]

# Payload sent back when a user taps "Get Started"
GET_STARTED_PAYLOAD = "GET_STARTED"

DEFAULT_GREETING = "Hi {{user_first_name}}! Send us a message to get started."

# =============================================================================
# Server
# =============================================================================

DEFAULT_PORT = 3000

# =============================================================================
# Facebook API
# =============================================================================

FACEBOOK_GRAPH_API_URL = "https://graph.facebook.com"

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0
