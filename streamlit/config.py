import os

# API Configuration
API_BASE_URL = os.getenv("TRAVEL_CHAT_API_URL", "http://localhost:8000/api")

# OAuth providers enabled on the API, e.g. "google,github"; set AUTH_REDIRECT_URL on
# the API to this app's URL so sign-ins come back here with ?token=
OAUTH_PROVIDERS = [p for p in os.getenv("TRAVEL_CHAT_OAUTH_PROVIDERS", "").split(",") if p]

# Streamlit Configuration
STREAMLIT_CONFIG = {
    "page_title": "latiNlong Travel Buddy",
    "page_icon": "🧭",
    "layout": "wide",
    "initial_sidebar_state": "expanded"
}

# Starter prompts
EXAMPLE_QUESTIONS = [
    "Plan 4 days in Paris on a medium budget",
    "How do I get from CDG to Montmartre without getting ripped off?",
    "Which Paris neighbourhoods are safe for solo travellers?",
    "What's a realistic daily budget for Paris on the low tier?",
]
