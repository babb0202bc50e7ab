import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Environment configuration
ENV = os.getenv("ZAPSHIFT_ENV", "p").lower()
if ENV not in ["d", "p"]:
    raise ValueError("ZAPSHIFT_ENV must be either 'd' (development) or 'p' (production)")

# API Keys
STRIPE_SECRET_KEY = os.getenv("ZAPSHIFT_STRIPE_SECRET_KEY")
if not STRIPE_SECRET_KEY:
    raise ValueError("ZAPSHIFT_STRIPE_SECRET_KEY environment variable is not set")

# NOTE: Optional - falls back to Application Default Credentials when unset
FIREBASE_SERVICE_KEY = os.getenv("ZAPSHIFT_FIREBASE_SERVICE_KEY")

# Firestore database holding the parcels, payments, users and riders collections
FIRESTORE_DATABASE = os.getenv("ZAPSHIFT_FIRESTORE_DATABASE", "(default)")

# Client site that Stripe redirects back to after checkout
SITE_DOMAIN = os.getenv("ZAPSHIFT_SITE_DOMAIN", "http://localhost:5173").rstrip("/")

CURRENCY = os.getenv("ZAPSHIFT_CURRENCY", "usd").lower()

# Comma separated list of additional CORS origins
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ZAPSHIFT_ALLOWED_ORIGINS", "").split(",")
    if origin.strip()
]

PORT = int(os.getenv("PORT", "3000"))
