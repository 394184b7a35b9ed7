import os

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/foodtruck_db")

# Application Metadata
PROJECT_NAME = "Food Truck Ordering Service"
VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Sessions
SESSION_TTL_HOURS = int(os.getenv("SESSION_TTL_HOURS", 5)) # Login session lifetime
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true" # Only send cookie over HTTPS

# Ordering
PICKUP_LEAD_MINUTES = int(os.getenv("PICKUP_LEAD_MINUTES", 20)) # Earliest pickup after checkout
DEFAULT_LOW_STOCK_THRESHOLD = int(os.getenv("DEFAULT_LOW_STOCK_THRESHOLD", 10))
CURRENCY = os.getenv("CURRENCY", "EGP")
