import os

# Database Configuration
# Defaults to a local SQLite file; point it at Postgres in docker/prod
DB_URL = os.getenv("DATABASE_URL", "sqlite://frontdesk.sqlite3")

# Application Metadata
PROJECT_NAME = "Front of House Order Coordination"
VERSION = "1.0.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Outbox Poller Configuration (drives the print sink)
POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", 1)) # Poller checks for new events every N seconds
MAX_ATTEMPTS = int(os.getenv("MAX_ATTEMPTS", 5)) # Max delivery attempts for an event
BATCH_SIZE = int(os.getenv("BATCH_SIZE", 50)) # How many events to fetch per poll

# Table behaviour when a served order gets new items
# True: readyToPay table goes back to occupied. False: table stays readyToPay.
REOPEN_REVERTS_TABLE = os.getenv("REOPEN_REVERTS_TABLE", "true").lower() in ("1", "true", "yes")
