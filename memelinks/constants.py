# memelinks/constants.py
# Wire-level names shared by routers and tests

SESSION_COOKIE_NAME: str = "sessionToken"

# Paths exempt from rate limiting
HEALTH_PATHS: tuple[str, ...] = ("/health", "/health/", "/health/live", "/health/ready")

# links.id is a 32-bit INTEGER on PostgreSQL; larger ids cannot name a record
MAX_RECORD_ID: int = 2**31 - 1
