"""
Description: 
This module sets up a rate limiter for the application using SlowAPI.
It initializes a Limiter instance with a key function to identify clients by their IP address and sets default limits for requests.

Dependencies:
- slowapi: For rate limiting functionality.
- slowapi.util: For utility functions like get_remote_address to retrieve the client's IP address.
- loguru: For logging information about the rate limiter initialization.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

# Per-route limits
REPORT_RATE_LIMIT = "10/minute"
CONCURRENCY_RATE_LIMIT = "30/minute"

# Set up rate limiter (60 requests per minute per IP unless a route says otherwise)
limiter = Limiter(key_func=get_remote_address, default_limits=["60/minute"])
logger.info("Rate limiter initialized")
