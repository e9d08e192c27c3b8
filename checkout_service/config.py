"""
config.py — Environment-driven settings for the Checkout Service

All values are read from environment variables with sensible defaults, so the
service runs unchanged in Docker/Kubernetes and locally.
"""

import os
from dataclasses import dataclass

# Service addresses and limits (normally supplied via env vars)
ORDER_API_URL = os.environ.get("ORDER_API_URL", "http://order_service:8002")
PROOF_MAX_BYTES = int(os.environ.get("PROOF_MAX_BYTES", str(5 * 1024 * 1024)))
TEST_MODE_ENABLED = os.environ.get("CHECKOUT_TEST_MODE_ENABLED", "false").lower() in ("1", "true", "yes")
SESSION_TTL_SECONDS = int(os.environ.get("CHECKOUT_SESSION_TTL_SECONDS", "3600"))
LOG_FILE = os.environ.get("CHECKOUT_LOG_FILE", "checkout.log")

# Demo-mode stand-ins until real identity and slip storage are wired in
PLACEHOLDER_USER_ID = os.environ.get("PLACEHOLDER_USER_ID", "user-123")
PLACEHOLDER_SLIP_URL = os.environ.get(
    "PLACEHOLDER_SLIP_URL", "https://placehold.co/400x600/png?text=Slip"
)
PLACEHOLDER_TEST_SLIP_URL = os.environ.get(
    "PLACEHOLDER_TEST_SLIP_URL", "https://placehold.co/400x600/png?text=Test+Slip"
)

# Where the storefront sends users when there is nothing to check out
EMPTY_CHECKOUT_REDIRECT = "/books"


@dataclass(frozen=True)
class CheckoutSettings:
    """
    Settings bundle handed to each checkout session.

    Attributes:
        order_api_url (str): Base URL of the order persistence API.
        proof_max_bytes (int): Largest accepted payment slip, in bytes.
        test_mode_enabled (bool): Whether the test-mode bypass may be used at all.
        placeholder_user_id (str): User id sent when no session is authenticated.
        placeholder_slip_url (str): Slip URL sent for normal orders.
        placeholder_test_slip_url (str): Slip URL sent for test-mode orders.
        session_ttl_seconds (int): Age after which an unfinished checkout is discarded.
    """
    order_api_url: str = ORDER_API_URL
    proof_max_bytes: int = PROOF_MAX_BYTES
    test_mode_enabled: bool = TEST_MODE_ENABLED
    placeholder_user_id: str = PLACEHOLDER_USER_ID
    placeholder_slip_url: str = PLACEHOLDER_SLIP_URL
    placeholder_test_slip_url: str = PLACEHOLDER_TEST_SLIP_URL
    session_ttl_seconds: int = SESSION_TTL_SECONDS

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        """Builds settings from the module-level environment values."""
        return cls()
