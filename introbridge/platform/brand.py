"""Centralized brand configuration for user-facing copy."""

BRAND_NAME = "IntroBridge"
BRAND_DOMAIN = "introbridge.io"
BRAND_PRODUCT_NAME = "Consent-Gated Introductions"
BRAND_APP_DESCRIPTION = "Mediated, consent-gated introductions between hiring teams and professionals"

def brand_email_from() -> str:
    return f"{BRAND_NAME} <noreply@{BRAND_DOMAIN}>"
