"""
ContentMagic Server Package.

The web server of the ContentMagic platform: session-authenticated REST API
for content generation, scheduling, subscriptions and analytics.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Settings, constants and rate limiting.
    exception_handlers: Mapping of errors onto the JSON error envelope.
    middleware: Request context and security headers.
    services: Business logic and adapters for Stripe and Google AI.
"""
