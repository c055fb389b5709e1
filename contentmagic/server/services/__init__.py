"""Service layer: authentication, subscriptions and billing, analytics and AI generation."""
