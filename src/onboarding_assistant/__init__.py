"""Backend-for-frontend for the in-page onboarding assistant widget."""

__version__ = "0.1.0"
