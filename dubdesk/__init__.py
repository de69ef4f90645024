"""dubdesk: dialogue review engine for a media localization pipeline."""

__version__ = "0.1.0"
