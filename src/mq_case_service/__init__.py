"""MQ Case Service - kiosk case intake and lifecycle management."""

__version__ = "1.0.0"
