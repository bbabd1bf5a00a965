"""
Notification Services Package

Transactional email and CRM contact sync through Brevo.

Author: Portal Development Team
Version: 1.0.0
"""

from .brevo_service import BrevoService, send_best_effort

__all__ = ["BrevoService", "send_best_effort"]
