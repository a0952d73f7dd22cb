"""
                        Services Module

External collaborators, each with a development stand-in and a production
implementation chosen by ENV_MODE.

Services:
    - notifications: LINE push messages to staff
    - ledger: daily order sheets (local workbook / Google Sheets)
    - generation: text generation for recommendations (Gemini)
    - images: menu photo hosting (imgbb)
    - recommendations: prompt building, retries and fallback text
"""

from tableorder.services.generation import get_generation_service
from tableorder.services.images import get_image_host
from tableorder.services.ledger import get_ledger_service
from tableorder.services.notifications import get_notification_service

__all__ = [
    "get_generation_service",
    "get_image_host",
    "get_ledger_service",
    "get_notification_service",
]
