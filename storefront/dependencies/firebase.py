import firebase_admin
from firebase_admin import credentials

from storefront.config.settings import settings
from storefront.shared.utils import get_logger

logger = get_logger(__name__)


def initialize_firebase() -> bool:
    """Initialize the Firebase Admin SDK once; False when no credentials are set"""
    if firebase_admin._apps:
        return True

    service_account_path = settings.FIREBASE_SERVICE_ACCOUNT_PATH
    if not service_account_path:
        logger.warning(
            "GOOGLE_APPLICATION_CREDENTIALS not set; token verification is disabled"
        )
        return False

    cred = credentials.Certificate(service_account_path)
    firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin SDK initialized")
    return True
