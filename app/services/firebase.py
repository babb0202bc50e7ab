import base64
import json
import logging

import firebase_admin
from firebase_admin import credentials, initialize_app

from config import FIREBASE_SERVICE_KEY

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def get_firebase_app() -> firebase_admin.App:
    """
    Get the default Firebase Admin app, initializing it on first use.

    Uses the base64 encoded service account from ZAPSHIFT_FIREBASE_SERVICE_KEY
    when set, otherwise Application Default Credentials.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if FIREBASE_SERVICE_KEY:
        service_account = json.loads(base64.b64decode(FIREBASE_SERVICE_KEY))
        logger.info(
            f"Initializing Firebase app for project {service_account.get('project_id')}"
        )
        return initialize_app(credentials.Certificate(service_account))

    logger.info("Initializing Firebase app with Application Default Credentials")
    return initialize_app()
