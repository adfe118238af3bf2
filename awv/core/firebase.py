"""Firebase Admin SDK initialization and token verification."""

import json
import os
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials, exceptions

from awv.config import settings
from awv.core.logging import logger

_firebase_app: Optional[firebase_admin.App] = None


def initialize_firebase(
    firebase_credentials_path: Optional[str] = None,
    firebase_config_json: Optional[str] = None,
) -> bool:
    """
    Initialize the Firebase Admin SDK when credentials are configured.

    Credentials are looked up in order:
    1. raw service-account JSON (``FIREBASE_CONFIG_JSON``)
    2. a service-account file (``FIREBASE_CREDENTIALS_PATH``)

    Returns:
        bool: True when Firebase sign-in is available
    """
    global _firebase_app

    if _firebase_app is not None:
        return True

    firebase_config_json = firebase_config_json or settings.FIREBASE_CONFIG_JSON
    firebase_credentials_path = firebase_credentials_path or settings.FIREBASE_CREDENTIALS_PATH

    if firebase_config_json:
        logger.info("Initializing Firebase with JSON string from environment")
    elif firebase_credentials_path and os.path.exists(firebase_credentials_path):
        logger.info(f"Initializing Firebase with JSON file {firebase_credentials_path}")
    else:
        logger.info("Firebase credentials not configured; Firebase sign-in disabled")
        return False

    # Bad credentials disable Firebase sign-in instead of stopping startup
    try:
        if firebase_config_json:
            cred = credentials.Certificate(json.loads(firebase_config_json))
        else:
            cred = credentials.Certificate(firebase_credentials_path)
        _firebase_app = firebase_admin.initialize_app(cred)
    except (ValueError, OSError, exceptions.FirebaseError) as e:
        logger.error(f"Failed to initialize Firebase: {e}")
        return False

    logger.info("Firebase initialized")
    return True


def is_firebase_enabled() -> bool:
    return _firebase_app is not None


def verify_firebase_token(id_token: str) -> dict:
    """
    Verify a Firebase ID token.

    Args:
        id_token: Firebase ID token from the client

    Returns:
        Decoded token containing ``uid`` and ``email``

    Raises:
        ValueError: If the token is invalid, expired or Firebase is not configured
    """
    if _firebase_app is None:
        raise ValueError("Firebase authentication is not configured")

    try:
        decoded_token = auth.verify_id_token(id_token, app=_firebase_app, clock_skew_seconds=10)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
        logger.warning(f"Invalid or expired Firebase ID token: {e}")
        raise ValueError(f"Invalid Firebase ID token: {e!s}")
    except (ValueError, auth.CertificateFetchError) as e:
        logger.error(f"Firebase token verification failed: {e}")
        raise ValueError(f"Token verification failed: {e!s}")

    logger.info(f"Firebase token verified for uid {decoded_token.get('uid')}")
    return decoded_token
