import os
from typing import Optional, Dict, Any

import firebase_admin
import structlog
from firebase_admin import auth, credentials

from ..config import get_settings
from .context import RequestContext, Role

logger = structlog.get_logger(__name__)

_firebase_app = None


def initialize_firebase():
    global _firebase_app
    if _firebase_app is None:
        settings = get_settings()
        try:
            if os.path.exists(settings.firebase_service_account_path):
                cred = credentials.Certificate(settings.firebase_service_account_path)
            else:
                # GOOGLE_APPLICATION_CREDENTIALS / metadata server
                cred = credentials.ApplicationDefault()

            options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
            _firebase_app = firebase_admin.initialize_app(cred, options)
        except Exception as e:
            logger.error("Firebase initialization failed", error=str(e))
            return None
    return _firebase_app


def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        app = initialize_firebase()
        if not app:
            logger.warning("Firebase app not initialized")
            return None
        return auth.verify_id_token(token, app=app)
    except Exception as e:
        logger.warning("Token verification failed", error=str(e))
        return None


def context_from_claims(claims: Dict[str, Any]) -> Optional[RequestContext]:
    """Map decoded token claims onto a request context.

    The role lives in the ``role`` custom claim set when the account is
    provisioned.
    """
    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        return None

    return RequestContext(
        user_id=uid,
        role=Role.parse(claims.get("role")),
        email=claims.get("email"),
    )
