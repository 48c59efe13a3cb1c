"""Audit trail helpers shared by the app views"""
import datetime
import logging
from decimal import Decimal

from .models import AuditLog

logger = logging.getLogger('tailorbook.core')


def get_client_ip(request):
    """First address in X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def _acting_user(request, user):
    actor = user or getattr(request, 'user', None)
    if actor is not None and actor.is_authenticated:
        return actor
    return None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Record who did what to which shop record.

    ``user`` wins over ``request.user``; anonymous actors are stored as null.
    Entries missing an action, model or object id are skipped. Returns the
    new ``AuditLog`` or None; database errors are logged, not raised, so an
    audit failure never breaks the request that triggered it.
    """
    if not (action and model_name and object_id):
        logger.warning(f"Skipping audit entry with incomplete target: {action} {model_name} #{object_id}")
        return None

    try:
        return AuditLog.objects.create(
            user=_acting_user(request, user),
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Could not write audit entry for {model_name} #{object_id}: {e}")
        return None


def json_safe(value):
    """Make serializer output (Decimals, dates) storable in a JSONField"""
    if isinstance(value, dict):
        return {key: json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(item) for item in value]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value
