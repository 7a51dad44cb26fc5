"""
Notification delivery: in-app records with optional email through Django mail.
An email failure is logged and never undoes the in-app notification.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail

from .models import Notification

logger = logging.getLogger(__name__)


def _send_email(notification):
    recipient = notification.recipient
    if not recipient.email:
        return False
    try:
        send_mail(
            subject=notification.title,
            message=notification.message,
            from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@example.com'),
            recipient_list=[recipient.email],
            fail_silently=False,
        )
    except Exception:
        logger.exception(f"Failed to send notification email to {recipient.email}")
        return False

    notification.email_sent = True
    notification.save(update_fields=['email_sent'])
    return True


def notify(user, title, message, notification_type='info', send_email=False):
    notification = Notification.objects.create(
        recipient=user,
        title=title,
        message=message,
        notification_type=notification_type,
    )
    if send_email:
        _send_email(notification)
    logger.debug(f"Notification '{title}' created for {user.email}")
    return notification


def notify_many(users, title, message, notification_type='info', send_email=False):
    """
    Notify every user in ``users``.

    Returns:
        dict: notifications_created and emails_sent counts
    """
    notifications = Notification.objects.bulk_create([
        Notification(
            recipient=user,
            title=title,
            message=message,
            notification_type=notification_type,
        )
        for user in users
    ])

    emails_sent = 0
    if send_email:
        emails_sent = sum(1 for notification in notifications if _send_email(notification))

    logger.info(f"Created {len(notifications)} '{title}' notifications ({emails_sent} emails sent)")
    return {
        'notifications_created': len(notifications),
        'emails_sent': emails_sent,
    }
