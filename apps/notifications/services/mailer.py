"""
Email sending and the two automatic notifications.

Notifications are fire-and-forget: they run after the triggering database
transaction commits, and any failure is logged and swallowed.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from .exceptions import EmailDeliveryError
from .recipients import get_notification_settings, normalize_emails

logger = logging.getLogger(__name__)


def _short_id(value) -> str:
    return str(value).replace('-', '')[-8:]


def send_email(*, to, subject: str, html: str) -> int:
    """
    Send an HTML email with a plain-text alternative.

    Args:
        to: One address, a comma-separated string or a list
        subject: Subject line
        html: HTML body

    Returns:
        Number of messages sent (0 or 1)

    Raises:
        InvalidRecipientError: If an address is invalid
        EmailDeliveryError: If the mail backend fails
    """
    recipients = normalize_emails(to, field='to')
    if not recipients:
        return 0

    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    message.attach_alternative(html, 'text/html')
    try:
        return message.send(fail_silently=False)
    except Exception as e:
        raise EmailDeliveryError(f"Email could not be sent: {e}") from e


def _send_to_each(recipients, subject, html, kind):
    for recipient in recipients:
        try:
            send_email(to=recipient, subject=subject, html=html)
        except Exception as e:
            logger.warning("%s notification to %s failed: %s", kind, recipient, e)


def _detail_url(transaction_id) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/transactions/{transaction_id}"


def notify_payment_registered(*, payment_id) -> None:
    """Tell the administrators a payment was recorded."""
    from apps.transactions.models import Payment
    from apps.transactions.services import get_payment_summary

    try:
        recipients = get_notification_settings().admin_emails
        if not recipients:
            logger.debug("No admin recipients configured, payment %s not notified", payment_id)
            return

        payment = Payment.objects.select_related(
            'transaction__concept',
            'transaction__provider',
        ).get(pk=payment_id)
        tx = payment.transaction
        summary = get_payment_summary(tx.id)

        subject = f"Se ha registrado un pago de ${payment.amount:,.2f} - {tx.concept.name}"
        html = render_to_string('notifications/payment_registered.html', {
            'title': 'Nuevo Pago Registrado',
            'payment': payment,
            'transaction': tx,
            'summary': summary,
            'short_id': _short_id(tx.id),
            'detail_url': _detail_url(tx.id),
        })
    except Exception:
        logger.exception("Could not prepare payment notification for %s", payment_id)
        return

    _send_to_each(recipients, subject, html, 'Payment')


def notify_expense_created(*, transaction_id) -> None:
    """Ask the accountants to cover a new expense."""
    from apps.transactions.models import Transaction

    try:
        recipients = get_notification_settings().accountant_emails
        if not recipients:
            logger.debug("No accountant recipients configured, expense %s not notified", transaction_id)
            return

        tx = Transaction.objects.select_related(
            'general',
            'concept',
            'subconcept',
            'provider',
        ).get(pk=transaction_id)

        subject = f"Favor de cubrir este gasto - {tx.concept.name} - #{_short_id(tx.id)}"
        html = render_to_string('notifications/expense_created.html', {
            'title': 'Nuevo Gasto Registrado',
            'transaction': tx,
            'short_id': _short_id(tx.id),
            'detail_url': _detail_url(tx.id),
        })
    except Exception:
        logger.exception("Could not prepare expense notification for %s", transaction_id)
        return

    _send_to_each(recipients, subject, html, 'Expense')
