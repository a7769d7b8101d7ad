import logging

from django.conf import settings
from django.core.mail import send_mail
from django.utils.html import format_html, strip_tags

from backend.exceptions import NotificationDispatchError

logger = logging.getLogger(__name__)

SIGNATURE = "<br><p>Best regards,<br>The GrowShare Team</p>"

TEMPLATES = {
    'order_placed': (
        "New Order Received - {vegetable}",
        "<h1>New Order Alert!</h1>"
        "<p>Hello {farmer},</p>"
        "<p>Great news! You've received a new order for <strong>{vegetable}</strong> from {customer}.</p>"
        "<p>Please log in to your dashboard to review and accept the order.</p>",
    ),
    'order_accepted': (
        "Your Order Has Been Accepted! - {vegetable}",
        "<h1>Order Confirmed!</h1>"
        "<p>Hello {customer},</p>"
        "<p>Your order for <strong>{vegetable}</strong> has been accepted by {farmer}.</p>"
        "<p>The farmer will now begin growing your vegetables. You can track the progress in your dashboard.</p>",
    ),
    'order_rejected': (
        "Order Update - {vegetable}",
        "<h1>Order Update</h1>"
        "<p>Hello {customer},</p>"
        "<p>Unfortunately, your order for <strong>{vegetable}</strong> could not be accepted at this time.</p>"
        "<p>Please try ordering from another farmer or contact support for assistance.</p>",
    ),
    'ready_for_delivery': (
        "Your Vegetables Are Ready! - {vegetable}",
        "<h1>Harvest Complete!</h1>"
        "<p>Hello {customer},</p>"
        "<p>Your <strong>{vegetable}</strong> has been harvested and is ready for delivery!</p>"
        "<p>Please complete the final payment in your dashboard to arrange delivery.</p>",
    ),
    'order_delivered': (
        "Order Delivered - {vegetable}",
        "<h1>Enjoy Your Fresh Vegetables!</h1>"
        "<p>Hello {customer},</p>"
        "<p>Your order of <strong>{vegetable}</strong> has been delivered!</p>"
        "<p>We hope you enjoy your fresh, organic produce. Thank you for choosing GrowShare!</p>",
    ),
}
NOTIFICATION_TYPES = tuple(TEMPLATES)

# Order events that notify the consumer; placement notifies the farmer
STATUS_EVENTS = {
    'accepted': 'order_accepted',
    'rejected': 'order_rejected',
    'harvested': 'ready_for_delivery',
    'delivered': 'order_delivered',
}


def render_notification(notification):
    """Return (subject, html) for a notification payload.

    Unknown types fall back to the order_placed template.
    """
    subject_template, body_template = TEMPLATES.get(notification.get('type'), TEMPLATES['order_placed'])
    vegetable = notification.get('vegetableName') or 'your vegetables'
    if notification.get('type') not in TEMPLATES or notification.get('type') == 'order_placed':
        farmer = notification.get('farmerName') or 'Farmer'
        customer = notification.get('customerName') or 'a customer'
    else:
        farmer = notification.get('farmerName') or 'the farmer'
        customer = notification.get('customerName') or 'Customer'

    subject = subject_template.format(vegetable=vegetable)
    html = format_html(body_template, vegetable=vegetable, farmer=farmer, customer=customer) + SIGNATURE
    return subject, html


def send_notification(notification):
    """Email a notification, or only log it when email is not configured.

    Raises NotificationDispatchError when the mail layer fails.
    """
    subject, html = render_notification(notification)
    recipient = notification.get('recipientEmail')

    if not getattr(settings, 'NOTIFICATIONS_EMAIL_ENABLED', False):
        logger.info(
            f"Email not configured - logging notification {notification.get('type')} "
            f"for order {notification.get('orderId')} to {recipient}"
        )
        return {'sent': False, 'message': 'Notification logged (email not configured)'}

    if not recipient:
        raise NotificationDispatchError("Notification has no recipient email")

    try:
        send_mail(
            subject=subject,
            message=strip_tags(html),
            from_email=settings.NOTIFICATION_FROM_EMAIL,
            recipient_list=[recipient],
            html_message=html,
            fail_silently=False,
        )
    except Exception as e:
        raise NotificationDispatchError(f"Failed to send {notification.get('type')} email: {e}") from e

    logger.info(f"Notification {notification.get('type')} sent to {recipient}")
    return {'sent': True, 'message': 'Notification sent'}


def build_order_notification(notification_type, order):
    consumer = order.consumer
    farmer_user = order.farmer.user
    recipient = farmer_user if notification_type == 'order_placed' else consumer
    return {
        'type': notification_type,
        'orderId': str(order.id),
        'recipientEmail': recipient.email,
        'recipientName': recipient.display_name,
        'vegetableName': order.vegetable_name,
        'farmerName': order.farmer.farm_name or farmer_user.display_name,
        'customerName': consumer.display_name,
    }


def dispatch_order_event(notification_type, order):
    """Fire-and-forget notification for an order event.

    Never raises: the order operation that triggered it has already succeeded.
    """
    try:
        send_notification(build_order_notification(notification_type, order))
    except NotificationDispatchError as e:
        logger.warning(f"Notification {notification_type} for order {order.id} not delivered: {e}")
        return False
    except Exception:
        logger.exception(f"Unexpected error dispatching {notification_type} for order {order.id}")
        return False
    return True
