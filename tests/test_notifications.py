from decimal import Decimal
from smtplib import SMTPException
from unittest import mock

import pytest
from django.core import mail

from backend.exceptions import NotificationDispatchError
from notificationApp.emails import render_notification, send_notification, dispatch_order_event
from orderApp.models import Order


@pytest.fixture
def email_enabled(settings):
    settings.NOTIFICATIONS_EMAIL_ENABLED = True
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'


def test_unknown_type_falls_back_to_order_placed():
    subject, html = render_notification({'type': 'mystery', 'vegetableName': 'Kale'})
    assert subject == 'New Order Received - Kale'
    assert 'Hello Farmer' in html


def test_names_are_escaped():
    _, html = render_notification({
        'type': 'order_accepted', 'vegetableName': 'Kale', 'customerName': '<b>Eve</b>'
    })
    assert '&lt;b&gt;Eve&lt;/b&gt;' in html


def test_logged_only_when_email_disabled(settings):
    settings.NOTIFICATIONS_EMAIL_ENABLED = False
    result = send_notification({'type': 'order_placed', 'recipientEmail': 'f@example.com'})

    assert result['sent'] is False
    assert len(mail.outbox) == 0


def test_placing_an_order_emails_the_farmer(email_enabled, consumer, listing, farmer_user):
    Order.objects.place_order(consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave')

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == [farmer_user.email]
    assert message.subject == 'New Order Received - Tomato'


def test_status_events_email_the_consumer(email_enabled, order, farmer_user, consumer):
    mail.outbox.clear()
    order.accept(farmer_user)
    for _ in range(4):
        order.advance(farmer_user)

    subjects = [m.subject for m in mail.outbox]
    assert subjects == [
        'Your Order Has Been Accepted! - Tomato',
        'Your Vegetables Are Ready! - Tomato',
    ]
    assert all(m.to == [consumer.email] for m in mail.outbox)


def test_mail_failure_does_not_undo_the_order(email_enabled, consumer, listing):
    with mock.patch('notificationApp.emails.send_mail', side_effect=SMTPException('relay down')):
        order = Order.objects.place_order(consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave')

    assert Order.objects.filter(pk=order.pk, status='pending').exists()


def test_dispatch_reports_failure_without_raising(email_enabled, order):
    with mock.patch('notificationApp.emails.send_mail', side_effect=SMTPException('relay down')):
        assert dispatch_order_event('order_accepted', order) is False


def test_send_raises_dispatch_error(email_enabled):
    with mock.patch('notificationApp.emails.send_mail', side_effect=SMTPException('relay down')):
        with pytest.raises(NotificationDispatchError):
            send_notification({'type': 'order_placed', 'recipientEmail': 'f@example.com'})


def test_relay_endpoint(client_for, consumer, email_enabled):
    response = client_for(consumer).post('/notifications/send/', {
        'type': 'order_delivered',
        'orderId': 'abc-123',
        'recipientEmail': 'alice@example.com',
        'recipientName': 'Alice',
        'vegetableName': 'Carrot',
    }, format='json')

    assert response.status_code == 200
    assert response.data['sent'] is True
    assert mail.outbox[0].subject == 'Order Delivered - Carrot'


def test_relay_endpoint_reports_send_failure(client_for, consumer, email_enabled):
    with mock.patch('notificationApp.emails.send_mail', side_effect=SMTPException('relay down')):
        response = client_for(consumer).post('/notifications/send/', {
            'type': 'order_placed',
            'orderId': 'abc-123',
            'recipientEmail': 'farmer@example.com',
            'vegetableName': 'Carrot',
        }, format='json')

    assert response.status_code == 500
    assert response.data['success'] is False
