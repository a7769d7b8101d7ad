from unittest import mock

import pytest
import requests

from assistantApp.prompts import build_system_prompt, vegetable_demand

CHAT_URL = '/assistant/chat/'


@pytest.fixture
def gateway(settings):
    settings.AI_GATEWAY_API_KEY = 'test-key'
    settings.AI_GATEWAY_URL = 'https://gateway.example.com/v1/chat/completions'
    with mock.patch('assistantApp.views.requests.post') as post:
        yield post


def upstream(status_code=200, chunks=()):
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = 'upstream said no'
    response.iter_content.return_value = list(chunks)
    return response


def chat_body(chat_type='trending', **extra):
    body = {'messages': [{'role': 'user', 'content': 'What sells best?'}], 'type': chat_type}
    body.update(extra)
    return body


def test_streams_gateway_body(client_for, consumer, gateway):
    gateway.return_value = upstream(chunks=[b'data: {"delta": "Tomatoes"}\n\n', b'data: [DONE]\n\n'])

    response = client_for(consumer).post(CHAT_URL, chat_body(context={'top': 'Tomato'}), format='json')

    assert response.status_code == 200
    assert response['Content-Type'] == 'text/event-stream'
    assert b''.join(response.streaming_content) == b'data: {"delta": "Tomatoes"}\n\ndata: [DONE]\n\n'

    kwargs = gateway.call_args.kwargs
    assert kwargs['stream'] is True
    assert kwargs['timeout'] == 30
    assert kwargs['headers']['Authorization'] == 'Bearer test-key'
    messages = kwargs['json']['messages']
    assert messages[0]['role'] == 'system'
    assert '"top": "Tomato"' in messages[0]['content']
    assert messages[1] == {'role': 'user', 'content': 'What sells best?'}


def test_context_defaults_to_order_counts(client_for, order, consumer, gateway):
    gateway.return_value = upstream(chunks=[b'data: [DONE]\n\n'])

    client_for(consumer).post(CHAT_URL, chat_body('farmer'), format='json')

    system_prompt = gateway.call_args.kwargs['json']['messages'][0]['content']
    assert '"Tomato": 1' in system_prompt


def test_health_context_lists_available_vegetables(client_for, consumer, listing, gateway):
    gateway.return_value = upstream(chunks=[b'data: [DONE]\n\n'])

    client_for(consumer).post(CHAT_URL, chat_body('health'), format='json')

    system_prompt = gateway.call_args.kwargs['json']['messages'][0]['content']
    assert '["Carrot", "Tomato"]' in system_prompt


@pytest.mark.parametrize('upstream_status,expected', [(429, 429), (402, 402), (500, 500), (503, 500)])
def test_gateway_errors_are_mapped(client_for, consumer, gateway, upstream_status, expected):
    gateway.return_value = upstream(status_code=upstream_status)

    response = client_for(consumer).post(CHAT_URL, chat_body(), format='json')

    assert response.status_code == expected
    assert 'error' in response.data


def test_gateway_timeout(client_for, consumer, gateway):
    gateway.side_effect = requests.exceptions.Timeout('read timed out')

    response = client_for(consumer).post(CHAT_URL, chat_body(), format='json')
    assert response.status_code == 504


def test_missing_api_key(client_for, consumer, settings):
    settings.AI_GATEWAY_API_KEY = ''
    with mock.patch('assistantApp.views.requests.post') as post:
        response = client_for(consumer).post(CHAT_URL, chat_body(), format='json')

    assert response.status_code == 500
    post.assert_not_called()


def test_unknown_chat_type_is_rejected(client_for, consumer, gateway):
    response = client_for(consumer).post(CHAT_URL, chat_body('weather'), format='json')
    assert response.status_code == 400
    gateway.assert_not_called()


def test_vegetable_demand_counts_orders(order):
    assert vegetable_demand() == {'Tomato': 1}


def test_unknown_prompt_type_uses_generic_prompt():
    assert 'GrowShare' in build_system_prompt('other', {})
