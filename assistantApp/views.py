import logging

import requests
from django.conf import settings
from django.http import StreamingHttpResponse
from rest_framework import serializers, status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .prompts import CHAT_TYPES, build_system_prompt, default_context

logger = logging.getLogger(__name__)


class ChatMessageSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=['user', 'assistant', 'system'])
    content = serializers.CharField(allow_blank=True)


class ChatRequestSerializer(serializers.Serializer):
    messages = ChatMessageSerializer(many=True)
    type = serializers.ChoiceField(choices=CHAT_TYPES)
    context = serializers.DictField(required=False, allow_null=True)


def stream_upstream(upstream):
    try:
        for chunk in upstream.iter_content(chunk_size=None):
            if chunk:
                yield chunk
    except requests.exceptions.RequestException as e:
        logger.error(f"AI gateway stream interrupted: {e}")
    finally:
        upstream.close()


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def chat(request):
    """Relay a chat conversation to the AI gateway and stream the answer back"""
    serializer = ChatRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid chat request',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    api_key = settings.AI_GATEWAY_API_KEY
    if not api_key:
        logger.error("AI chat requested but AI_GATEWAY_API_KEY is not configured")
        return Response({'error': 'AI_GATEWAY_API_KEY is not configured'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    chat_type = serializer.validated_data['type']
    context = serializer.validated_data.get('context')
    if not context:
        context = default_context(chat_type)

    payload = {
        'model': settings.AI_GATEWAY_MODEL,
        'messages': [{'role': 'system', 'content': build_system_prompt(chat_type, context)}]
        + [dict(message) for message in serializer.validated_data['messages']],
        'stream': True,
    }

    try:
        upstream = requests.post(
            settings.AI_GATEWAY_URL,
            json=payload,
            headers={'Authorization': f'Bearer {api_key}'},
            stream=True,
            timeout=settings.REMOTE_REQUEST_TIMEOUT,
        )
    except requests.exceptions.Timeout as e:
        logger.error(f"AI gateway timed out: {e}")
        return Response({'error': 'AI service timed out. Please try again.'},
                        status=status.HTTP_504_GATEWAY_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error(f"AI gateway unreachable: {e}")
        return Response({'error': 'AI service temporarily unavailable'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if upstream.status_code == 429:
        upstream.close()
        return Response({'error': 'Rate limit exceeded. Please try again later.'},
                        status=status.HTTP_429_TOO_MANY_REQUESTS)
    if upstream.status_code == 402:
        upstream.close()
        return Response({'error': 'AI credits exhausted. Please contact support.'},
                        status=status.HTTP_402_PAYMENT_REQUIRED)
    if not upstream.ok:
        logger.error(f"AI gateway error: {upstream.status_code} {upstream.text}")
        upstream.close()
        return Response({'error': 'AI service temporarily unavailable'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Streaming {chat_type} chat for user {request.user.id}")
    response = StreamingHttpResponse(stream_upstream(upstream), content_type='text/event-stream')
    response['Cache-Control'] = 'no-cache'
    return response
