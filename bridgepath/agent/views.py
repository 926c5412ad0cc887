import logging

from django.conf import settings
from django.http import StreamingHttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core import openrouter
from bridgepath.core.exceptions import ServiceError
from bridgepath.core.permissions import IsStaffRole

from . import pipedream
from .models import OpsAgentSession
from .runner import start_turn
from .serializers import OpsAgentSessionListSerializer, OpsAgentMessageSerializer, ConnectLinkSerializer

logger = logging.getLogger('bridgepath.agent')

SESSION_LIST_LIMIT = 20


def session_not_found():
    return Response({'ok': False, 'error': 'Session not found'}, status=status.HTTP_404_NOT_FOUND)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def ops_agent(request):
    """List or read agent sessions, or stream a reply to a new message"""
    if request.method == 'GET':
        if request.query_params.get('list') == 'true':
            sessions = OpsAgentSession.objects.filter(user=request.user).order_by('-updated_at')[:SESSION_LIST_LIMIT]
            return Response({'ok': True, 'sessions': OpsAgentSessionListSerializer(sessions, many=True).data})

        session_id = request.query_params.get('session_id') or request.query_params.get('sessionId')
        if not session_id:
            return Response({'ok': False, 'error': 'Missing sessionId'}, status=status.HTTP_400_BAD_REQUEST)
        session = OpsAgentSession.objects.filter(pk=session_id, user=request.user).first() \
            if str(session_id).isdigit() else None
        if session is None:
            return session_not_found()
        return Response({'ok': True, 'session_id': session.pk, 'messages': session.messages or []})

    serializer = OpsAgentMessageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if not openrouter.is_configured():
        return Response({'ok': False, 'error': 'OpenRouter key missing'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    if not pipedream.is_configured():
        return Response({'ok': False, 'error': 'Pipedream MCP credentials missing'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    data = serializer.validated_data
    session = None
    if data.get('session_id'):
        session = OpsAgentSession.objects.filter(pk=data['session_id']).first()
        if session is not None and session.user_id != request.user.pk:
            return session_not_found()
    if session is None:
        session = OpsAgentSession.objects.create(user=request.user, page_context=data.get('page_context') or {})
    elif 'page_context' in data:
        session.page_context = data['page_context']
        session.save(update_fields=['page_context', 'updated_at'])

    try:
        chunks = start_turn(session, data['message'])
    except ServiceError as e:
        logger.error(f"Ops agent failed to start for session {session.pk}: {str(e)}")
        return Response({'ok': False, 'error': 'Failed to start stream', 'session_id': session.pk},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = StreamingHttpResponse(chunks, content_type='text/plain; charset=utf-8')
    response['Cache-Control'] = 'no-cache'
    response['X-Session-Id'] = str(session.pk)
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def pipedream_connect_link(request):
    """Create a Pipedream Connect link for the calling user"""
    serializer = ConnectLinkSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if not pipedream.is_configured():
        return Response({'ok': False, 'error': 'Pipedream credentials missing'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    app_slug = serializer.validated_data.get('app') or settings.PIPEDREAM_APP_SLUG
    if not app_slug:
        return Response({
            'ok': False,
            'error': 'PIPEDREAM_APP_SLUG is required for Connect Link validation. '
                     'Set it to a valid app slug from your project.',
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        link = pipedream.create_connect_token(request.user.pk, app_slug=app_slug)
    except ServiceError as e:
        return Response({'ok': False, 'error': str(e) or 'Failed to create connect link'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Pipedream connect link created for user {request.user.pk} (app {app_slug})")
    return Response({
        'ok': True,
        'token': link['token'],
        'expires_at': link['expires_at'],
        'connect_link_url': link['connect_link_url'],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def pipedream_apps(request):
    """Apps available to the Pipedream project"""
    if not pipedream.is_configured():
        return Response({'ok': False, 'error': 'Pipedream credentials missing'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        apps = pipedream.list_apps(request.query_params.get('q'))
    except ServiceError as e:
        return Response({'ok': False, 'error': str(e) or 'Failed to fetch apps'},
                        status=e.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR)

    current_slug = settings.PIPEDREAM_APP_SLUG
    matching = next(
        (app for app in apps if current_slug and current_slug in (app['name_slug'], app['id'])),
        None,
    )
    return Response({
        'ok': True,
        'apps': apps,
        'current_app_slug': current_slug or None,
        'is_current_app_slug_valid': matching is not None,
        'matching_app': {
            'id': matching['id'],
            'name': matching['name'],
            'name_slug': matching['name_slug'],
        } if matching else None,
    })
