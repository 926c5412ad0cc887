import logging
import smtplib

from django.conf import settings
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from bridgepath.core import openrouter
from bridgepath.core.exceptions import OpenRouterError
from bridgepath.core.permissions import IsStaffRole
from bridgepath.core.roles import ADMIN, get_original_role, is_demo_mode
from bridgepath.core.utils import create_audit_log

from . import daily_brief as brief_service
from . import overviews
from .generation import create_report
from .models import Report
from .serializers import (
    ReportSerializer, ReportListSerializer, ReportCreateSerializer,
    DashboardOverviewSerializer, ProductionOverviewSerializer,
    WorkLogsOverviewSerializer, DailyBriefRequestSerializer,
)
from .streaming import UNAVAILABLE_MESSAGE, stream_analysis

logger = logging.getLogger('bridgepath.reports')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def report_list_create(request):
    """List saved reports or generate a new one"""
    if request.method == 'GET':
        reports = Report.objects.select_related('created_by').order_by('-generated_at')
        return Response({'ok': True, 'reports': ReportListSerializer(reports, many=True).data})

    serializer = ReportCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    report = create_report(
        data['report_type'],
        data['start_date'],
        data['end_date'],
        data['include_narrative'],
        data['include_stories'],
        data['include_charts'],
        created_by=request.user,
        demo_mode=is_demo_mode(request),
    )
    create_audit_log(request=request, action='report_generate', model_name='Report', object_id=report.pk,
                     object_name=report.title)
    return Response({'ok': True, 'id': report.pk, 'report': ReportSerializer(report).data},
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def report_detail(request, pk):
    report = get_object_or_404(Report, pk=pk)

    if request.method == 'GET':
        return Response({'ok': True, 'report': ReportSerializer(report).data})

    if get_original_role(request.user) != ADMIN:
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    title = report.title
    report.delete()
    create_audit_log(request=request, action='delete', model_name='Report', object_id=pk, object_name=title)
    return Response({'ok': True})


def analysis_response(data, prompt):
    """NDJSON stream when the model is configured, plain JSON otherwise."""
    if not openrouter.is_configured():
        return Response({'ok': True, **data, 'analysis': UNAVAILABLE_MESSAGE})
    try:
        return stream_analysis(data, prompt)
    except OpenRouterError as e:
        logger.error(f"Overview analysis failed: {str(e)}")
        return Response({'ok': False, 'error': 'AI Error'}, status=status.HTTP_502_BAD_GATEWAY)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def dashboard_overview(request):
    """Per-participant dashboard metrics with streamed supervisor commentary"""
    serializer = DashboardOverviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    filters = serializer.validated_data['filters']
    start_date = filters['date_range']['start']
    end_date = filters['date_range']['end']
    data = overviews.dashboard_overview(
        filters['phase'], filters['status'], start_date, end_date, demo_mode=is_demo_mode(request)
    )
    prompt = overviews.dashboard_prompt(filters['phase'], filters['status'], start_date, end_date, data)
    return analysis_response(data, prompt)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def production_overview(request):
    """Production trends against the previous period with streamed commentary"""
    serializer = ProductionOverviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    start_date = serializer.validated_data['date_range']['start']
    end_date = serializer.validated_data['date_range']['end']
    data = overviews.production_overview(start_date, end_date, demo_mode=is_demo_mode(request))
    return analysis_response(data, overviews.production_prompt(start_date, end_date, data))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def work_logs_overview(request):
    """Staffing and shift patterns with streamed commentary"""
    serializer = WorkLogsOverviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    filters = serializer.validated_data['filters']
    start_date = filters['date_range']['start']
    end_date = filters['date_range']['end']
    data = overviews.work_logs_overview(
        start_date,
        end_date,
        search=filters['search'],
        participant_id=filters['participant_id'],
        role=filters['role'],
        demo_mode=is_demo_mode(request),
    )
    return analysis_response(data, overviews.work_logs_prompt(filters['role'], start_date, end_date, data))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def daily_brief(request):
    """Seven-day operations snapshot with the streamed executive brief"""
    serializer = DailyBriefRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    day = serializer.validated_data.get('date') or timezone.localdate()
    brief = brief_service.build_brief_data(day, demo_mode=is_demo_mode(request))
    payload = {
        'metrics': brief['metrics'],
        'generated_at': brief['generated_at'],
        'data': brief['data'],
    }

    if not openrouter.is_configured():
        return Response({'ok': True, 'brief': UNAVAILABLE_MESSAGE, **payload})
    try:
        return stream_analysis(payload, brief_service.brief_prompt(brief))
    except OpenRouterError as e:
        logger.error(f"Daily brief stream failed: {str(e)}")
        return Response({'ok': True, 'brief': 'Error generating brief.', **payload})


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def cron_daily_brief(request):
    """Scheduled entry point that emails the brief to staff"""
    cron_secret = getattr(settings, 'CRON_SECRET', '')
    if not cron_secret:
        logger.error("CRON_SECRET not configured")
        return Response({'ok': False, 'error': 'Cron secret not configured'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if request.META.get('HTTP_AUTHORIZATION') != f'Bearer {cron_secret}':
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    recipients = brief_service.staff_recipients()
    if not recipients:
        logger.warning("No staff email addresses found")
        return Response({'ok': False, 'error': 'No recipients found'}, status=status.HTTP_400_BAD_REQUEST)

    brief_text, brief = brief_service.generate_brief()
    try:
        sent = brief_service.send_brief_email(brief_text, brief, recipients)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Daily brief email failed: {str(e)}")
        return Response({'ok': False, 'error': str(e) or 'Failed to send daily brief'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(action='brief_sent', model_name='DailyBrief', object_id=brief['date'].isoformat(),
                     object_name=brief['metrics']['program_health'], changes={'recipients': len(recipients)})
    return Response({
        'ok': True,
        'message': 'Daily brief sent successfully',
        'sent': sent,
        'recipients': len(recipients),
        'generated_at': brief['generated_at'],
    })
