import logging

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bridgepath.core import openrouter
from bridgepath.core.exceptions import ServiceError
from bridgepath.core.permissions import IsStaffRole
from bridgepath.core.roles import ADMIN, CASE_MANAGER, get_original_role, get_effective_role, visible
from bridgepath.core.utils import create_audit_log

from .filters import ParticipantFilter
from .intelligence import build_context, generate_insights
from .models import Participant, Certification, ReadinessAssessment
from .readiness import assess
from .serializers import (
    ParticipantSerializer, IntakeSerializer, CertificationSerializer,
    ReadinessRequestSerializer, ReadinessAssessmentSerializer,
)

logger = logging.getLogger('bridgepath.participants')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def participant_list_create(request):
    """List participants or enroll a new one"""
    if request.method == 'GET':
        queryset = visible(Participant.objects.all(), request)
        filterset = ParticipantFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ParticipantSerializer(filterset.qs.order_by('name'), many=True)
        return Response({'ok': True, 'participants': serializer.data})

    serializer = ParticipantSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    participant = serializer.save()
    create_audit_log(request=request, action='create', model_name='Participant', object_id=participant.pk,
                     object_name=participant.name)
    logger.info(f"Participant {participant.pk} created")
    return Response({'ok': True, 'id': participant.pk}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def participant_detail(request, pk):
    """Retrieve, update or remove a participant"""
    participant = get_object_or_404(Participant, pk=pk)

    if request.method == 'GET':
        return Response({'ok': True, 'participant': ParticipantSerializer(participant).data})

    if request.method == 'PATCH':
        serializer = ParticipantSerializer(participant, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        create_audit_log(request=request, action='update', model_name='Participant', object_id=participant.pk,
                         object_name=participant.name, changes=dict(request.data))
        return Response({'ok': True, 'participant': serializer.data})

    if get_original_role(request.user) != ADMIN:
        return Response({'ok': False, 'error': 'Unauthorized'}, status=status.HTTP_403_FORBIDDEN)

    name = participant.name
    participant.delete()
    create_audit_log(request=request, action='delete', model_name='Participant', object_id=pk, object_name=name)
    return Response({'ok': True})


def can_manage_intake(request, participant):
    if get_original_role(request.user) == ADMIN:
        return True
    if get_effective_role(request) != CASE_MANAGER:
        return False
    return participant.user is not None and participant.user.case_manager_id == request.user.pk


def intake_payload(participant):
    return {
        'ok': True,
        'participant_id': participant.pk,
        'intake_status': participant.intake_status,
        'intake': participant.intake or {},
        'intake_updated_at': participant.intake_updated_at,
    }


@api_view(['GET', 'POST', 'PUT'])
@permission_classes([IsAuthenticated])
def participant_intake(request, pk):
    """Read, save or complete a participant's intake form"""
    participant = get_object_or_404(Participant.objects.select_related('user'), pk=pk)
    if not can_manage_intake(request, participant):
        return Response({'ok': False, 'error': 'Forbidden'}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'GET':
        return Response(intake_payload(participant))

    if request.method == 'PUT':
        participant.intake_status = 'complete'
        participant.intake_updated_at = timezone.now()
        participant.save(update_fields=['intake_status', 'intake_updated_at', 'updated_at'])
        create_audit_log(request=request, action='intake_complete', model_name='Participant',
                         object_id=participant.pk, object_name=participant.name)
        return Response(intake_payload(participant))

    raw = request.data.get('intake', request.data)
    serializer = IntakeSerializer(data=raw)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    intake = dict(participant.intake or {})
    intake.update(serializer.validated_data)
    participant.intake = intake
    if participant.intake_status == 'incomplete':
        participant.intake_status = 'in_progress'
    participant.intake_updated_at = timezone.now()
    participant.save(update_fields=['intake', 'intake_status', 'intake_updated_at', 'updated_at'])

    create_audit_log(request=request, action='intake_update', model_name='Participant',
                     object_id=participant.pk, object_name=participant.name,
                     changes={'fields': sorted(serializer.validated_data.keys())})
    return Response(intake_payload(participant))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def certification_list_create(request):
    """List or record certifications"""
    if request.method == 'GET':
        queryset = Certification.objects.select_related('participant')
        participant_id = request.query_params.get('participant_id')
        if participant_id:
            queryset = queryset.filter(participant_id=participant_id)
        serializer = CertificationSerializer(queryset, many=True)
        return Response({'ok': True, 'certifications': serializer.data})

    serializer = CertificationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    certification = serializer.save()
    create_audit_log(request=request, action='create', model_name='Certification', object_id=certification.pk,
                     object_name=str(certification))
    return Response({'ok': True, 'certification': CertificationSerializer(certification).data},
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def readiness(request):
    """Score phase-advancement readiness from supplied metrics"""
    serializer = ReadinessRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    participant = serializer.validated_data['participant_id']
    metrics = dict(serializer.validated_data['metrics'])
    readiness_status, assessment_text, recommendation = assess(metrics)

    assessment = ReadinessAssessment.objects.create(
        participant=participant,
        status=readiness_status,
        assessment=assessment_text,
        recommendation=recommendation,
        metrics=metrics,
        generated_by=request.user,
    )
    return Response({'ok': True, 'assessment': ReadinessAssessmentSerializer(assessment).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def participant_intelligence(request):
    """LLM advisor insights for one participant"""
    participant_id = request.data.get('participant_id')
    participant = None
    if str(participant_id or '').isdigit():
        participant = Participant.objects.filter(pk=int(participant_id)).first()
    if participant is None:
        return Response({'ok': False, 'error': 'Participant not found'}, status=status.HTTP_404_NOT_FOUND)

    if not openrouter.is_configured():
        return Response({'ok': False, 'error': 'AI API key not configured'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    context = build_context(participant)
    try:
        insights = generate_insights(context)
    except (ServiceError, ValueError) as e:
        logger.error(f"Participant intelligence failed for {participant.pk}: {str(e)}")
        return Response({'ok': False, 'error': 'Failed to generate AI intelligence'},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({'ok': True, 'metrics': context, 'insights': insights})
