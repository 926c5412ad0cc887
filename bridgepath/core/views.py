import logging
import secrets

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.shortcuts import get_object_or_404
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_encode, urlsafe_base64_decode

from .models import AuditLog
from .permissions import IsAdminRole, IsCaseManagerRole
from .roles import (
    ADMIN, PARTICIPANT, VIEW_AS_COOKIE, DEMO_MODE_COOKIE,
    get_original_role, get_effective_role, set_user_role, is_demo_mode,
)
from .serializers import (
    UserSerializer, AdminUserCreateSerializer, AdminUserUpdateSerializer,
    DeleteUsersSerializer, ResetPasswordSerializer, PasswordResetConfirmSerializer,
    ParticipantAssignmentSerializer, SupervisorAssignmentSerializer,
    ViewAsSerializer, AuditLogSerializer,
)
from .utils import create_audit_log

User = get_user_model()

logger = logging.getLogger('bridgepath.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['role'] = get_original_role(self.user)
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = get_original_role(user)
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def build_password_reset_link(user):
    uidb64 = urlsafe_base64_encode(force_bytes(user.pk))
    token = default_token_generator.make_token(user)
    app_url = getattr(settings, 'APP_URL', 'http://localhost:3000').rstrip('/')
    return f"{app_url}/reset-password/{uidb64}/{token}"


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """Drop impersonation state; JWTs are discarded client-side"""
    response = Response({'ok': True})
    response.delete_cookie(VIEW_AS_COOKIE)
    return response


@api_view(['GET'])
@permission_classes([AllowAny])
def whoami(request):
    """Who is calling and which role they are acting as"""
    user = request.user
    if not user or not user.is_authenticated:
        return Response({'authenticated': False}, status=status.HTTP_401_UNAUTHORIZED)

    original_role = get_original_role(user)
    if not original_role:
        return Response(
            {'authenticated': True, 'provisioned': False, 'uid': user.pk},
            status=status.HTTP_409_CONFLICT,
        )

    return Response({
        'authenticated': True,
        'provisioned': True,
        'uid': user.pk,
        'role': get_effective_role(request),
        'original_role': original_role,
        'display_name': user.display_name,
        'demo_mode': is_demo_mode(request),
    })


@api_view(['POST'])
@permission_classes([AllowAny])
def view_as(request):
    """Let an admin browse as another role"""
    if get_original_role(request.user) != ADMIN:
        return Response({'error': 'Unauthorized'}, status=status.HTTP_401_UNAUTHORIZED)

    serializer = ViewAsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    role = serializer.validated_data.get('role')
    response = Response({'success': True, 'role': role if role and role != ADMIN else ADMIN})
    if not role or role == ADMIN:
        response.delete_cookie(VIEW_AS_COOKIE)
    else:
        response.set_cookie(
            VIEW_AS_COOKIE, role,
            httponly=True, samesite='Lax', secure=not settings.DEBUG,
        )
    create_audit_log(request=request, action='view_as', model_name='User',
                     object_id=request.user.pk, changes={'role': role or ADMIN})
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def demo_mode(request):
    """Toggle inclusion of seeded mock records"""
    enabled = bool(request.data.get('enabled'))
    response = Response({'ok': True, 'demo_mode': enabled})
    if enabled:
        response.set_cookie(DEMO_MODE_COOKIE, 'true', samesite='Lax')
    else:
        response.delete_cookie(DEMO_MODE_COOKIE)
    return response


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset_confirm(request):
    """Complete a reset link issued by an admin"""
    serializer = PasswordResetConfirmSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        uid = force_str(urlsafe_base64_decode(serializer.validated_data['uid']))
        user = User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    if user is None or not default_token_generator.check_token(user, serializer.validated_data['token']):
        return Response({'error': 'Invalid or expired reset link'}, status=status.HTTP_400_BAD_REQUEST)

    user.set_password(serializer.validated_data['password'])
    user.save(update_fields=['password', 'updated_at'])
    return Response({'ok': True})


# Admin user management
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_user_list_create(request):
    """List profiles or provision a new staff/participant account"""
    if request.method == 'GET':
        users = User.objects.prefetch_related('groups').order_by('display_name', 'email')
        return Response({'ok': True, 'users': UserSerializer(users, many=True).data})

    serializer = AdminUserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    email = data['email'].lower()
    if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username__iexact=email).exists():
        return Response({'ok': False, 'error': 'That email is already in use.'}, status=status.HTTP_409_CONFLICT)

    with transaction.atomic():
        user = User(
            username=email,
            email=email,
            display_name=data['display_name'],
            is_active=True,
        )
        # Temporary password: the user sets their own via the reset link
        user.set_password(secrets.token_urlsafe(18))
        if data['role'] == PARTICIPANT:
            user.case_manager = data.get('case_manager_id')
            user.supervisor = data.get('supervisor_id')
        user.save()
        set_user_role(user, data['role'])

        if data['role'] == PARTICIPANT:
            from bridgepath.participants.models import Participant
            Participant.objects.create(
                user=user,
                name=data['display_name'],
                email=email,
                intake_status='incomplete',
                intake={},
            )

    create_audit_log(request=request, action='create', model_name='User', object_id=user.pk,
                     object_name=user.display_name, changes={'role': data['role'], 'email': email})
    logger.info(f"User {email} provisioned with role {data['role']}")

    return Response({
        'ok': True,
        'uid': user.pk,
        'email': email,
        'role': data['role'],
        'reset_link': build_password_reset_link(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_user_update(request):
    """Update a profile's role, display name or email"""
    serializer = AdminUserUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    user = data['target_uid']
    changes = {}

    if data.get('display_name'):
        user.display_name = data['display_name']
        changes['display_name'] = data['display_name']
    if data.get('email'):
        user.email = data['email'].lower()
        changes['email'] = user.email
    user.save()

    if data.get('role'):
        set_user_role(user, data['role'])
        changes['role'] = data['role']

    create_audit_log(request=request, action='update', model_name='User', object_id=user.pk,
                     object_name=user.display_name, changes=changes)
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_users_delete(request):
    """Delete several accounts; reports partial failure with 207"""
    serializer = DeleteUsersSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    uids = serializer.validated_data['uids']
    if request.user.pk in uids:
        return Response(
            {'ok': False, 'error': "You can't delete your own Super Admin account."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    failed = []
    for uid in uids:
        user = User.objects.filter(pk=uid).first()
        if user is None:
            continue
        try:
            with transaction.atomic():
                user.delete()
        except DatabaseError as e:
            logger.error(f"Failed to delete user {uid}: {str(e)}")
            failed.append({'uid': uid, 'error': str(e) or 'Delete failed'})
            continue
        create_audit_log(request=request, action='delete', model_name='User', object_id=uid)

    if failed:
        return Response({'ok': False, 'error': 'Some deletions failed.', 'failed': failed},
                        status=status.HTTP_207_MULTI_STATUS)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_reset_password(request):
    """Issue a password reset link for an account"""
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invalid email'}, status=status.HTTP_400_BAD_REQUEST)

    user = User.objects.filter(email__iexact=serializer.validated_data['email']).first()
    if user is None:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    create_audit_log(request=request, action='password_reset', model_name='User', object_id=user.pk,
                     object_name=user.display_name)
    return Response({'ok': True, 'link': build_password_reset_link(user)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_participant_assignments(request):
    """Set or clear a participant's case manager and supervisor"""
    serializer = ParticipantAssignmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    participant_user = data['participant_id']
    changes = {}
    if 'case_manager_id' in data:
        participant_user.case_manager = data['case_manager_id']
        changes['case_manager_id'] = participant_user.case_manager_id
    if 'supervisor_id' in data:
        participant_user.supervisor = data['supervisor_id']
        changes['supervisor_id'] = participant_user.supervisor_id
    participant_user.save()

    create_audit_log(request=request, action='assign', model_name='User', object_id=participant_user.pk,
                     object_name=participant_user.display_name, changes=changes)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCaseManagerRole])
def case_manager_participant_supervisor(request):
    """A case manager reassigns the supervisor of one of their participants"""
    serializer = SupervisorAssignmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    participant_user = User.objects.filter(pk=data['participant_id']).first()
    if participant_user is None:
        return Response({'ok': False, 'error': 'Participant not found'}, status=status.HTTP_404_NOT_FOUND)

    if participant_user.case_manager_id != request.user.pk:
        return Response({'ok': False, 'error': 'Forbidden'}, status=status.HTTP_403_FORBIDDEN)

    participant_user.supervisor = data.get('supervisor_id')
    participant_user.save()

    create_audit_log(request=request, action='assign', model_name='User', object_id=participant_user.pk,
                     object_name=participant_user.display_name,
                     changes={'supervisor_id': participant_user.supervisor_id})
    return Response({'ok': True})


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)
    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
