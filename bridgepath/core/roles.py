"""
Role resolution for requests.

A user's stored role is the Django group they belong to. Admins may
impersonate a lower role through the ``view-as-role`` cookie; staff checks
use the effective role while admin-only operations use the stored one.
"""
from django.contrib.auth.models import Group

PARTICIPANT = 'participant'
SUPERVISOR = 'supervisor'
CASE_MANAGER = 'case_manager'
ADMIN = 'admin'

ROLE_CHOICES = [
    (PARTICIPANT, 'Participant'),
    (SUPERVISOR, 'Supervisor'),
    (CASE_MANAGER, 'Case Manager'),
    (ADMIN, 'Admin'),
]
ALL_ROLES = [value for value, _ in ROLE_CHOICES]
STAFF_ROLES = (SUPERVISOR, CASE_MANAGER, ADMIN)

# Highest privilege wins when a user sits in more than one group
ROLE_PRIORITY = (ADMIN, CASE_MANAGER, SUPERVISOR, PARTICIPANT)

VIEW_AS_COOKIE = 'view-as-role'
DEMO_MODE_COOKIE = 'demo-mode'
DEMO_MODE_HEADER = 'HTTP_X_DEMO_MODE'


def is_staff_role(role):
    return role in STAFF_ROLES


def get_original_role(user):
    """Stored role of a user, or None when the account is not provisioned."""
    if user is None or not user.is_authenticated:
        return None
    cached = getattr(user, '_bridgepath_role', None)
    if cached is not None:
        return cached or None

    group_names = set(user.groups.values_list('name', flat=True))
    role = next((r for r in ROLE_PRIORITY if r in group_names), None)
    if role is None and user.is_superuser:
        role = ADMIN
    user._bridgepath_role = role or ''
    return role


def get_effective_role(request):
    original = get_original_role(getattr(request, 'user', None))
    if original != ADMIN:
        return original
    view_as = request.COOKIES.get(VIEW_AS_COOKIE)
    if view_as in ALL_ROLES:
        return view_as
    return original


def set_user_role(user, role):
    """Move a user into exactly one role group."""
    if role not in ALL_ROLES:
        raise ValueError(f"Unknown role: {role}")
    user.groups.remove(*Group.objects.filter(name__in=ALL_ROLES).exclude(name=role))
    group, _ = Group.objects.get_or_create(name=role)
    user.groups.add(group)
    user._bridgepath_role = role


def is_demo_mode(request):
    if request is None:
        return False
    if request.COOKIES.get(DEMO_MODE_COOKIE) == 'true':
        return True
    return request.META.get(DEMO_MODE_HEADER, '').lower() == 'true'


def visible(queryset, request=None, demo_mode=None):
    """Hide seeded mock rows unless demo mode is on."""
    if demo_mode is None:
        demo_mode = is_demo_mode(request)
    if demo_mode:
        return queryset
    return queryset.filter(is_mock=False)
