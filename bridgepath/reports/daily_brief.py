"""
Daily operations brief: a seven-day snapshot of participants, work logs,
production and alerts, summarized by the model and mailed to staff.
"""
import json
import logging
from collections import defaultdict
from datetime import date, timedelta

from django.conf import settings
from django.contrib.auth.models import Group
from django.core.mail import EmailMultiAlternatives
from django.db.models import Q, Sum
from django.template.loader import render_to_string
from django.utils import timezone

from bridgepath.alerts.models import Alert
from bridgepath.core import openrouter
from bridgepath.core.exceptions import ServiceError
from bridgepath.core.models import User
from bridgepath.core.roles import STAFF_ROLES, visible
from bridgepath.core.utils import round2
from bridgepath.participants.models import Participant
from bridgepath.production.models import ProductionRecord
from bridgepath.worklogs.models import WorkLog

from .overviews import UNKNOWN, participant_metrics
from .streaming import UNAVAILABLE_MESSAGE

logger = logging.getLogger(__name__)

BRIEF_DAYS = 7
AT_RISK_ATTENDANCE = 70
READY_ATTENDANCE = 90
LOW_ATTENDANCE = 80
MIN_HAMMERMILL_SHIFTS = 5
ON_TRACK_PERCENT = 90

SCHEDULE = {
    'shifts': [
        {'period': 'morning', 'role': 'Processing', 'count': 8, 'checked_in': 7},
        {'period': 'morning', 'role': 'Sorting', 'count': 6, 'checked_in': 6},
        {'period': 'morning', 'role': 'Hammermill', 'count': 2, 'checked_in': 1},
        {'period': 'morning', 'role': 'Truck', 'count': 3, 'checked_in': 3},
        {'period': 'afternoon', 'role': 'Processing', 'count': 6, 'checked_in': 0},
        {'period': 'afternoon', 'role': 'Sorting', 'count': 5, 'checked_in': 0},
        {'period': 'afternoon', 'role': 'Hammermill', 'count': 2, 'checked_in': 0},
    ],
    'pickups': [
        {'time': '2:00 PM', 'name': 'Neighborhood Collection', 'est_weight': 300},
    ],
}

HEALTH_COLORS = {
    'EXCELLENT': '#10b981',
    'GOOD': '#3b82f6',
    'FAIR': '#f59e0b',
    'CONCERNING': '#ef4444',
}
DEFAULT_HEALTH_COLOR = '#6b7280'


def week_window(day):
    return day - timedelta(days=BRIEF_DAYS - 1), day


def format_long_date(day):
    """Monday, January 5, 2026"""
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def participant_data(day, demo_mode=False):
    participants = list(
        visible(Participant.objects.filter(status='active'), demo_mode=demo_mode)
        .exclude(name=UNKNOWN)
        .order_by('name')
    )
    by_phase = defaultdict(int)
    for participant in participants:
        by_phase[str(participant.current_phase)] += 1

    start, end = week_window(day)
    rows = participant_metrics(participants, start, end, demo_mode=demo_mode, today=day)
    at_risk = [
        {'id': row['id'], 'name': row['name'], 'attendance_rate': row['attendance_rate']}
        for row in rows if row['attendance_rate'] < AT_RISK_ATTENDANCE
    ]
    ready_to_advance = [
        {'id': row['id'], 'name': row['name'], 'phase': row['phase']}
        for row in rows if row['phase'] < 4 and row['attendance_rate'] >= READY_ATTENDANCE
    ]
    return {
        'total': len(participants),
        'by_phase': dict(by_phase),
        'at_risk': at_risk,
        'ready_to_advance': ready_to_advance,
    }


def work_log_data(start, end, active_count, demo_mode=False):
    logs = visible(
        WorkLog.objects.filter(work_date__gte=start, work_date__lte=end),
        demo_mode=demo_mode,
    )
    total_hours = float(logs.aggregate(total=Sum('hours'))['total'] or 0)

    by_role = defaultdict(int)
    present = defaultdict(set)
    for role, work_date, participant_id in logs.values_list('role', 'work_date', 'participant_id'):
        by_role[role] += 1
        present[work_date].add(participant_id)

    trends = [
        {'date': work_date.isoformat(), 'rate': round(len(ids) / (active_count or 1) * 100)}
        for work_date, ids in sorted(present.items())
    ]
    attendance_rate = round(sum(t['rate'] for t in trends) / len(trends)) if trends else 0

    gaps = []
    if attendance_rate < LOW_ATTENDANCE:
        gaps.append('General low attendance')
    if by_role.get('Hammermill', 0) < MIN_HAMMERMILL_SHIFTS:
        gaps.append('Hammermill understaffed')

    return {
        'total_hours': round2(total_hours),
        'attendance_rate': attendance_rate,
        'by_role': dict(by_role),
        'gaps': gaps,
        'trends': trends,
    }


def production_data(start, end, total_hours, demo_mode=False):
    records = visible(
        ProductionRecord.objects.filter(production_date__gte=start, production_date__lte=end),
        demo_mode=demo_mode,
    )
    totals = records.aggregate(revenue=Sum('value'), weight=Sum('weight'))
    total_revenue = float(totals['revenue'] or 0)

    daily_breakdown = [
        {'date': row['production_date'].isoformat(), 'revenue': round2(row['revenue'])}
        for row in records.values('production_date').annotate(revenue=Sum('value')).order_by('production_date')
    ]
    material_mix = [
        {
            'category': row['material_category'],
            'percentage': round(float(row['revenue'] or 0) / total_revenue * 100) if total_revenue > 0 else 0,
        }
        for row in records.values('material_category').annotate(revenue=Sum('value')).order_by('-revenue')
    ]
    top_performers = [
        {'name': row['participant_name'], 'revenue': round2(row['revenue'])}
        for row in records.exclude(participant_name=UNKNOWN)
        .values('participant_name').annotate(revenue=Sum('value')).order_by('-revenue')[:5]
    ]

    return {
        'total_revenue': round2(total_revenue),
        'total_weight': round2(totals['weight']),
        'daily_breakdown': daily_breakdown,
        'material_mix': material_mix,
        'efficiency': round2(total_revenue / total_hours) if total_hours > 0 else 0,
        'top_performers': top_performers,
    }


def unread_alerts():
    alerts = Alert.objects.filter(is_read=False, is_dismissed=False).order_by('-created_at')
    grouped = {'high': [], 'medium': [], 'low': []}
    for alert in alerts:
        grouped.setdefault(alert.priority, []).append({
            'id': alert.pk,
            'type': alert.type,
            'participant_name': alert.participant_name,
            'message': alert.message,
        })
    return grouped


def weekly_totals(start, end, active_count, demo_mode=False):
    revenue = visible(
        ProductionRecord.objects.filter(production_date__gte=start, production_date__lte=end),
        demo_mode=demo_mode,
    ).aggregate(total=Sum('value'))['total']
    attendance = work_log_data(start, end, active_count, demo_mode=demo_mode)['attendance_rate']
    return float(revenue or 0), attendance


def comparisons(day, participants, work_logs, production, demo_mode=False):
    """Week-over-week change, progress toward the weekly target and notable patterns."""
    start, _ = week_window(day)
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - timedelta(days=BRIEF_DAYS - 1)
    prev_revenue, prev_attendance = weekly_totals(prev_start, prev_end, participants['total'], demo_mode=demo_mode)

    revenue = production['total_revenue']
    revenue_change = round((revenue - prev_revenue) / prev_revenue * 100) if prev_revenue > 0 else 0
    attendance_change = work_logs['attendance_rate'] - prev_attendance

    target = float(getattr(settings, 'WEEKLY_REVENUE_TARGET', 10000))
    revenue_percent = round(revenue / target * 100) if target > 0 else 0

    trends = []
    if revenue_change:
        trends.append(f"Revenue {'up' if revenue_change > 0 else 'down'} {abs(revenue_change)}% vs last week")
    if attendance_change:
        direction = 'up' if attendance_change > 0 else 'down'
        trends.append(f"Attendance {direction} {abs(attendance_change)} points vs last week")
    if len(work_logs['trends']) > 1:
        lowest = min(work_logs['trends'], key=lambda t: t['rate'])
        weekday = date.fromisoformat(lowest['date']).strftime('%A')
        trends.append(f"{weekday} attendance lowest this week at {lowest['rate']}%")
    if production['material_mix']:
        leader = production['material_mix'][0]
        trends.append(f"{leader['category']} leads revenue at {leader['percentage']}%")

    return {
        'vs_last_week': {'revenue_change': revenue_change, 'attendance_change': attendance_change},
        'vs_target': {'revenue_percent': revenue_percent, 'target': target},
        'trends': trends,
    }


def program_health(attendance_rate, revenue_vs_target, at_risk_count):
    if attendance_rate >= 90 and revenue_vs_target >= 95 and at_risk_count <= 2:
        return 'EXCELLENT'
    if attendance_rate >= 80 and revenue_vs_target >= 85 and at_risk_count <= 5:
        return 'GOOD'
    if attendance_rate >= 70 and revenue_vs_target >= 75 and at_risk_count <= 8:
        return 'FAIR'
    return 'CONCERNING'


def build_brief_data(day=None, demo_mode=False):
    """Gather everything the brief needs for the seven days ending on ``day``."""
    day = day or timezone.localdate()
    start, end = week_window(day)

    participants = participant_data(day, demo_mode=demo_mode)
    work_logs = work_log_data(start, end, participants['total'], demo_mode=demo_mode)
    production = production_data(start, end, work_logs['total_hours'], demo_mode=demo_mode)
    alerts = unread_alerts()
    compared = comparisons(day, participants, work_logs, production, demo_mode=demo_mode)

    revenue_percent = compared['vs_target']['revenue_percent']
    metrics = {
        'program_health': program_health(
            work_logs['attendance_rate'], revenue_percent, len(participants['at_risk'])
        ),
        'critical_alerts': len(alerts['high']),
        'total_participants': participants['total'],
        'week_revenue': production['total_revenue'],
        'weekly_target': compared['vs_target']['target'],
        'on_track_for_target': revenue_percent >= ON_TRACK_PERCENT,
    }
    return {
        'date': day,
        'metrics': metrics,
        'generated_at': timezone.now(),
        'data': {
            'participants': participants,
            'work_logs': work_logs,
            'production': production,
            'alerts': alerts,
            'schedule': SCHEDULE,
            'comparisons': compared,
        },
    }


def brief_prompt(brief):
    data = brief['data']
    participants = data['participants']
    work_logs = data['work_logs']
    production = data['production']
    alerts = data['alerts']
    schedule = data['schedule']
    compared = data['comparisons']
    morning = [s for s in schedule['shifts'] if s['period'] == 'morning']
    afternoon = [s for s in schedule['shifts'] if s['period'] == 'afternoon']

    return f"""You are the operations intelligence system for a nonprofit recycling
workforce development program. Generate a daily executive brief for program leadership.

TODAY: {format_long_date(brief['date'])}

=== PARTICIPANT DATA ===
Total Active: {participants['total']}
Phase Breakdown: {json.dumps(participants['by_phase'])}
At-Risk (attendance below {AT_RISK_ATTENDANCE}% this week):
{json.dumps(participants['at_risk'])}
Ready to Advance (attendance {READY_ATTENDANCE}%+ and below phase 4):
{json.dumps(participants['ready_to_advance'])}

=== WORK LOGS (Last 7 Days) ===
Total Hours: {work_logs['total_hours']}
Attendance Rate: {work_logs['attendance_rate']}%
Role Distribution: {json.dumps(work_logs['by_role'])}
Staffing Gaps: {json.dumps(work_logs['gaps'])}
Attendance Trends: {json.dumps(work_logs['trends'])}

=== PRODUCTION (Last 7 Days) ===
Revenue: ${production['total_revenue']}
Materials Processed: {production['total_weight']} lbs
Efficiency: ${production['efficiency']}/hr
Daily Revenue: {json.dumps(production['daily_breakdown'])}
Material Mix: {json.dumps(production['material_mix'])}
Top Performers: {json.dumps(production['top_performers'][:3])}

=== ALERTS (Unread) ===
High Priority: {len(alerts['high'])} ({'; '.join(a['message'] for a in alerts['high'])})
Medium Priority: {len(alerts['medium'])}
Low Priority: {len(alerts['low'])}

=== TODAY'S SCHEDULE ===
Morning Shift Coverage: {json.dumps(morning)}
Afternoon Shift Coverage: {json.dumps(afternoon)}
Scheduled Pickups: {json.dumps(schedule['pickups'])}

=== COMPARISONS ===
vs Last Week: {json.dumps(compared['vs_last_week'])}
vs Weekly Target: {json.dumps(compared['vs_target'])}
Emerging Patterns: {json.dumps(compared['trends'])}

YOUR TASK:
Write a daily executive brief that synthesizes this data into actionable intelligence.

STRUCTURE:
1. **Program Health Summary** (1 line): Overall status (EXCELLENT/GOOD/FAIR/CONCERNING)
   with direction indicator vs last week

2. **Critical Attention** (2-3 items max): Issues requiring IMMEDIATE action today
   - Be specific: names, numbers, context
   - Explain WHY it's critical
   - Suggest WHAT to do

3. **Positive Momentum** (1-2 items): Good news, wins, opportunities
   - Specific achievements or milestones
   - People to recognize

4. **This Week's Pattern** (1-2 items): Trends or recurring issues
   - Must span multiple days/data sources
   - Connect dots (e.g., "low attendance + understaffing = production drop")

5. **Top Priority Today** (3 items max): Numbered action list
   - Concrete, doable today
   - Ordered by urgency

6. **Weekly Forecast** (1 sentence): Will we hit targets? What's needed?

CRITICAL RULES:
- Connect disparate data points (participant attendance to production impact)
- Use specific names and numbers
- Identify ROOT CAUSES not just symptoms
- Be direct and actionable
- Write conversationally (like a smart colleague briefing you)
- Keep under 350 words
- Don't use markdown headers or bullets (prose is fine, but we'll format)

Begin with: "Good morning. Here's what you need to know today:\""""


def generate_brief(day=None, demo_mode=False):
    """
    Build the brief data and the full model text in one call.

    Returns ``(brief_text, brief)``. The text falls back to a fixed message
    when the model is not configured or the request fails.
    """
    brief = build_brief_data(day, demo_mode=demo_mode)
    if not openrouter.is_configured():
        return UNAVAILABLE_MESSAGE, brief

    try:
        text = openrouter.complete_prompt(brief_prompt(brief), temperature=0.7)
    except ServiceError as e:
        logger.warning(f"Daily brief generation failed: {str(e)}")
        return 'Error generating brief.', brief
    return text or UNAVAILABLE_MESSAGE, brief


def staff_recipients():
    """Email addresses of active staff and superusers."""
    staff_groups = Group.objects.filter(name__in=STAFF_ROLES)
    users = (
        User.objects.filter(is_active=True)
        .filter(Q(groups__in=staff_groups) | Q(is_superuser=True))
        .exclude(email__isnull=True)
        .exclude(email='')
        .distinct()
    )
    return sorted({user.email for user in users})


def send_brief_email(brief_text, brief, recipients):
    """Render and send the HTML and plain-text brief. Returns the number of messages sent."""
    metrics = brief['metrics']
    formatted_date = format_long_date(brief['date'])
    generated_at = timezone.localtime(brief['generated_at'])
    context = {
        'formatted_date': formatted_date,
        'brief': brief_text,
        'metrics': metrics,
        'health_color': HEALTH_COLORS.get(metrics['program_health'], DEFAULT_HEALTH_COLOR),
        'generated_time': generated_at.strftime('%I:%M %p').lstrip('0'),
        'dashboard_url': f"{getattr(settings, 'APP_URL', 'http://localhost:3000')}/operations",
    }

    message = EmailMultiAlternatives(
        subject=f"Daily Operations Brief - {formatted_date}",
        body=render_to_string('reports/daily_brief_email.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    message.attach_alternative(render_to_string('reports/daily_brief_email.html', context), 'text/html')
    sent = message.send()
    logger.info(f"Daily brief sent to {len(recipients)} recipients")
    return sent
