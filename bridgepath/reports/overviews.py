"""
Metrics behind the dashboard, production and work-log overviews, and the
prompts that turn them into supervisor-facing summaries.
"""
import json
from collections import defaultdict
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Q, Sum
from django.utils import timezone

from bridgepath.core.roles import visible
from bridgepath.core.utils import round2, weekdays_between
from bridgepath.participants.models import Participant
from bridgepath.production.models import ProductionRecord
from bridgepath.worklogs.models import WorkLog

UNKNOWN = 'Unknown'

MARKDOWN_RULES = """IMPORTANT: Return ONLY Markdown formatted text. Do NOT use HTML tags like <p>, <ul>, <li>. Use standard Markdown syntax:
- Use ### for section headers
- Use **bold** for emphasis
- Use - or * for bullet points
- Use 1. 2. 3. for numbered lists"""


def performance_status(phase, attendance_rate, net_value_per_hour):
    if attendance_rate < 70:
        return 'At Risk'
    if attendance_rate < 85:
        return 'Watch'
    if phase >= 2 and attendance_rate > 90 and net_value_per_hour > 5:
        return 'Advancing'
    return 'On Track'


def participant_metrics(participants, start_date, end_date, demo_mode=False, today=None):
    """Attendance, hours and value per participant over a date range."""
    today = today or timezone.localdate()
    labor_rate = float(getattr(settings, 'LABOR_COST_PER_HOUR', 10))
    expected_days = max(1, weekdays_between(start_date, end_date))
    participant_ids = [p.pk for p in participants]

    logs = visible(
        WorkLog.objects.filter(participant_id__in=participant_ids, work_date__gte=start_date, work_date__lte=end_date),
        demo_mode=demo_mode,
    )
    hours_by_participant = {
        row['participant_id']: row
        for row in logs.values('participant_id').annotate(
            hours=Sum('hours'), days_worked=Count('work_date', distinct=True)
        )
    }
    production = visible(
        ProductionRecord.objects.filter(
            participant_id__in=participant_ids, production_date__gte=start_date, production_date__lte=end_date
        ),
        demo_mode=demo_mode,
    )
    revenue_by_participant = {
        row['participant_id']: float(row['revenue'] or 0)
        for row in production.values('participant_id').annotate(revenue=Sum('value'))
    }

    rows = []
    for participant in participants:
        logged = hours_by_participant.get(participant.pk, {})
        total_hours = float(logged.get('hours') or 0)
        days_worked = logged.get('days_worked') or 0
        attendance_rate = min(100, round(days_worked / expected_days * 100))
        total_revenue = revenue_by_participant.get(participant.pk, 0.0)
        labor_cost = total_hours * labor_rate
        net_value = total_revenue - labor_cost
        revenue_per_hour = round2(total_revenue / total_hours) if total_hours > 0 else 0
        net_value_per_hour = round2(net_value / total_hours) if total_hours > 0 else 0
        days_in_program = (today - participant.entry_date).days if participant.entry_date else 0

        rows.append({
            'id': participant.pk,
            'name': participant.name,
            'phase': participant.current_phase,
            'days_in_program': days_in_program,
            'attendance_rate': attendance_rate,
            'total_hours': round2(total_hours),
            'revenue_per_hour': revenue_per_hour,
            'net_value_per_hour': net_value_per_hour,
            'labor_cost': round2(labor_cost),
            'net_value': round2(net_value),
            'total_revenue': round2(total_revenue),
            'days_worked': days_worked,
            'expected_days': expected_days,
            'status': performance_status(participant.current_phase, attendance_rate, net_value_per_hour),
        })
    return rows


def dashboard_overview(phase, status, start_date, end_date, demo_mode=False):
    participants = visible(Participant.objects.exclude(name=UNKNOWN), demo_mode=demo_mode)
    if phase != 'all':
        participants = participants.filter(current_phase=phase)
    if status != 'all':
        participants = participants.filter(status=status)

    rows = participant_metrics(list(participants.order_by('name')), start_date, end_date, demo_mode=demo_mode)
    summary = {
        'total': len(rows),
        'at_risk': sum(1 for row in rows if row['status'] == 'At Risk'),
        'on_track': sum(1 for row in rows if row['status'] == 'On Track'),
        'watch': sum(1 for row in rows if row['status'] == 'Watch'),
        'advancing': sum(1 for row in rows if row['status'] == 'Advancing'),
    }
    return {
        'metrics': summary,
        'participants': rows,
        'generated_at': timezone.now(),
    }


def dashboard_prompt(phase, status, start_date, end_date, data):
    phase_label = f"Phase {phase}" if phase != 'all' else 'All Phases'
    return f"""You are analyzing workforce development data for a recycling program supervisor.

FILTERED VIEW: {phase_label}, {status} participants
DATE RANGE: {start_date.isoformat()} - {end_date.isoformat()}
PARTICIPANT COUNT: {len(data['participants'])}

PARTICIPANT METRICS (Sample):
{json.dumps(data['participants'][:30], indent=2)}
(List truncated to top 30 if larger)

Provide an actionable summary for the supervisor that includes:

1. **Immediate Attention** (2-3 people max): Who needs intervention TODAY and why?
   - Focus on: attendance drops (<70%), low productivity, missed days.
   - Be specific with names and numbers.

2. **Positive Highlights** (1-2 people): Who's ready for advancement or performing exceptionally?

3. **Group Trends**: Any patterns across the filtered group?

4. **Suggested Actions**: 1-2 concrete things supervisor should do today.

Write in a clear, conversational tone. Be direct and actionable. Use bullet points.
Assume supervisor knows these participants personally.
Keep it under 200 words.
{MARKDOWN_RULES}"""


def previous_period(start_date, end_date):
    """The equal-length window immediately before [start_date, end_date]."""
    length = (end_date - start_date).days + 1
    prev_end = start_date - timedelta(days=1)
    return prev_end - timedelta(days=length - 1), prev_end


def production_overview(start_date, end_date, demo_mode=False):
    records = visible(
        ProductionRecord.objects.filter(production_date__gte=start_date, production_date__lte=end_date),
        demo_mode=demo_mode,
    ).exclude(participant_name=UNKNOWN)
    prev_start, prev_end = previous_period(start_date, end_date)
    prev_records = visible(
        ProductionRecord.objects.filter(production_date__gte=prev_start, production_date__lte=prev_end),
        demo_mode=demo_mode,
    ).exclude(participant_name=UNKNOWN)
    logs = visible(
        WorkLog.objects.filter(work_date__gte=start_date, work_date__lte=end_date),
        demo_mode=demo_mode,
    ).exclude(participant_name=UNKNOWN)

    totals = records.aggregate(revenue=Sum('value'), weight=Sum('weight'))
    total_revenue = float(totals['revenue'] or 0)
    total_weight = float(totals['weight'] or 0)
    prev_revenue = float(prev_records.aggregate(total=Sum('value'))['total'] or 0)
    total_hours = float(logs.aggregate(total=Sum('hours'))['total'] or 0)
    revenue_trend = total_revenue - prev_revenue

    if revenue_trend > 0:
        trend_direction = 'up'
    elif revenue_trend < 0:
        trend_direction = 'down'
    else:
        trend_direction = 'flat'
    trend_percent = round2(abs(revenue_trend / prev_revenue * 100)) if prev_revenue > 0 else 0

    daily_revenue = {
        row['production_date'].isoformat(): round2(row['revenue'])
        for row in records.values('production_date').annotate(revenue=Sum('value')).order_by('production_date')
    }

    material_mix = {}
    for row in records.values('material_category').annotate(revenue=Sum('value')).order_by('-revenue'):
        share = float(row['revenue'] or 0) / total_revenue * 100 if total_revenue > 0 else 0
        material_mix[row['material_category']] = round(share, 1)

    performer_totals = defaultdict(lambda: {'revenue': 0.0, 'hours': 0.0})
    for row in records.values('participant_name').annotate(revenue=Sum('value')):
        performer_totals[row['participant_name']]['revenue'] = float(row['revenue'] or 0)
    for row in logs.values('participant_name').annotate(hours=Sum('hours')):
        performer_totals[row['participant_name']]['hours'] = float(row['hours'] or 0)

    performers = [
        {
            'name': name,
            'revenue': round2(totals_['revenue']),
            'hours': round2(totals_['hours']),
            'efficiency': round2(totals_['revenue'] / totals_['hours']) if totals_['hours'] > 0 else 0,
        }
        for name, totals_ in performer_totals.items()
    ]
    performers.sort(key=lambda p: p['efficiency'], reverse=True)
    top_performers = performers[:5]
    bottom_performers = sorted((p for p in performers if p['hours'] > 5), key=lambda p: p['efficiency'])[:5]

    customer_sources = defaultdict(float)
    for row in records.values('customer').annotate(revenue=Sum('value')):
        customer_sources[row['customer'] or UNKNOWN] += float(row['revenue'] or 0)

    return {
        'metrics': {
            'total_revenue': round2(total_revenue),
            'previous_revenue': round2(prev_revenue),
            'revenue_trend': round2(revenue_trend),
            'total_weight': round2(total_weight),
            'total_hours': round2(total_hours),
            'efficiency': round2(total_revenue / total_hours) if total_hours > 0 else 0,
            'trend_direction': trend_direction,
            'trend_percent': trend_percent,
        },
        'daily_revenue': daily_revenue,
        'material_mix': material_mix,
        'top_performers': top_performers,
        'bottom_performers': bottom_performers,
        'customer_sources': {name: round2(value) for name, value in customer_sources.items()},
        'generated_at': timezone.now(),
    }


def production_prompt(start_date, end_date, data):
    metrics = data['metrics']
    trend_sign = '+' if metrics['revenue_trend'] >= 0 else ''
    material_mix = {category: f"{share}%" for category, share in data['material_mix'].items()}
    return f"""Analyze this recycling program's production data for leadership:

DATE RANGE: {start_date.isoformat()} to {end_date.isoformat()}

DAILY REVENUE:
{json.dumps(data['daily_revenue'])}

MATERIAL MIX (% of total revenue):
{json.dumps(material_mix)}

TOP PERFORMERS (Efficiency $/hr):
{json.dumps(data['top_performers'])}

BOTTOM PERFORMERS (Efficiency $/hr, >5 hrs worked):
{json.dumps(data['bottom_performers'])}

CUSTOMER SOURCES:
{json.dumps(data['customer_sources'])}

COMPARISON TO LAST PERIOD:
Current Revenue: ${metrics['total_revenue']}
Previous Revenue: ${metrics['previous_revenue']}
Trend: {trend_sign}${metrics['revenue_trend']}

Provide an executive summary for program leadership that includes:

1. **Revenue Pattern Analysis**: What do you notice about the trend? Any spikes/drops? What's driving them?

2. **Material Mix Insights**: Any shifts in categories? Why might that be? Is this good or concerning?

3. **Efficiency Gaps**: Looking at top vs bottom performers, what opportunities exist? Be specific.

4. **Action Items**: 2-3 concrete things leadership should do this week.

Write for a nonprofit executive who understands the program but isn't technical. Be direct and actionable. Use bullet points.

{MARKDOWN_RULES}"""


def work_logs_overview(start_date, end_date, search='', participant_id='all', role='all', demo_mode=False):
    logs = visible(
        WorkLog.objects.filter(work_date__gte=start_date, work_date__lte=end_date),
        demo_mode=demo_mode,
    ).exclude(participant_name=UNKNOWN)
    if participant_id and participant_id != 'all':
        logs = logs.filter(participant_id=participant_id)
    if role and role != 'all':
        logs = logs.filter(role=role)
    if search:
        logs = logs.filter(Q(participant_name__icontains=search) | Q(notes__icontains=search))

    totals = logs.aggregate(hours=Sum('hours'), entries=Count('id'), participants=Count('participant', distinct=True))
    total_hours = float(totals['hours'] or 0)
    total_entries = totals['entries'] or 0

    role_distribution = {
        row['role']: round2(row['hours'])
        for row in logs.values('role').annotate(hours=Sum('hours')).order_by('-hours')
    }
    top_participants = [
        {'name': row['participant_name'], 'hours': round2(row['hours'])}
        for row in logs.values('participant_name').annotate(hours=Sum('hours')).order_by('-hours')[:10]
    ]
    notes_samples = []
    for note in logs.exclude(notes__isnull=True).values_list('notes', flat=True):
        if len(note) > 10:
            notes_samples.append(note)
        if len(notes_samples) >= 20:
            break

    shift_lengths = {
        'short': logs.filter(hours__lt=4).count(),
        'standard': logs.filter(hours__gte=4, hours__lte=8).count(),
        'long': logs.filter(hours__gt=8).count(),
        'avg': round2(total_hours / total_entries) if total_entries > 0 else 0,
    }

    return {
        'metrics': {
            'total_entries': total_entries,
            'unique_participants': totals['participants'] or 0,
            'total_hours': round2(total_hours),
            'avg_shift_length': shift_lengths['avg'],
            'short_shifts': shift_lengths['short'],
        },
        'role_distribution': role_distribution,
        'top_participants': top_participants,
        'notes_samples': notes_samples,
        'shift_lengths': shift_lengths,
        'generated_at': timezone.now(),
    }


def work_logs_prompt(role, start_date, end_date, data):
    role_label = role if role and role != 'all' else 'All Roles'
    return f"""Analyze work log patterns for a recycling workforce program:

FILTERED VIEW: {role_label}, {data['metrics']['total_entries']} entries
DATE RANGE: {start_date.isoformat()} - {end_date.isoformat()}

ROLE DISTRIBUTION (Total Hours):
{json.dumps(data['role_distribution'])}

PARTICIPANT WORKLOAD (Top 10 by hours):
{json.dumps(data['top_participants'])}

SUPERVISOR NOTES (Sample):
{json.dumps(data['notes_samples'])}

SHIFT LENGTH ANALYSIS:
{json.dumps(data['shift_lengths'])}

Identify patterns and concerns for supervisors:

1. **Staffing Observations**: Are roles evenly covered? Anyone overworked? Any coverage gaps?

2. **Notes Patterns**: What themes appear in supervisor notes? Training needs? Behavioral trends?

3. **Attendance Concerns**: Short shifts? Gaps? Overtime patterns?

4. **Recommended Actions**: 1-2 things to address.

Write for operations supervisors. Be specific with names and numbers.
{MARKDOWN_RULES}"""
