"""
Per-participant performance metrics and the LLM advisor prompt built on them.
"""
import json
import logging
from datetime import timedelta

from django.db.models import Sum
from django.utils import timezone

from bridgepath.core import openrouter
from bridgepath.core.utils import round2
from bridgepath.production.models import ProductionRecord
from bridgepath.worklogs.models import WorkLog

from .models import Participant

logger = logging.getLogger('bridgepath.participants')

# Roughly five working days a week for four weeks
MAX_EXPECTED_DAYS = 20


def get_metrics(participant, days_back=30, offset_days=0, today=None):
    """Hours, revenue, attendance and productivity over a trailing window."""
    today = today or timezone.localdate()
    end = today - timedelta(days=offset_days)
    start = end - timedelta(days=days_back)

    work_logs = WorkLog.objects.filter(participant=participant, work_date__gte=start, work_date__lte=end)
    production = ProductionRecord.objects.filter(
        participant=participant, production_date__gte=start, production_date__lte=end
    )

    total_hours = float(work_logs.aggregate(total=Sum('hours'))['total'] or 0)
    log_count = work_logs.count()
    totals = production.aggregate(revenue=Sum('value'), weight=Sum('weight'))
    total_revenue = float(totals['revenue'] or 0)
    total_weight = float(totals['weight'] or 0)

    expected_days = min(MAX_EXPECTED_DAYS, days_back)
    attendance_rate = round(log_count / expected_days * 100) if expected_days > 0 else 0
    productivity = total_revenue / total_hours if total_hours > 0 else 0

    material_mix = {}
    for row in production.values('role').annotate(total=Sum('value')):
        role = row['role'] or 'Unknown'
        material_mix[role] = round2(material_mix.get(role, 0) + float(row['total'] or 0))

    return {
        'total_hours': round2(total_hours),
        'total_revenue': round2(total_revenue),
        'total_weight': round2(total_weight),
        'attendance_rate': attendance_rate,
        'productivity': round2(productivity),
        'material_mix': material_mix,
        'count': log_count,
    }


def build_context(participant, today=None):
    today = today or timezone.localdate()
    current = get_metrics(participant, 30, today=today)
    previous = get_metrics(participant, 30, 30, today=today)
    cohort_size = Participant.objects.filter(
        current_phase=participant.current_phase, status='active'
    ).count()
    certifications = participant.certifications.count()
    days_in_phase = (today - participant.entry_date).days if participant.entry_date else 0

    return {
        'participant': {
            'id': participant.pk,
            'name': participant.name,
            'current_phase': participant.current_phase,
            'days_in_phase': days_in_phase,
        },
        'current': current,
        'previous': previous,
        'cohort_size': cohort_size,
        'certifications': certifications,
    }


def build_prompt(context):
    participant = context['participant']
    current = context['current']
    previous = context['previous']
    return f"""You are a workforce development AI advisor. Analyze this participant data and provide 4 specific modules of intelligence.

PARTICIPANT: {participant['name']}
PHASE: {participant['current_phase']} (Day {participant['days_in_phase']}/90)
LAST 30 DAYS:
- Hours: {current['total_hours']}
- Attendance: {current['attendance_rate']}% (expected 80%+)
- Revenue: ${current['total_revenue']:.2f}
- Productivity: ${current['productivity']:.2f}/hr
- Certifications: {context['certifications']}
- Material Mix: {json.dumps(current['material_mix'])}

PREVIOUS 30 DAYS:
- Attendance: {previous['attendance_rate']}%
- Productivity: ${previous['productivity']:.2f}/hr

COHORT SIZE: {context['cohort_size']}

PHASE 3 REQUIREMENTS (if applicable):
- 85%+ attendance
- $8+/hr productivity
- 1+ certification

YOUR TASK:
Provide a JSON object with exactly these 4 keys:

1. "snapshot": {{
   "status": "EXCELLING" | "ON TRACK" | "NEEDS ATTENTION" | "CRITICAL",
   "narrative": "3-paragraph synthesis of health, concerns, and strengths.",
   "actions": ["action 1", "action 2", "action 3"]
}}

2. "advancement": {{
   "onTrack": boolean,
   "projectedDay": number,
   "riskLevel": "LOW" | "MEDIUM" | "HIGH",
   "confidence": number,
   "gaps": ["gap 1", "gap 2"],
   "requirements": ["req 1", "req 2"]
}}

3. "peerContext": {{
   "productivityRank": "TOP_THIRD" | "MIDDLE_THIRD" | "BOTTOM_THIRD",
   "attendanceRank": "TOP_THIRD" | "MIDDLE_THIRD" | "BOTTOM_THIRD",
   "analysis": "2-3 sentences comparing them to the cohort.",
   "similarProfile": "Name of a similar past profile or 'None'"
}}

4. "production": {{
   "specialization": "Primary focus area",
   "efficiency": "Efficiency pattern (e.g. Morning vs Afternoon)",
   "opportunity": "Specific cross-training recommendation",
   "analysis": "2-3 paragraphs on production patterns."
}}

Return ONLY valid JSON."""


INSIGHT_KEYS = ('snapshot', 'advancement', 'peerContext', 'production')


def generate_insights(context):
    """
    Ask the model for the four insight modules.

    Raises OpenRouterError on transport failure and ValueError when the
    reply is not a JSON object.
    """
    content = openrouter.chat_completion(
        [{'role': 'user', 'content': build_prompt(context)}],
        temperature=0.7,
        response_format={'type': 'json_object'},
    )
    parsed = openrouter.parse_json_content(content)
    if not isinstance(parsed, dict):
        raise ValueError('Model did not return a JSON object')
    return {key: parsed.get(key) for key in INSIGHT_KEYS}
