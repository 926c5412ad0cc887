"""
Impact report statistics and the LLM-written sections built from them.
"""
import json
import logging

from django.conf import settings
from django.db.models import Count, Sum

from bridgepath.core import openrouter
from bridgepath.core.exceptions import ServiceError
from bridgepath.core.roles import visible
from bridgepath.core.utils import round2, format_display_date
from bridgepath.participants.models import Participant, Certification
from bridgepath.production.models import ProductionRecord
from bridgepath.worklogs.models import WorkLog

from .models import Report

logger = logging.getLogger('bridgepath.reports')

REPORT_TITLES = {
    'production': 'Production Summary Report',
    'outcomes': 'Participant Outcomes Report',
    'environmental': 'Environmental Impact Report',
    'comprehensive': 'Comprehensive Impact Report',
}

VISUALIZATION_TYPES = {'icon_progression', 'impact_equivalence', 'revenue_progress', 'custom_infographic'}


def build_title(report_type, start_date, end_date):
    return f"{REPORT_TITLES[report_type]} - {format_display_date(start_date)} to {format_display_date(end_date)}"


def compute_stats(start_date, end_date, demo_mode=False):
    """Aggregate program outcomes for a date range. Returns (stats, top_performers)."""
    labor_rate = float(getattr(settings, 'LABOR_COST_PER_HOUR', 10))

    participants = visible(Participant.objects.all(), demo_mode=demo_mode)
    work_logs = visible(WorkLog.objects.filter(work_date__gte=start_date, work_date__lte=end_date), demo_mode=demo_mode)
    production = visible(
        ProductionRecord.objects.filter(production_date__gte=start_date, production_date__lte=end_date),
        demo_mode=demo_mode,
    )
    certifications = Certification.objects.filter(earned_date__gte=start_date, earned_date__lte=end_date)
    if not demo_mode:
        certifications = certifications.exclude(participant__is_mock=True)

    participant_count = participants.count()
    phase_breakdown = {}
    for row in participants.values('current_phase').annotate(total=Count('id')).order_by('current_phase'):
        phase_breakdown[str(row['current_phase'])] = row['total']

    totals = production.aggregate(weight=Sum('weight'), revenue=Sum('value'))
    total_weight = float(totals['weight'] or 0)
    revenue = float(totals['revenue'] or 0)
    lbs_diverted = float(production.filter(unit='lb').aggregate(total=Sum('weight'))['total'] or 0)
    hours = float(work_logs.aggregate(total=Sum('hours'))['total'] or 0)
    labor_cost = hours * labor_rate
    placements = participants.filter(status='graduated').count()
    retention = round(placements / participant_count * 100) if participant_count > 0 else 0

    stats = {
        'participant_count': participant_count,
        'phase_breakdown': phase_breakdown,
        'total_weight': round2(total_weight),
        'revenue': round2(revenue),
        'hours': round2(hours),
        'labor_cost': round2(labor_cost),
        'net_value': round2(revenue - labor_cost),
        'lbs_diverted': round2(lbs_diverted),
        'certifications': certifications.count(),
        'placements': placements,
        'retention': retention,
    }

    top_performers = [
        {'name': row['participant_name'], 'revenue': round2(row['revenue'])}
        for row in production.values('participant_name').annotate(revenue=Sum('value')).order_by('-revenue')[:5]
    ]
    return stats, top_performers


def narrative_prompt(report_type, start_date, end_date, stats, top_performers):
    performers = ', '.join(f"{p['name']} (${p['revenue']:.2f})" for p in top_performers) or 'None recorded'
    return f"""You are generating a grant-ready impact report narrative for a recycling workforce development program.

Report Type: {report_type}
Date Range: {start_date.isoformat()} to {end_date.isoformat()}

Key Statistics:
- {stats['participant_count']} participants served
- {stats['hours']:.0f} hours of workforce training logged
- {stats['total_weight']:.0f} lbs of materials processed
- ${stats['revenue']:.0f} in revenue generated
- ${stats['labor_cost']:.0f} in wages paid (labor cost)
- ${stats['net_value']:.0f} net program value
- {stats['certifications']} certifications earned
- {stats['placements']} participants reached placement/graduation milestones
- {stats['retention']}% retention rate

Top Performers: {performers}

Generate a compelling, professional narrative (3-4 paragraphs) that:
1. Highlights the connection between workforce development and environmental impact
2. Emphasizes measurable outcomes and program effectiveness
3. Demonstrates value to funders and stakeholders
4. Uses data-driven language while remaining accessible

Write only the narrative text, no markdown formatting."""


def pdf_narrative_prompt(stats):
    return f"""You are generating a formal, document-ready version of an impact report for a recycling workforce program.

Report Data: {json.dumps(stats)}

Your task is to rewrite the executive summary specifically for a formal PDF document.
1. Use formal, professional language suitable for board members and major funders.
2. Structure it with clear headings if appropriate.
3. Focus on long-term sustainability and strategic impact.
4. Ensure it fits well on a printed page (concise but comprehensive).

Write only the text for the formal PDF version."""


def stories_prompt(top_performers):
    lines = '\n'.join(
        f"{i}. {p['name']} - Generated ${p['revenue']:.2f} in revenue"
        for i, p in enumerate(top_performers, start=1)
    )
    return f"""Generate 2-3 brief participant success stories (2-3 sentences each) based on these top performers:

{lines}

Write engaging, human-centered stories that highlight individual achievements and growth. Use only the names provided. Write in a professional but warm tone suitable for grant reports."""


def visualization_prompt(report_type, stats, top_performers):
    report_data = json.dumps({'report_type': report_type, 'stats': stats, 'top_performers': top_performers})
    return f"""You are a data visualization designer creating grant-ready impact report visuals.

REPORT DATA:
{report_data}

TASK:
Design a set of 3-4 visualizations that tell the story of impact.

Return ONLY a JSON object with a "visualizations" array. Each item must include:
- type: one of "icon_progression", "impact_equivalence", "revenue_progress", "custom_infographic"
- title: short headline
- subtitle: short supporting line
- annotations: array of short callouts
- data: key/value pairs needed to render (numbers where possible)

Focus on: participant journey, environmental impact, and financial sustainability."""


def charts_prompt(stats, top_performers):
    return f"""Generate chart configurations for a grant report. Create 3-4 optimized visualizations.

Data Available:
- Participant count: {stats['participant_count']}
- Phase breakdown: {json.dumps(stats['phase_breakdown'])}
- Total revenue: ${stats['revenue']:.2f}
- Total hours: {stats['hours']:.0f}
- Materials processed: {stats['total_weight']:.0f} lbs
- Certifications: {stats['certifications']}
- Placements: {stats['placements']}
- Retention rate: {stats['retention']}%
- Top performers: {json.dumps(top_performers)}

Return a JSON object with a "charts" array containing chart configurations. Each chart must have:
- type: "bar", "line", "pie", "area", or "donut"
- title: descriptive title
- description: brief explanation
- data: array of objects with "name" and "value" (numbers only, exclude zero values for pie/donut charts)
- xAxisKey: "name" (for bar/line/area)
- yAxisKey: "value" (for bar/line/area)

IMPORTANT RULES:
- For pie/donut charts: ONLY include data points with value > 0 to avoid visual issues
- Ensure all values in data arrays are positive numbers
- Use bar charts instead of pie charts when you have many categories or zero values

Return ONLY valid JSON."""


def fallback_visualization_specs(stats):
    participant_count = int(stats.get('participant_count') or 0)
    placements = int(stats.get('placements') or 0)
    retention = float(stats.get('retention') or 0)
    retained = max(0, round(retention / 100 * participant_count)) if participant_count > 0 else 0
    revenue = float(stats.get('revenue') or 0)

    return [
        {
            'type': 'icon_progression',
            'title': 'Participant Journey',
            'subtitle': 'From enrollment to placement milestones',
            'annotations': [f"{stats.get('retention', 0)}% retention rate", f"{placements} placements to date"],
            'data': {'started': participant_count, 'retained': retained, 'placements': placements},
        },
        {
            'type': 'impact_equivalence',
            'title': 'Environmental Impact Translated',
            'subtitle': 'Real-world equivalents of material processed',
            'annotations': ['Diverted e-waste from landfills', 'Community-scale impact'],
            'data': {'weight_processed': float(stats.get('total_weight') or 0), 'revenue': revenue},
        },
        {
            'type': 'revenue_progress',
            'title': 'Revenue Progress Toward Sustainability',
            'subtitle': 'Program economics and momentum',
            'annotations': ['Revenue supports wages and operations'],
            'data': {'revenue': revenue, 'target_revenue': round2(revenue * 1.25), 'participant_count': participant_count},
        },
    ]


def normalize_visualization_specs(raw):
    """Keep well-formed specs of a known type. Returns None when nothing survives."""
    if isinstance(raw, dict):
        raw = raw.get('visualizations') or raw.get('data')
    if not isinstance(raw, list):
        return None

    specs = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        if item.get('type') not in VISUALIZATION_TYPES or not isinstance(item.get('title'), str):
            continue
        data = item.get('data') if isinstance(item.get('data'), dict) else {}
        specs.append({
            'type': item['type'],
            'title': item['title'],
            'subtitle': item['subtitle'] if isinstance(item.get('subtitle'), str) else None,
            'annotations': [a for a in item.get('annotations') or [] if isinstance(a, str)],
            'data': {
                key: value for key, value in data.items()
                if isinstance(value, (int, float, str)) and not isinstance(value, bool)
            },
        })
    return specs or None


def extract_chart_configurations(raw):
    if isinstance(raw, dict):
        raw = raw.get('charts') or raw.get('data')
    if isinstance(raw, list):
        return [chart for chart in raw if isinstance(chart, dict)]
    return None


def _complete(prompt, temperature, label, response_format=None):
    """One LLM call; a failure is logged and yields None."""
    try:
        if response_format:
            return openrouter.chat_completion(
                [{'role': 'user', 'content': prompt}],
                temperature=temperature,
                response_format=response_format,
            ) or None
        return openrouter.complete_prompt(prompt, temperature=temperature) or None
    except ServiceError as e:
        logger.warning(f"Report {label} generation failed: {str(e)}")
        return None


def generate_sections(report_type, start_date, end_date, stats, top_performers,
                      include_narrative, include_stories, include_charts):
    """LLM-written sections of a report; missing pieces stay None."""
    sections = {
        'narrative': None,
        'pdf_narrative': None,
        'stories': None,
        'charts': None,
        'chart_configurations': None,
        'visualization_specs': None,
    }

    if openrouter.is_configured():
        if include_narrative:
            sections['narrative'] = _complete(
                narrative_prompt(report_type, start_date, end_date, stats, top_performers), 0.7, 'narrative'
            )
        sections['pdf_narrative'] = _complete(pdf_narrative_prompt(stats), 0.5, 'pdf narrative')

        if include_stories and top_performers:
            sections['stories'] = _complete(stories_prompt(top_performers), 0.8, 'stories')

        if include_charts:
            content = _complete(
                visualization_prompt(report_type, stats, top_performers), 0.4, 'visualization',
                response_format={'type': 'json_object'},
            )
            sections['visualization_specs'] = normalize_visualization_specs(openrouter.parse_json_content(content))

            content = _complete(
                charts_prompt(stats, top_performers), 0.6, 'chart',
                response_format={'type': 'json_object'},
            )
            if content:
                configurations = extract_chart_configurations(openrouter.parse_json_content(content))
                if configurations is None:
                    logger.warning("Chart configurations were not valid JSON; keeping raw text")
                    sections['charts'] = content
                sections['chart_configurations'] = configurations

    if include_charts and not sections['visualization_specs']:
        sections['visualization_specs'] = fallback_visualization_specs(stats)

    return sections


def create_report(report_type, start_date, end_date, include_narrative, include_stories, include_charts,
                  created_by=None, demo_mode=False):
    stats, top_performers = compute_stats(start_date, end_date, demo_mode=demo_mode)
    sections = generate_sections(
        report_type, start_date, end_date, stats, top_performers,
        include_narrative, include_stories, include_charts,
    )

    report = Report.objects.create(
        title=build_title(report_type, start_date, end_date),
        report_type=report_type,
        start_date=start_date,
        end_date=end_date,
        stats=stats,
        narrative=sections['narrative'],
        pdf_narrative=sections['pdf_narrative'],
        stories=sections['stories'],
        charts=sections['charts'],
        chart_configurations=sections['chart_configurations'] or [],
        visualization_specs=sections['visualization_specs'] or [],
        include_narrative=include_narrative,
        include_stories=include_stories,
        include_charts=include_charts,
        created_by=created_by,
    )
    logger.info(f"Report {report.pk} generated: {report.title}")
    return report
