"""
Test suite for the reports module
Tests: impact reports, overviews, daily brief, cron delivery, management command
"""
import json
import smtplib
from datetime import date, timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework import status
from bridgepath.core.models import AuditLog
from bridgepath.core.roles import ADMIN, SUPERVISOR, PARTICIPANT
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.reports import daily_brief
from bridgepath.reports.generation import compute_stats, generate_sections, normalize_visualization_specs
from bridgepath.reports.models import Report
from bridgepath.reports.overviews import performance_status, participant_metrics, previous_period
from bridgepath.reports.streaming import UNAVAILABLE_MESSAGE

BRIEF_DAY = date(2026, 3, 6)  # Friday


def stream_events(*chunks):
    return iter([{'choices': [{'delta': {'content': chunk}}]} for chunk in chunks])


def ndjson_lines(response):
    body = b''.join(response.streaming_content).decode()
    return [json.loads(line) for line in body.splitlines() if line]


@override_settings(OPENROUTER_API_KEY='', LABOR_COST_PER_HOUR=10)
class ReportGenerationTests(TestCase):
    """Test report statistics and saved reports"""

    def setUp(self):
        self.start = date(2026, 3, 1)
        self.end = date(2026, 3, 31)
        self.graduate = TestDataFactory.create_participant(name='Sam Ortiz', status='graduated', current_phase=4)
        self.active = TestDataFactory.create_participant(name='Lee Wong', current_phase=1)
        TestDataFactory.create_participant(name='Mock Person', is_mock=True)
        TestDataFactory.create_work_log(self.active, hours=Decimal('8.00'), work_date=date(2026, 3, 3))
        TestDataFactory.create_production_record(self.active, weight=Decimal('50.00'), price_per_unit=Decimal('2.000'),
                                                 production_date=date(2026, 3, 3))
        TestDataFactory.create_production_record(self.graduate, weight=Decimal('4.00'), unit='each',
                                                 price_per_unit=Decimal('5.000'), production_date=date(2026, 3, 4))
        TestDataFactory.create_certification(self.active, earned_date=date(2026, 3, 10))
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))

    def test_compute_stats(self):
        stats, top_performers = compute_stats(self.start, self.end)
        self.assertEqual(stats['participant_count'], 2)
        self.assertEqual(stats['phase_breakdown'], {'1': 1, '4': 1})
        self.assertEqual(stats['revenue'], 120.0)
        self.assertEqual(stats['total_weight'], 54.0)
        self.assertEqual(stats['lbs_diverted'], 50.0)
        self.assertEqual(stats['hours'], 8.0)
        self.assertEqual(stats['labor_cost'], 80.0)
        self.assertEqual(stats['net_value'], 40.0)
        self.assertEqual(stats['certifications'], 1)
        self.assertEqual(stats['placements'], 1)
        self.assertEqual(stats['retention'], 50)
        self.assertEqual(top_performers[0], {'name': 'Lee Wong', 'revenue': 100.0})

    def test_demo_mode_counts_mock_rows(self):
        stats, _ = compute_stats(self.start, self.end, demo_mode=True)
        self.assertEqual(stats['participant_count'], 3)

    def test_sections_without_model(self):
        stats, top_performers = compute_stats(self.start, self.end)
        sections = generate_sections('production', self.start, self.end, stats, top_performers, True, True, True)
        self.assertIsNone(sections['narrative'])
        self.assertIsNone(sections['stories'])
        self.assertEqual([s['type'] for s in sections['visualization_specs']],
                         ['icon_progression', 'impact_equivalence', 'revenue_progress'])

    def test_normalize_visualization_specs(self):
        specs = normalize_visualization_specs({'visualizations': [
            {'type': 'revenue_progress', 'title': 'Revenue', 'annotations': ['ok', 3], 'data': {'a': 1, 'b': True}},
            {'type': 'pie', 'title': 'Dropped'},
            'junk',
        ]})
        self.assertEqual(len(specs), 1)
        self.assertEqual(specs[0]['annotations'], ['ok'])
        self.assertEqual(specs[0]['data'], {'a': 1})
        self.assertIsNone(normalize_visualization_specs({'visualizations': []}))

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.reports.generation.openrouter.chat_completion')
    @mock.patch('bridgepath.reports.generation.openrouter.complete_prompt')
    def test_sections_with_model(self, complete_prompt, chat_completion):
        complete_prompt.return_value = 'Narrative text'
        chat_completion.side_effect = [
            '{"visualizations": [{"type": "custom_infographic", "title": "Impact", "data": {"lbs": 54}}]}',
            'not json at all',
        ]
        stats, top_performers = compute_stats(self.start, self.end)
        sections = generate_sections('production', self.start, self.end, stats, top_performers, True, True, True)
        self.assertEqual(sections['narrative'], 'Narrative text')
        self.assertEqual(sections['pdf_narrative'], 'Narrative text')
        self.assertEqual(sections['stories'], 'Narrative text')
        self.assertEqual(sections['visualization_specs'][0]['type'], 'custom_infographic')
        self.assertEqual(sections['charts'], 'not json at all')
        self.assertIsNone(sections['chart_configurations'])

    def test_create_report_endpoint(self):
        response = self.client.post('/api/v1/reports/', {
            'report_type': 'production',
            'start_date': '2026-03-01',
            'end_date': '2026-03-31',
            'include_narrative': True,
            'include_stories': False,
            'include_charts': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        report = Report.objects.get(pk=response.data['id'])
        self.assertEqual(report.title, 'Production Summary Report - Mar 1, 2026 to Mar 31, 2026')
        self.assertEqual(report.stats['participant_count'], 2)
        self.assertTrue(AuditLog.objects.filter(action='report_generate', object_id=str(report.pk)).exists())

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.core.openrouter.requests.post')
    def test_create_report_survives_non_json_model_reply(self, post):
        post.return_value = mock.Mock(ok=True, status_code=200, text='<html>gateway</html>')
        post.return_value.json.side_effect = ValueError('Expecting value')
        response = self.client.post('/api/v1/reports/', {
            'report_type': 'environmental',
            'start_date': '2026-03-01',
            'end_date': '2026-03-31',
            'include_narrative': True,
            'include_stories': True,
            'include_charts': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        report = Report.objects.get(pk=response.data['id'])
        self.assertIsNone(report.narrative)
        self.assertIsNone(report.pdf_narrative)
        self.assertIsNone(report.stories)

    def test_create_report_rejects_reversed_range(self):
        response = self.client.post('/api/v1/reports/', {
            'report_type': 'outcomes',
            'start_date': '2026-03-31',
            'end_date': '2026-03-01',
            'include_narrative': False,
            'include_stories': False,
            'include_charts': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_and_delete(self):
        report = TestDataFactory.create_report()
        response = self.client.get('/api/v1/reports/')
        self.assertEqual(len(response.data['reports']), 1)

        response = self.client.delete(f'/api/v1/reports/{report.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_user(role=ADMIN))
        response = self.client.delete(f'/api/v1/reports/{report.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Report.objects.exists())


class OverviewMetricsTests(TestCase):
    """Test participant performance metrics"""

    def test_performance_status(self):
        self.assertEqual(performance_status(1, 69, 10), 'At Risk')
        self.assertEqual(performance_status(1, 84, 10), 'Watch')
        self.assertEqual(performance_status(2, 95, 6), 'Advancing')
        self.assertEqual(performance_status(1, 95, 6), 'On Track')
        self.assertEqual(performance_status(3, 90, 6), 'On Track')

    def test_previous_period(self):
        self.assertEqual(previous_period(date(2026, 3, 8), date(2026, 3, 14)),
                         (date(2026, 3, 1), date(2026, 3, 7)))

    @override_settings(LABOR_COST_PER_HOUR=10)
    def test_participant_metrics(self):
        participant = TestDataFactory.create_participant(current_phase=2, entry_date=date(2026, 1, 1))
        # Mon 2 - Fri 6 March: five expected days, worked three
        for day in (2, 3, 4):
            TestDataFactory.create_work_log(participant, hours=Decimal('5.00'), work_date=date(2026, 3, day))
        TestDataFactory.create_production_record(participant, weight=Decimal('100.00'),
                                                 price_per_unit=Decimal('1.000'), production_date=date(2026, 3, 3))

        row = participant_metrics([participant], date(2026, 3, 2), date(2026, 3, 6), today=date(2026, 3, 6))[0]
        self.assertEqual(row['expected_days'], 5)
        self.assertEqual(row['days_worked'], 3)
        self.assertEqual(row['attendance_rate'], 60)
        self.assertEqual(row['total_hours'], 15.0)
        self.assertEqual(row['labor_cost'], 150.0)
        self.assertEqual(row['net_value'], -50.0)
        self.assertEqual(row['revenue_per_hour'], 6.67)
        self.assertEqual(row['days_in_program'], 64)
        self.assertEqual(row['status'], 'At Risk')


@override_settings(OPENROUTER_API_KEY='')
class OverviewAPITests(TestCase):
    """Test overview endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        self.participant = TestDataFactory.create_participant(name='Jamie Fox', current_phase=2)
        TestDataFactory.create_participant(name='Unknown')
        TestDataFactory.create_work_log(self.participant, hours=Decimal('2.00'), role='Sorting',
                                        work_date=date(2026, 3, 3), notes='Sorted two gaylords of wire')
        TestDataFactory.create_production_record(self.participant, weight=Decimal('20.00'),
                                                 price_per_unit=Decimal('2.000'), production_date=date(2026, 3, 3))
        TestDataFactory.create_production_record(self.participant, weight=Decimal('10.00'),
                                                 price_per_unit=Decimal('2.000'), production_date=date(2026, 2, 25))
        self.date_range = {'start': '2026-03-01', 'end': '2026-03-07'}

    def test_dashboard_overview_without_model(self):
        response = self.client.post('/api/v1/dashboard-overview/', {
            'filters': {'phase': '2', 'status': 'all', 'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['analysis'], UNAVAILABLE_MESSAGE)
        self.assertEqual(response.data['metrics']['total'], 1)
        self.assertEqual(response.data['participants'][0]['name'], 'Jamie Fox')

    def test_dashboard_overview_invalid_phase(self):
        response = self.client.post('/api/v1/dashboard-overview/', {
            'filters': {'phase': '9', 'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_work_logs_overview_invalid_participant(self):
        response = self.client.post('/api/v1/work-logs-overview/', {
            'filters': {'participant_id': 'abc', 'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('participant_id', response.data['filters'])

    def test_work_logs_overview_participant_filter(self):
        other = TestDataFactory.create_participant(name='Sam Reed')
        TestDataFactory.create_work_log(other, work_date=date(2026, 3, 4))
        response = self.client.post('/api/v1/work-logs-overview/', {
            'filters': {'participant_id': str(self.participant.pk), 'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['metrics']['total_entries'], 1)

    def test_production_overview_trend(self):
        response = self.client.post('/api/v1/production-overview/', {'date_range': self.date_range}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        metrics = response.data['metrics']
        self.assertEqual(metrics['total_revenue'], 40.0)
        self.assertEqual(metrics['previous_revenue'], 20.0)
        self.assertEqual(metrics['trend_direction'], 'up')
        self.assertEqual(metrics['trend_percent'], 100.0)
        self.assertEqual(metrics['efficiency'], 20.0)
        self.assertEqual(response.data['material_mix'], {'Metals & Wire': 100.0})

    def test_work_logs_overview(self):
        response = self.client.post('/api/v1/work-logs-overview/', {
            'filters': {'role': 'Sorting', 'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        metrics = response.data['metrics']
        self.assertEqual(metrics['total_entries'], 1)
        self.assertEqual(metrics['short_shifts'], 1)
        self.assertEqual(len(response.data['notes_samples']), 1)

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.reports.streaming.openrouter.stream_chat_completion')
    def test_overview_streams_ndjson(self, stream_chat_completion):
        stream_chat_completion.return_value = stream_events('### Focus', ' on Jamie')
        response = self.client.post('/api/v1/production-overview/', {'date_range': self.date_range}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/x-ndjson')
        lines = ndjson_lines(response)
        self.assertEqual(lines[0]['type'], 'data')
        self.assertEqual(lines[0]['metrics']['total_revenue'], 40.0)
        self.assertEqual([line['content'] for line in lines[1:]], ['### Focus', ' on Jamie'])

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.reports.streaming.openrouter.stream_chat_completion')
    def test_overview_upstream_failure(self, stream_chat_completion):
        from bridgepath.core.exceptions import OpenRouterError
        stream_chat_completion.side_effect = OpenRouterError('down', status_code=503)
        response = self.client.post('/api/v1/work-logs-overview/', {
            'filters': {'date_range': self.date_range},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['error'], 'AI Error')


@override_settings(OPENROUTER_API_KEY='', WEEKLY_REVENUE_TARGET=1000)
class DailyBriefTests(TestCase):
    """Test daily brief data and delivery"""

    def setUp(self):
        self.steady = TestDataFactory.create_participant(name='Kai Steady', current_phase=1,
                                                         entry_date=date(2026, 1, 5))
        self.absent = TestDataFactory.create_participant(name='Quinn Absent', current_phase=2,
                                                         entry_date=date(2026, 1, 5))
        for day in range(2, 7):
            TestDataFactory.create_work_log(self.steady, hours=Decimal('6.00'), work_date=date(2026, 3, day))
        TestDataFactory.create_production_record(self.steady, weight=Decimal('100.00'),
                                                 price_per_unit=Decimal('1.000'), production_date=date(2026, 3, 2))
        TestDataFactory.create_alert(self.absent, priority='high', message='No shifts this week')
        TestDataFactory.create_alert(priority='low', is_read=True)

    def test_format_long_date(self):
        self.assertEqual(daily_brief.format_long_date(date(2026, 1, 5)), 'Monday, January 5, 2026')

    def test_program_health(self):
        self.assertEqual(daily_brief.program_health(92, 96, 2), 'EXCELLENT')
        self.assertEqual(daily_brief.program_health(92, 96, 3), 'GOOD')
        self.assertEqual(daily_brief.program_health(75, 80, 8), 'FAIR')
        self.assertEqual(daily_brief.program_health(60, 100, 0), 'CONCERNING')

    def test_build_brief_data(self):
        brief = daily_brief.build_brief_data(BRIEF_DAY)
        data = brief['data']

        self.assertEqual(data['participants']['total'], 2)
        self.assertEqual(data['participants']['by_phase'], {'1': 1, '2': 1})
        self.assertEqual([p['name'] for p in data['participants']['at_risk']], ['Quinn Absent'])
        self.assertEqual([p['name'] for p in data['participants']['ready_to_advance']], ['Kai Steady'])

        self.assertEqual(data['work_logs']['total_hours'], 30.0)
        self.assertEqual(data['work_logs']['attendance_rate'], 50)
        self.assertEqual(data['work_logs']['gaps'], ['General low attendance', 'Hammermill understaffed'])

        self.assertEqual(data['production']['total_revenue'], 100.0)
        self.assertEqual(data['production']['efficiency'], 3.33)
        self.assertEqual(len(data['alerts']['high']), 1)
        self.assertEqual(data['alerts']['low'], [])

        self.assertEqual(data['comparisons']['vs_target'], {'revenue_percent': 10, 'target': 1000.0})
        self.assertIn('Metals & Wire leads revenue at 100%', data['comparisons']['trends'])

        metrics = brief['metrics']
        self.assertEqual(metrics['program_health'], 'CONCERNING')
        self.assertEqual(metrics['critical_alerts'], 1)
        self.assertFalse(metrics['on_track_for_target'])

    def test_week_over_week(self):
        TestDataFactory.create_production_record(self.steady, weight=Decimal('50.00'),
                                                 price_per_unit=Decimal('1.000'), production_date=date(2026, 2, 25))
        compared = daily_brief.build_brief_data(BRIEF_DAY)['data']['comparisons']
        self.assertEqual(compared['vs_last_week']['revenue_change'], 100)
        self.assertIn('Revenue up 100% vs last week', compared['trends'])

    def test_generate_brief_without_model(self):
        text, brief = daily_brief.generate_brief(BRIEF_DAY)
        self.assertEqual(text, UNAVAILABLE_MESSAGE)
        self.assertEqual(brief['date'], BRIEF_DAY)

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.core.openrouter.requests.post')
    def test_generate_brief_non_json_model_reply(self, post):
        post.return_value = mock.Mock(ok=True, status_code=200, text='<html>gateway</html>')
        post.return_value.json.side_effect = ValueError('Expecting value')
        text, brief = daily_brief.generate_brief(BRIEF_DAY)
        self.assertEqual(text, 'Error generating brief.')
        self.assertEqual(brief['date'], BRIEF_DAY)

    def test_staff_recipients(self):
        TestDataFactory.create_user(email='b-admin@test.com', role=ADMIN)
        TestDataFactory.create_user(email='a-super@test.com', role=SUPERVISOR)
        TestDataFactory.create_user(email='participant@test.com', role=PARTICIPANT)
        TestDataFactory.create_user(email='root@test.com', role=None, is_superuser=True)
        inactive = TestDataFactory.create_user(email='gone@test.com', role=ADMIN)
        inactive.is_active = False
        inactive.save()
        self.assertEqual(daily_brief.staff_recipients(),
                         ['a-super@test.com', 'b-admin@test.com', 'root@test.com'])

    def test_send_brief_email(self):
        _, brief = daily_brief.generate_brief(BRIEF_DAY)
        sent = daily_brief.send_brief_email('Good morning. Here is the brief.', brief, ['ops@test.com'])
        self.assertEqual(sent, 1)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'Daily Operations Brief - Friday, March 6, 2026')
        self.assertIn('Good morning. Here is the brief.', message.body)
        html, mimetype = message.alternatives[0]
        self.assertEqual(mimetype, 'text/html')
        self.assertIn('CONCERNING', html)

    def test_endpoint_without_model(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = client.post('/api/v1/daily-brief/', {'date': '2026-03-06'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['brief'], UNAVAILABLE_MESSAGE)
        self.assertEqual(response.data['metrics']['total_participants'], 2)

    @override_settings(OPENROUTER_API_KEY='test-key')
    @mock.patch('bridgepath.reports.streaming.openrouter.stream_chat_completion')
    def test_endpoint_streams(self, stream_chat_completion):
        stream_chat_completion.return_value = stream_events('Good morning.')
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = client.post('/api/v1/daily-brief/', {'date': '2026-03-06'}, format='json')
        lines = ndjson_lines(response)
        self.assertEqual(lines[0]['metrics']['program_health'], 'CONCERNING')
        self.assertEqual(lines[1], {'type': 'chunk', 'content': 'Good morning.'})

    def test_endpoint_rejects_bad_date(self):
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user(role=SUPERVISOR))
        response = client.post('/api/v1/daily-brief/', {'date': 'yesterday'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


@override_settings(OPENROUTER_API_KEY='', CRON_SECRET='cron-secret')
class CronDailyBriefTests(TestCase):
    """Test the scheduled brief endpoint"""

    url = '/api/v1/cron/daily-brief/'

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    @override_settings(CRON_SECRET='')
    def test_secret_not_configured(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    def test_bad_token(self):
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Bearer wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_no_recipients(self):
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No recipients found')

    def test_sends_brief(self):
        TestDataFactory.create_user(email='lead@test.com', role=ADMIN)
        TestDataFactory.create_user(email='super@test.com', role=SUPERVISOR)
        response = self.client.post(self.url, HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Daily brief sent successfully')
        self.assertEqual(response.data['recipients'], 2)
        self.assertEqual(mail.outbox[0].to, ['lead@test.com', 'super@test.com'])
        self.assertTrue(AuditLog.objects.filter(action='brief_sent').exists())

    @mock.patch('bridgepath.reports.views.brief_service.send_brief_email',
                side_effect=smtplib.SMTPException('Connection refused'))
    def test_send_failure(self, _):
        TestDataFactory.create_user(email='lead@test.com', role=ADMIN)
        response = self.client.get(self.url, HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Connection refused')


@override_settings(OPENROUTER_API_KEY='')
class SendDailyBriefCommandTests(TestCase):
    """Test the send_daily_brief management command"""

    def test_dry_run(self):
        out = StringIO()
        call_command('send_daily_brief', '--date', '2026-03-06', '--dry-run', stdout=out)
        output = out.getvalue()
        self.assertIn('Program health: CONCERNING', output)
        self.assertIn('Dry run', output)
        self.assertEqual(len(mail.outbox), 0)

    def test_explicit_recipients(self):
        out = StringIO()
        call_command('send_daily_brief', '--to', 'a@test.com', '--to', 'b@test.com', stdout=out)
        self.assertEqual(mail.outbox[0].to, ['a@test.com', 'b@test.com'])
        self.assertIn('sent to 2 recipients', out.getvalue())

    def test_invalid_date(self):
        with self.assertRaises(CommandError):
            call_command('send_daily_brief', '--date', 'not-a-date', '--dry-run', stdout=StringIO())

    def test_no_recipients(self):
        with self.assertRaises(CommandError):
            call_command('send_daily_brief', stdout=StringIO())

    def test_demo_flag_includes_mock_participants(self):
        TestDataFactory.create_participant(is_mock=True)
        out = StringIO()
        call_command('send_daily_brief', '--demo', '--dry-run', stdout=out)
        self.assertIn('Participants: 1,', out.getvalue())
        out = StringIO()
        call_command('send_daily_brief', '--dry-run', stdout=out)
        self.assertIn('Participants: 0,', out.getvalue())
