"""
Test suite for the agent module
Tests: ops agent turns and sessions, MCP tool plumbing, Pipedream Connect
"""
import json
from unittest import mock

from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from bridgepath.core.exceptions import MCPError, OpenRouterError, PipedreamError
from bridgepath.core.roles import SUPERVISOR, PARTICIPANT
from bridgepath.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bridgepath.agent import mcp_client, pipedream
from bridgepath.agent.models import OpsAgentSession
from bridgepath.agent.runner import (
    FALLBACK_REPLY, build_messages, iter_reply_text, merge_tool_call_deltas, run_tool_calls,
)

PIPEDREAM_SETTINGS = {
    'OPENROUTER_API_KEY': 'test-key',
    'PIPEDREAM_CLIENT_ID': 'client-id',
    'PIPEDREAM_CLIENT_SECRET': 'client-secret',
    'PIPEDREAM_PROJECT_ID': 'proj_123',
    'PIPEDREAM_ENVIRONMENT': 'development',
    'PIPEDREAM_APP_SLUG': '',
}


def text_events(*chunks):
    return iter([{'choices': [{'delta': {'content': chunk}}]} for chunk in chunks])


def streamed_text(response):
    return b''.join(response.streaming_content).decode()


class RunnerTests(TestCase):
    """Test message assembly and stream parsing"""

    def test_build_messages_includes_history(self):
        user = TestDataFactory.create_user(role=SUPERVISOR)
        session = OpsAgentSession.objects.create(
            user=user,
            page_context={'page': 'participants'},
            messages=[
                {'role': 'user', 'content': 'Who is at risk?', 'timestamp': '2026-03-01T10:00:00Z'},
                {'role': 'assistant', 'content': 'Quinn is.', 'timestamp': '2026-03-01T10:00:00Z'},
            ],
        )
        messages = build_messages(session, 'Why?')
        self.assertEqual(messages[0]['role'], 'system')
        self.assertIn('"page": "participants"', messages[0]['content'])
        self.assertEqual([m['content'] for m in messages[1:]], ['Who is at risk?', 'Quinn is.', 'Why?'])

    def test_merge_tool_call_deltas(self):
        tool_calls = {}
        merge_tool_call_deltas(tool_calls, [{'index': 0, 'id': 'call_1', 'function': {'name': 'sheets_'}}])
        merge_tool_call_deltas(tool_calls, [{'index': 0, 'function': {'name': 'read', 'arguments': '{"row"'}}])
        merge_tool_call_deltas(tool_calls, [{'index': 0, 'function': {'arguments': ': 2}'}}, {'function': {}}])
        self.assertEqual(tool_calls, {0: {
            'id': 'call_1',
            'type': 'function',
            'function': {'name': 'sheets_read', 'arguments': '{"row": 2}'},
        }})

    def test_iter_reply_text_stops_on_error(self):
        events = iter([
            {'choices': [{'delta': {'content': 'Hello'}}]},
            {'error': {'message': 'rate limited'}},
            {'choices': [{'delta': {'content': 'never'}}]},
        ])
        self.assertEqual(list(iter_reply_text(events)), ['Hello', '\n\n[Error: rate limited]'])

    @mock.patch('bridgepath.agent.runner.mcp_client.call_tool')
    def test_run_tool_calls(self, call_tool):
        call_tool.side_effect = [
            {'name': 'ok_tool', 'is_error': False, 'content': [{'type': 'text', 'text': '42'}]},
            MCPError('tool exploded'),
        ]
        calls = [
            {'id': 'a', 'function': {'name': 'ok_tool', 'arguments': '{"x": 1}'}},
            {'id': 'b', 'function': {'name': 'bad_tool', 'arguments': 'not json'}},
        ]
        results = run_tool_calls(7, calls)
        call_tool.assert_any_call(7, 'ok_tool', {'x': 1})
        call_tool.assert_any_call(7, 'bad_tool', {})
        self.assertEqual(results[0]['content'], '[{"type": "text", "text": "42"}]')
        self.assertEqual(results[1], {'role': 'tool', 'tool_call_id': 'b',
                                      'content': '{"error": "tool exploded"}'})

    @override_settings(**PIPEDREAM_SETTINGS)
    @mock.patch('bridgepath.agent.mcp_client.pipedream.get_access_token',
                side_effect=PipedreamError('token expired', status_code=401))
    def test_run_tool_calls_token_failure_returns_error(self, get_access_token):
        calls = [{'id': 'a', 'function': {'name': 'slack_send', 'arguments': '{}'}}]
        results = run_tool_calls(7, calls)
        get_access_token.assert_called_once()
        self.assertEqual(results[0]['tool_call_id'], 'a')
        self.assertIn('token expired', json.loads(results[0]['content'])['error'])


@override_settings(**PIPEDREAM_SETTINGS)
class OpsAgentAPITests(TestCase):
    """Test the ops agent endpoint"""

    url = '/api/v1/ops-agent/'

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(role=SUPERVISOR)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_participant_forbidden(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=PARTICIPANT))
        response = self.client.get(f'{self.url}?list=true')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_sessions(self):
        OpsAgentSession.objects.create(user=self.user, messages=[{'role': 'user', 'content': 'First question'}])
        OpsAgentSession.objects.create(user=self.user)
        OpsAgentSession.objects.create(user=TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.get(f'{self.url}?list=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(s['first_message'] for s in response.data['sessions']),
                         ['First question', 'New Conversation'])

    def test_get_session(self):
        session = OpsAgentSession.objects.create(user=self.user, messages=[{'role': 'user', 'content': 'Hi'}])
        response = self.client.get(f'{self.url}?sessionId={session.pk}')
        self.assertEqual(response.data['messages'], [{'role': 'user', 'content': 'Hi'}])

    def test_get_session_requires_id(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_users_session_not_found(self):
        session = OpsAgentSession.objects.create(user=TestDataFactory.create_user(role=SUPERVISOR))
        response = self.client.get(f'{self.url}?session_id={session.pk}')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        response = self.client.post(self.url, {'session_id': session.pk, 'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @override_settings(OPENROUTER_API_KEY='')
    def test_missing_openrouter_key(self):
        response = self.client.post(self.url, {'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'OpenRouter key missing')

    @override_settings(PIPEDREAM_CLIENT_SECRET='')
    def test_missing_pipedream_credentials(self):
        response = self.client.post(self.url, {'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Pipedream MCP credentials missing')

    @mock.patch('bridgepath.agent.runner.openrouter.stream_chat_completion')
    @mock.patch('bridgepath.agent.runner.mcp_client.list_tools', return_value=[])
    def test_streams_reply_and_records_exchange(self, _, stream_chat_completion):
        stream_chat_completion.return_value = text_events('Three people ', 'are at risk.')
        response = self.client.post(self.url, {
            'message': 'Who is at risk?',
            'page_context': {'page': 'dashboard'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        session_id = int(response['X-Session-Id'])
        self.assertEqual(streamed_text(response), 'Three people are at risk.')

        session = OpsAgentSession.objects.get(pk=session_id)
        self.assertEqual(session.user, self.user)
        self.assertEqual(session.page_context, {'page': 'dashboard'})
        self.assertEqual([m['content'] for m in session.messages], ['Who is at risk?', 'Three people are at risk.'])

    @mock.patch('bridgepath.agent.runner.openrouter.stream_chat_completion')
    @mock.patch('bridgepath.agent.runner.mcp_client.list_tools', return_value=[])
    def test_empty_reply_records_fallback(self, _, stream_chat_completion):
        stream_chat_completion.return_value = iter([])
        session = OpsAgentSession.objects.create(user=self.user)
        response = self.client.post(self.url, {'session_id': session.pk, 'message': 'Hello?'}, format='json')
        self.assertEqual(streamed_text(response), '')
        session.refresh_from_db()
        self.assertEqual(session.messages[-1]['content'], FALLBACK_REPLY)

    @mock.patch('bridgepath.agent.runner.mcp_client.call_tool')
    @mock.patch('bridgepath.agent.runner.openrouter.stream_chat_completion')
    @mock.patch('bridgepath.agent.runner.mcp_client.list_tools')
    def test_tool_call_round_trip(self, list_tools, stream_chat_completion, call_tool):
        list_tools.return_value = [{'name': 'sheets_read', 'description': '', 'input_schema': {}}]
        stream_chat_completion.side_effect = [
            iter([{'choices': [{'delta': {'tool_calls': [
                {'index': 0, 'id': 'call_1', 'function': {'name': 'sheets_read', 'arguments': '{}'}},
            ]}}]}]),
            text_events('The sheet says 42.'),
        ]
        call_tool.return_value = {'name': 'sheets_read', 'is_error': False,
                                  'content': [{'type': 'text', 'text': '42'}]}

        response = self.client.post(self.url, {'message': 'Read the sheet'}, format='json')
        self.assertEqual(streamed_text(response), 'The sheet says 42.')
        call_tool.assert_called_once_with(self.user.pk, 'sheets_read', {})

        followup = stream_chat_completion.call_args_list[1][0][0]
        self.assertEqual(followup[-2]['tool_calls'][0]['function']['name'], 'sheets_read')
        self.assertEqual(followup[-1]['role'], 'tool')
        first_tools = stream_chat_completion.call_args_list[0][1]['tools']
        self.assertEqual(first_tools[0]['function']['description'], 'Pipedream MCP tool')

    @mock.patch('bridgepath.agent.runner.mcp_client.list_tools', side_effect=MCPError('unreachable'))
    def test_start_failure(self, _):
        response = self.client.post(self.url, {'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Failed to start stream')

    @mock.patch('bridgepath.agent.runner.openrouter.stream_chat_completion',
                side_effect=OpenRouterError('bad gateway', status_code=502))
    @mock.patch('bridgepath.agent.runner.mcp_client.list_tools', return_value=[])
    def test_openrouter_failure(self, _, __):
        response = self.client.post(self.url, {'message': 'Hi'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)


@override_settings(**PIPEDREAM_SETTINGS)
class MCPClientTests(TestCase):
    """Test MCP server addressing and tool conversion"""

    @override_settings(PIPEDREAM_APP_SLUG='google_sheets')
    @mock.patch('bridgepath.agent.mcp_client.pipedream.get_access_token', return_value='pd-token')
    def test_server_url_and_headers(self, _):
        self.assertEqual(
            mcp_client.server_url(5),
            'https://remote.mcp.pipedream.net?appDiscovery=true&externalUserId=5&app=google_sheets',
        )
        headers = mcp_client.server_headers(5)
        self.assertEqual(headers['Authorization'], 'Bearer pd-token')
        self.assertEqual(headers['x-pd-external-user-id'], '5')
        self.assertEqual(headers['x-pd-app-slug'], 'google_sheets')
        self.assertEqual(headers['x-pd-tool-mode'], 'tools-only')

    def test_to_openai_tools(self):
        tools = mcp_client.to_openai_tools([
            {'name': 'notion_search', 'description': 'Search pages', 'input_schema': {'type': 'object'}},
        ])
        self.assertEqual(tools, [{
            'type': 'function',
            'function': {'name': 'notion_search', 'description': 'Search pages',
                         'parameters': {'type': 'object'}},
        }])


@override_settings(**PIPEDREAM_SETTINGS)
class PipedreamTests(TestCase):
    """Test Pipedream Connect helpers and endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(role=SUPERVISOR)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_with_app_param(self):
        self.assertEqual(pipedream.with_app_param('https://pd.test/connect?token=abc', 'slack'),
                         'https://pd.test/connect?token=abc&app=slack')
        self.assertEqual(pipedream.with_app_param('https://pd.test/connect', None), 'https://pd.test/connect')

    @mock.patch('bridgepath.agent.pipedream.requests.post')
    def test_access_token_cached(self, post):
        post.return_value = mock.Mock(ok=True)
        post.return_value.json.return_value = {'access_token': 'pd-token', 'expires_in': 3600}
        self.assertEqual(pipedream.get_access_token(), 'pd-token')
        self.assertEqual(pipedream.get_access_token(), 'pd-token')
        self.assertEqual(post.call_count, 1)

    @mock.patch('bridgepath.agent.pipedream.requests.post')
    def test_access_token_error(self, post):
        post.return_value = mock.Mock(ok=False, status_code=401, text='invalid_client')
        with self.assertRaises(PipedreamError):
            pipedream.get_access_token()

    @mock.patch('bridgepath.agent.pipedream.get_access_token', return_value='pd-token')
    @mock.patch('bridgepath.agent.pipedream.requests.post')
    def test_connect_link(self, post, _):
        post.return_value = mock.Mock(ok=True)
        post.return_value.json.return_value = {'token': 'ctok', 'expires_at': '2026-03-06T12:00:00Z'}
        response = self.client.post('/api/v1/pipedream/connect-link/', {'app': 'slack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], 'ctok')
        self.assertEqual(
            response.data['connect_link_url'],
            'https://pipedream.com/_static/connect.html?token=ctok&connectLink=true&app=slack',
        )
        body = post.call_args[1]['json']
        self.assertEqual(body['external_user_id'], str(self.user.pk))

    def test_connect_link_requires_app(self):
        response = self.client.post('/api/v1/pipedream/connect-link/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @mock.patch('bridgepath.agent.views.pipedream.create_connect_token',
                side_effect=PipedreamError('Missing token in response'))
    def test_connect_link_failure(self, _):
        response = self.client.post('/api/v1/pipedream/connect-link/', {'app': 'slack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data['error'], 'Missing token in response')

    @override_settings(PIPEDREAM_APP_SLUG='slack')
    @mock.patch('bridgepath.agent.views.pipedream.list_apps')
    def test_apps_reports_current_slug(self, list_apps):
        list_apps.return_value = [
            {'id': 'app_1', 'name': 'Slack', 'name_slug': 'slack', 'auth_type': 'oauth', 'description': ''},
            {'id': 'app_2', 'name': 'Notion', 'name_slug': 'notion', 'auth_type': 'oauth', 'description': ''},
        ]
        response = self.client.get('/api/v1/pipedream/apps/?q=sl')
        list_apps.assert_called_once_with('sl')
        self.assertTrue(response.data['is_current_app_slug_valid'])
        self.assertEqual(response.data['matching_app'], {'id': 'app_1', 'name': 'Slack', 'name_slug': 'slack'})

    @mock.patch('bridgepath.agent.views.pipedream.list_apps', return_value=[])
    def test_apps_without_slug(self, _):
        response = self.client.get('/api/v1/pipedream/apps/')
        self.assertIsNone(response.data['current_app_slug'])
        self.assertFalse(response.data['is_current_app_slug_valid'])
