"""
Ops agent turn: stream a completion, run any MCP tool calls it requests,
stream the follow-up completion and record the exchange on the session.
"""
import json
import logging

from django.utils import timezone

from bridgepath.core import openrouter
from bridgepath.core.exceptions import OpenRouterError, ServiceError

from . import mcp_client

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm not sure yet. Can you rephrase?"
HISTORY_LIMIT = 20

SYSTEM_PROMPT = """You are the Ops Agent for the BridgePath Operations Platform.
You help staff understand the current page and answer questions using MCP tools.
Current page context: {page_context}
If a participantId or reportId is present, prefer using tools to fetch context."""


def build_messages(session, message):
    """System prompt, recent history of the session and the new user message."""
    messages = [{
        'role': 'system',
        'content': SYSTEM_PROMPT.format(page_context=json.dumps(session.page_context or {})),
    }]
    for entry in (session.messages or [])[-HISTORY_LIMIT:]:
        if entry.get('role') in ('user', 'assistant') and entry.get('content'):
            messages.append({'role': entry['role'], 'content': entry['content']})
    messages.append({'role': 'user', 'content': message})
    return messages


def merge_tool_call_deltas(tool_calls, deltas):
    """Fold streamed tool-call fragments into ``tool_calls`` keyed by index."""
    for delta in deltas:
        index = delta.get('index')
        if index is None:
            continue
        call = tool_calls.setdefault(index, {
            'id': None,
            'type': 'function',
            'function': {'name': '', 'arguments': ''},
        })
        if delta.get('id'):
            call['id'] = delta['id']
        function = delta.get('function') or {}
        if function.get('name'):
            call['function']['name'] += function['name']
        if function.get('arguments'):
            call['function']['arguments'] += function['arguments']


def iter_reply_text(events, tool_calls=None):
    """Yield assistant text from completion events, collecting tool calls on the side."""
    for event in events:
        if event.get('error'):
            error = event['error']
            message = error.get('message') if isinstance(error, dict) else str(error)
            logger.error(f"OpenRouter mid-stream error: {message}")
            yield f"\n\n[Error: {message}]"
            return

        choices = event.get('choices') or []
        if not choices:
            continue
        delta = choices[0].get('delta') or {}
        if delta.get('tool_calls'):
            if tool_calls is not None:
                merge_tool_call_deltas(tool_calls, delta['tool_calls'])
            continue
        content = delta.get('content')
        if content:
            yield content


def run_tool_calls(external_user_id, calls):
    """Execute each call over MCP and return the ``tool`` messages for the follow-up turn."""
    results = []
    for call in calls:
        name = call['function']['name']
        try:
            arguments = json.loads(call['function']['arguments'] or '{}')
        except ValueError:
            logger.warning(f"Tool {name} sent unparseable arguments")
            arguments = {}

        try:
            outcome = mcp_client.call_tool(external_user_id, name, arguments)
            content = outcome['content']
        except ServiceError as e:
            content = {'error': str(e)}

        results.append({
            'role': 'tool',
            'tool_call_id': call['id'],
            'content': json.dumps(content),
        })
    return results


def record_exchange(session, message, reply):
    now = timezone.now().isoformat()
    session.messages = list(session.messages or []) + [
        {'role': 'user', 'content': message, 'timestamp': now},
        {'role': 'assistant', 'content': reply or FALLBACK_REPLY, 'timestamp': now},
    ]
    session.save(update_fields=['messages', 'updated_at'])


def start_turn(session, message):
    """
    Begin an agent turn and return a generator of reply text.

    Tool discovery and the first model request happen before this returns,
    so MCPError and OpenRouterError surface to the caller.
    """
    external_user_id = session.user_id
    tools = mcp_client.to_openai_tools(mcp_client.list_tools(external_user_id))
    messages = build_messages(session, message)
    events = openrouter.stream_chat_completion(
        messages, temperature=0.7, tools=tools, tool_choice='auto'
    )
    return _stream_turn(session, message, messages, tools, events)


def _stream_turn(session, message, messages, tools, events):
    parts = []
    try:
        tool_calls = {}
        for text in iter_reply_text(events, tool_calls):
            parts.append(text)
            yield text

        if tool_calls:
            calls = [tool_calls[index] for index in sorted(tool_calls)]
            logger.info(f"Ops agent session {session.pk} running {len(calls)} tool call(s)")
            followup = messages + [{'role': 'assistant', 'content': None, 'tool_calls': calls}]
            followup += run_tool_calls(session.user_id, calls)
            try:
                second = openrouter.stream_chat_completion(
                    followup, temperature=0.7, tools=tools, tool_choice='auto'
                )
            except OpenRouterError as e:
                second = [{'error': {'message': str(e)}}]
            for text in iter_reply_text(second):
                parts.append(text)
                yield text
    finally:
        record_exchange(session, message, ''.join(parts))
