"""
OpenRouter chat-completion client.

All LLM features (report narratives, dashboard overviews, daily briefs,
participant intelligence and the ops agent) go through this module.
"""
import json
import logging
import os
import re

import requests
from django.conf import settings

from .exceptions import OpenRouterError, ServiceNotConfigured

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60
STREAM_TIMEOUT = 120


def _setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def get_api_key():
    return _setting('OPENROUTER_API_KEY', '')


def is_configured():
    return bool(get_api_key())


def _headers():
    api_key = get_api_key()
    if not api_key:
        raise ServiceNotConfigured('OPENROUTER_API_KEY is not configured')
    return {
        'Content-Type': 'application/json',
        'Authorization': f'Bearer {api_key}',
        'HTTP-Referer': _setting('APP_URL', 'http://localhost:3000'),
        'X-Title': _setting('OPENROUTER_APP_TITLE', 'BridgePath Operations'),
    }


def _payload(messages, temperature, stream=False, tools=None, tool_choice=None, response_format=None):
    payload = {
        'model': _setting('OPENROUTER_MODEL', 'google/gemini-3-flash-preview'),
        'messages': messages,
        'temperature': temperature,
    }
    if stream:
        payload['stream'] = True
    if tools:
        payload['tools'] = tools
        payload['tool_choice'] = tool_choice or 'auto'
    if response_format:
        payload['response_format'] = response_format
    return payload


def chat_completion(messages, temperature=0.7, response_format=None):
    """
    Run a non-streaming completion and return the assistant text.

    Raises:
        ServiceNotConfigured: no API key
        OpenRouterError: transport failure or non-2xx response
    """
    url = _setting('OPENROUTER_URL', 'https://openrouter.ai/api/v1/chat/completions')
    try:
        response = requests.post(
            url,
            headers=_headers(),
            json=_payload(messages, temperature, response_format=response_format),
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"OpenRouter request failed: {str(e)}")
        raise OpenRouterError(f"OpenRouter request failed: {str(e)}")

    if not response.ok:
        logger.error(f"OpenRouter error {response.status_code}: {response.text[:500]}")
        raise OpenRouterError('OpenRouter returned an error', status_code=response.status_code)

    try:
        data = response.json()
    except ValueError:
        logger.error(f"OpenRouter returned a non-JSON body: {response.text[:500]}")
        raise OpenRouterError('OpenRouter returned an invalid response', status_code=response.status_code)
    if not isinstance(data, dict):
        raise OpenRouterError('OpenRouter returned an invalid response', status_code=response.status_code)

    choices = data.get('choices') or []
    if not choices:
        return ''
    return (choices[0].get('message') or {}).get('content') or ''


def complete_prompt(prompt, temperature=0.7, system=None):
    messages = []
    if system:
        messages.append({'role': 'system', 'content': system})
    messages.append({'role': 'user', 'content': prompt})
    return chat_completion(messages, temperature=temperature)


def stream_chat_completion(messages, temperature=0.7, tools=None, tool_choice=None):
    """
    Start a streaming completion and yield each parsed SSE ``data:`` event.

    The HTTP request is made eagerly so configuration and upstream errors
    surface before the first event is consumed.
    """
    url = _setting('OPENROUTER_URL', 'https://openrouter.ai/api/v1/chat/completions')
    try:
        response = requests.post(
            url,
            headers=_headers(),
            json=_payload(messages, temperature, stream=True, tools=tools, tool_choice=tool_choice),
            stream=True,
            timeout=STREAM_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"OpenRouter stream request failed: {str(e)}")
        raise OpenRouterError(f"OpenRouter request failed: {str(e)}")

    if not response.ok:
        logger.error(f"OpenRouter stream error {response.status_code}: {response.text[:500]}")
        response.close()
        raise OpenRouterError('OpenRouter returned an error', status_code=response.status_code)

    return _iter_sse_events(response)


def _iter_sse_events(response):
    try:
        for raw_line in response.iter_lines(decode_unicode=True):
            if not raw_line or not raw_line.startswith('data: '):
                continue
            data = raw_line[6:]
            if data == '[DONE]':
                break
            try:
                yield json.loads(data)
            except ValueError:
                continue
    except requests.exceptions.RequestException as e:
        logger.error(f"OpenRouter stream interrupted: {str(e)}")
    finally:
        response.close()


def iter_content_deltas(events):
    """Yield assistant text fragments from a stream of completion events."""
    for event in events:
        choices = event.get('choices') or []
        if not choices:
            continue
        content = (choices[0].get('delta') or {}).get('content')
        if content:
            yield content


_FENCE_RE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def parse_json_content(text):
    """
    Parse JSON emitted by a model, tolerating markdown fences and
    surrounding prose. Returns None when nothing parseable is found.
    """
    if not text:
        return None
    cleaned = _FENCE_RE.sub('', text.strip())
    try:
        return json.loads(cleaned)
    except ValueError:
        pass
    for opener, closer in (('{', '}'), ('[', ']')):
        start = cleaned.find(opener)
        end = cleaned.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start:end + 1])
            except ValueError:
                continue
    return None
