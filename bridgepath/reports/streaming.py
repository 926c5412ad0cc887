"""
NDJSON responses: one ``data`` line followed by ``chunk`` lines of model text.
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.http import StreamingHttpResponse

from bridgepath.core import openrouter

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = 'AI analysis unavailable. Please check configuration.'


def ndjson_line(payload):
    return json.dumps(payload, cls=DjangoJSONEncoder) + '\n'


def stream_analysis(data, prompt, temperature=0.7):
    """
    Start the model stream and wrap it in an NDJSON response.

    Raises OpenRouterError before any bytes are sent when the upstream
    request fails.
    """
    events = openrouter.stream_chat_completion(
        [{'role': 'user', 'content': prompt}],
        temperature=temperature,
    )

    def generate():
        yield ndjson_line({'type': 'data', 'ok': True, **data})
        for content in openrouter.iter_content_deltas(events):
            yield ndjson_line({'type': 'chunk', 'content': content})

    response = StreamingHttpResponse(generate(), content_type='application/x-ndjson')
    response['Cache-Control'] = 'no-cache'
    response['X-Accel-Buffering'] = 'no'
    return response
