"""
Remote MCP tool server hosted by Pipedream.

Each call opens a streamable HTTP session, runs one JSON-RPC request and
closes it. The tool list is cached per user.
"""
import logging
from urllib.parse import urlencode

from asgiref.sync import async_to_sync
from django.conf import settings
from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from bridgepath.core.cache_utils import MCP_TOOLS_CACHE_TTL, cached_query
from bridgepath.core.exceptions import MCPError

from . import pipedream

logger = logging.getLogger(__name__)

MCP_URL = 'https://remote.mcp.pipedream.net'
DEFAULT_TOOL_DESCRIPTION = 'Pipedream MCP tool'


def server_url(external_user_id):
    params = {'appDiscovery': 'true', 'externalUserId': str(external_user_id)}
    if settings.PIPEDREAM_APP_SLUG:
        params['app'] = settings.PIPEDREAM_APP_SLUG
    return f'{MCP_URL}?{urlencode(params)}'


def server_headers(external_user_id):
    headers = {
        'Authorization': f'Bearer {pipedream.get_access_token()}',
        'x-pd-project-id': settings.PIPEDREAM_PROJECT_ID,
        'x-pd-environment': settings.PIPEDREAM_ENVIRONMENT,
        'x-pd-external-user-id': str(external_user_id),
        'x-pd-app-discovery': 'true',
        'x-pd-tool-mode': 'tools-only',
    }
    if settings.PIPEDREAM_APP_SLUG:
        headers['x-pd-app-slug'] = settings.PIPEDREAM_APP_SLUG
    return headers


async def _run(url, headers, operation):
    async with streamablehttp_client(url, headers=headers) as (read_stream, write_stream, _):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            return await operation(session)


def _call(external_user_id, operation, label):
    url = server_url(external_user_id)
    try:
        headers = server_headers(external_user_id)
        return async_to_sync(_run)(url, headers, operation)
    except Exception as e:
        logger.error(f"MCP {label} failed for user {external_user_id}: {str(e)}")
        raise MCPError(f"MCP {label} failed: {str(e)}") from e


@cached_query(cache_ttl=MCP_TOOLS_CACHE_TTL, key_prefix="mcp_tools")
def list_tools(external_user_id):
    """``[{name, description, input_schema}]`` for the user's connected apps."""
    async def operation(session):
        return await session.list_tools()

    result = _call(external_user_id, operation, 'tools/list')
    return [
        {
            'name': tool.name,
            'description': tool.description or '',
            'input_schema': tool.inputSchema or {},
        }
        for tool in result.tools
    ]


def call_tool(external_user_id, name, arguments):
    """Run one tool and return its content blocks as plain dicts."""
    async def operation(session):
        return await session.call_tool(name, arguments or {})

    result = _call(external_user_id, operation, f'tools/call {name}')
    content = [block.model_dump(mode='json', exclude_none=True) for block in result.content]
    if result.isError:
        logger.warning(f"MCP tool {name} reported an error")
    return {'name': name, 'is_error': bool(result.isError), 'content': content}


def to_openai_tools(tools):
    return [
        {
            'type': 'function',
            'function': {
                'name': tool['name'],
                'description': tool['description'] or DEFAULT_TOOL_DESCRIPTION,
                'parameters': tool['input_schema'] or {'type': 'object', 'properties': {}},
            },
        }
        for tool in tools
    ]
