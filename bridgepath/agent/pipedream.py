"""
Pipedream Connect REST client: OAuth client-credentials tokens, connect
links and the app catalogue.
"""
import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests
from django.conf import settings
from django.core.cache import cache

from bridgepath.core.cache_utils import PIPEDREAM_TOKEN_CACHE_TTL
from bridgepath.core.exceptions import PipedreamError, ServiceNotConfigured

logger = logging.getLogger(__name__)

API_BASE = 'https://api.pipedream.com/v1'
CONNECT_PAGE_URL = 'https://pipedream.com/_static/connect.html'
ACCESS_TOKEN_CACHE_KEY = 'pipedream:access_token'
REQUEST_TIMEOUT = 30


def is_configured():
    return all([
        settings.PIPEDREAM_CLIENT_ID,
        settings.PIPEDREAM_CLIENT_SECRET,
        settings.PIPEDREAM_PROJECT_ID,
        settings.PIPEDREAM_ENVIRONMENT,
    ])


def get_access_token():
    """Client-credentials access token, cached until shortly before it expires."""
    token = cache.get(ACCESS_TOKEN_CACHE_KEY)
    if token:
        return token
    if not is_configured():
        raise ServiceNotConfigured('Pipedream credentials missing')

    try:
        response = requests.post(
            f'{API_BASE}/oauth/token',
            json={
                'grant_type': 'client_credentials',
                'client_id': settings.PIPEDREAM_CLIENT_ID,
                'client_secret': settings.PIPEDREAM_CLIENT_SECRET,
            },
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Pipedream token request failed: {str(e)}")
        raise PipedreamError(f"Pipedream token request failed: {str(e)}")

    if not response.ok:
        logger.error(f"Pipedream token error {response.status_code}: {response.text[:500]}")
        raise PipedreamError('Failed to obtain Pipedream access token', status_code=response.status_code)

    data = response.json()
    token = data.get('access_token')
    if not token:
        raise PipedreamError('Pipedream token response had no access_token')

    expires_in = int(data.get('expires_in') or 0)
    ttl = min(PIPEDREAM_TOKEN_CACHE_TTL, expires_in - 60) if expires_in > 60 else PIPEDREAM_TOKEN_CACHE_TTL
    cache.set(ACCESS_TOKEN_CACHE_KEY, token, ttl)
    return token


def _headers():
    return {
        'Authorization': f'Bearer {get_access_token()}',
        'Content-Type': 'application/json',
        'x-pd-environment': settings.PIPEDREAM_ENVIRONMENT,
    }


def with_app_param(url, app_slug):
    if not app_slug:
        return url
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    query['app'] = app_slug
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def create_connect_token(external_user_id, app_slug=None):
    """
    Create a short-lived Connect token for a user.

    Returns ``{'token', 'expires_at', 'connect_link_url'}``. The link carries
    ``app=<slug>`` when an app slug is given or configured.
    """
    app_url = settings.APP_URL
    body = {
        'external_user_id': str(external_user_id),
        'allowed_origins': settings.PIPEDREAM_ALLOWED_ORIGINS or [app_url],
        'success_redirect_uri': app_url,
        'error_redirect_uri': app_url,
    }
    try:
        response = requests.post(
            f'{API_BASE}/connect/{settings.PIPEDREAM_PROJECT_ID}/tokens',
            headers=_headers(),
            json=body,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Pipedream connect token request failed: {str(e)}")
        raise PipedreamError(f"Pipedream connect token request failed: {str(e)}")

    if not response.ok:
        logger.error(f"Pipedream connect token error {response.status_code}: {response.text[:500]}")
        raise PipedreamError(response.text or 'Failed to create connect link', status_code=response.status_code)

    data = response.json()
    token = data.get('token')
    if not isinstance(token, str) or not token:
        raise PipedreamError('Missing token in response')

    slug = app_slug or settings.PIPEDREAM_APP_SLUG
    link = data.get('connect_link_url')
    if not isinstance(link, str) or not link:
        link = f"{CONNECT_PAGE_URL}?{urlencode({'token': token, 'connectLink': 'true'})}"

    return {
        'token': token,
        'expires_at': data.get('expires_at'),
        'connect_link_url': with_app_param(link, slug),
    }


def list_apps(query=None):
    """Apps available to the project, optionally filtered by a search term."""
    params = {'q': query} if query else None
    try:
        response = requests.get(
            f'{API_BASE}/connect/apps',
            headers=_headers(),
            params=params,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error(f"Pipedream app listing failed: {str(e)}")
        raise PipedreamError(f"Pipedream app listing failed: {str(e)}")

    if not response.ok:
        raise PipedreamError(response.text or 'Failed to fetch apps', status_code=response.status_code)

    return [
        {
            'id': app.get('id'),
            'name': app.get('name'),
            'name_slug': app.get('name_slug'),
            'auth_type': app.get('auth_type'),
            'description': app.get('description'),
        }
        for app in response.json().get('data') or []
    ]
