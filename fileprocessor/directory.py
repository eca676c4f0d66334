"""
User directory client.

Mirrors user records into an external Convex deployment through its HTTP
API. The local user table stays the source of truth for authentication;
the directory only receives new users and last-login timestamps.
"""
import logging

import requests

logger = logging.getLogger(__name__)


class DirectoryError(Exception):
    """Raised when the directory rejects a mutation or cannot be reached."""


class UserDirectoryClient:

    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _mutation(self, path, args):
        try:
            resp = self.session.post(
                f"{self.base_url}/api/mutation",
                json={'path': path, 'args': args, 'format': 'json'},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectoryError(f"{path} failed: {e}") from e

        if body.get('status') != 'success':
            raise DirectoryError(f"{path} failed: {body.get('errorMessage', 'unknown error')}")
        return body.get('value')

    def create_user(self, name, email, role, last_login):
        """Insert a user document and return its id."""
        return self._mutation('users:create', {
            'name': name,
            'email': email,
            'role': role,
            'lastLogin': last_login,
        })

    def update_last_login(self, directory_id, last_login):
        self._mutation('users:updateLastLogin', {
            'id': directory_id,
            'lastLogin': last_login,
        })


def get_directory(app):
    """Directory client configured for ``app``, or None when CONVEX_URL is unset."""
    if 'user_directory' not in app.extensions:
        url = app.config.get('CONVEX_URL')
        app.extensions['user_directory'] = UserDirectoryClient(url) if url else None
        if url:
            logger.info("User directory enabled at %s", url)
    return app.extensions['user_directory']
