"""
GitHub API client infrastructure for gits.

Lists a user's repositories through /users/{user}/repos:
- Bearer token authentication when a token is configured
- Public listings work unauthenticated
- The whole listing is treated as a single page
"""

import logging
from typing import List, Optional

import requests

from ..config import RemoteSettings
from ..domain.repository import RawProject
from ..exit_codes import ConfigError, NetworkError
from .discovery import PAGE_SIZE, DiscoveryClient

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubClient(DiscoveryClient):
    """
    Client for the GitHub REST API.

    Example:
        client = GitHubClient(settings)          # public repos only
        client = GitHubClient(settings, token)   # include private repos
        projects = client.discover(settings.last_pull)
    """

    def __init__(self, settings: RemoteSettings, token: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: int = 30):
        """
        Initialize GitHubClient.

        Args:
            settings: Host settings; settings.user names the account to list
            token: Optional GitHub token
            session: requests session to reuse
            timeout: HTTP request timeout in seconds
        """
        super().__init__(settings, session=session, timeout=timeout)
        self.token = token
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': GITHUB_API_VERSION,
            'User-Agent': 'gits',
        })
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    def fetch_page(self, page: int) -> List[RawProject]:
        """
        Fetch the user's repositories, newest first.

        Only page 1 exists; any later page is reported empty without a
        request.

        Raises:
            ConfigError: If no user is configured for the host
            NetworkError: On transport failure or non-success status
        """
        if page > 1:
            return []
        if not self.settings.user:
            raise ConfigError(f"{self.host}: 'user' must be set to list GitHub repositories")

        url = f"{self.settings.api_url.rstrip('/')}/users/{self.settings.user}/repos"
        params = {
            'sort': 'created',
            'direction': 'desc',
            'per_page': PAGE_SIZE,
        }
        logger.info(f"Fetching repositories of {self.settings.user} from {self.host}...")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.JSONDecodeError as e:
            raise NetworkError(f"{self.host}: repository listing returned invalid JSON: {e}",
                               host=self.host) from e
        except requests.RequestException as e:
            raise NetworkError(f"{self.host}: repository listing failed: {e}", host=self.host) from e

        if not isinstance(data, list):
            raise NetworkError(f"{self.host}: repository listing is not a list", host=self.host)
        return self.convert_items(data, RawProject.from_github, page)
