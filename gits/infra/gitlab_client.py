"""
GitLab API client infrastructure for gits.

Lists a GitLab host's projects, newest first, through the paginated
/projects endpoint. Authentication uses a static Private-Token header.
"""

import logging
from typing import List, Optional

import requests

from ..config import RemoteSettings
from ..domain.repository import RawProject
from ..exit_codes import NetworkError
from .discovery import PAGE_SIZE, DiscoveryClient

logger = logging.getLogger(__name__)


class GitLabClient(DiscoveryClient):
    """
    Client for the GitLab REST API.

    Example:
        client = GitLabClient(settings, token=os.environ["GITLAB_TOKEN"])
        projects = client.discover(settings.last_pull)
    """

    def __init__(self, settings: RemoteSettings, token: str,
                 session: Optional[requests.Session] = None, timeout: int = 30):
        super().__init__(settings, session=session, timeout=timeout)
        self.session.headers.update({
            'Private-Token': token,
        })

    def fetch_page(self, page: int) -> List[RawProject]:
        """
        Fetch one page of projects ordered by creation time, newest first.

        Raises:
            NetworkError: On transport failure, non-success status or
                a body that is not a JSON list
        """
        url = f"{self.settings.api_url.rstrip('/')}/projects"
        params = {
            'per_page': PAGE_SIZE,
            'page': page,
            'order_by': 'created_at',
            'sort': 'desc',
        }
        logger.info(f"Fetching {self.host} page {page}...")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.JSONDecodeError as e:
            # Subclass of RequestException, so it has to be caught first.
            raise NetworkError(
                f"{self.host}: projects page {page} returned invalid JSON: {e}",
                host=self.host,
            ) from e
        except requests.RequestException as e:
            raise NetworkError(
                f"{self.host}: request for projects page {page} failed "
                f"(check VPN connection?): {e}",
                host=self.host,
            ) from e

        if not isinstance(data, list):
            raise NetworkError(
                f"{self.host}: projects page {page} is not a list", host=self.host
            )
        return self.convert_items(data, RawProject.from_gitlab, page)
