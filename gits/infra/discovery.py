"""
Remote discovery protocol for gits.

Hosts list projects newest first. Discovery walks the pages in order and
stops as soon as a page's newest project is older than the host's
watermark, so an incremental sync only downloads what is new.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests

from ..config import HostKind, RemoteSettings
from ..domain.repository import RawProject
from ..exit_codes import ParseError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

# fetch_page(page_number) -> projects on that page, newest first
PageFetcher = Callable[[int], List[RawProject]]


def paginate(fetch_page: PageFetcher, watermark: Optional[datetime]) -> List[RawProject]:
    """
    Collect pages until the data is known to be synced already.

    Pages are requested strictly in order 1, 2, 3, ... and:
    - an empty page ends the listing;
    - a page whose first (newest) project is older than watermark ends the
      listing without contributing any of its projects;
    - otherwise the whole page is kept and the next page is requested.

    Args:
        fetch_page: Callable returning the projects of one page
        watermark: Creation time of the last synced project (None = all)

    Returns:
        Projects from every kept page, in listing order
    """
    projects: List[RawProject] = []
    page = 1
    while True:
        page_projects = fetch_page(page)
        if not page_projects:
            logger.debug(f"Projects page {page} is empty")
            break

        newest = page_projects[0].created_at
        if watermark is not None and newest < watermark:
            logger.info(
                f"Have latest: page {page} created_at {newest.isoformat()} "
                f"is older than last pull {watermark.isoformat()}"
            )
            break

        logger.debug(f"Found projects page {page} ({len(page_projects)} projects)")
        projects.extend(page_projects)
        page += 1

    return projects


class DiscoveryClient:
    """
    Base class for host listing clients.

    Subclasses implement fetch_page(), building projects with
    convert_items(); discover() applies the watermark protocol on top of it.
    After discover(), `skipped` counts the malformed items dropped from the
    pages that were kept.
    """

    def __init__(self, settings: RemoteSettings, session: Optional[requests.Session] = None,
                 timeout: int = 30):
        self.settings = settings
        self.timeout = timeout
        self.session = session or requests.Session()
        self.skipped = 0
        self._skipped_by_page: Dict[int, int] = {}

    @property
    def host(self) -> str:
        return self.settings.host

    def fetch_page(self, page: int) -> List[RawProject]:
        raise NotImplementedError

    def convert_items(
        self,
        items: List[Any],
        convert: Callable[[Mapping[str, Any]], RawProject],
        page: int
    ) -> List[RawProject]:
        """
        Build the projects of one page, dropping malformed items.

        The first item decides whether the page is kept, so it has to
        parse; any later item that is not an object or has a malformed
        created_at is logged and skipped.

        Raises:
            ParseError: If the page's first item is malformed
        """
        projects: List[RawProject] = []
        skipped = 0
        for index, item in enumerate(items):
            try:
                if not isinstance(item, Mapping):
                    raise ParseError(f"Listing item is not an object: {item!r}", str(item))
                projects.append(convert(item))
            except ParseError as e:
                if index == 0:
                    raise ParseError(
                        f"{self.host}: newest project on page {page} is malformed: {e}", e.value
                    ) from e
                skipped += 1
                logger.warning(f"{self.host}: skipping item {index} of page {page}: {e}")
        self._skipped_by_page[page] = skipped
        return projects

    def discover(self, watermark: Optional[datetime] = None) -> List[RawProject]:
        """
        List projects created since watermark.

        Raises:
            NetworkError: If any page request fails
            ParseError: If the newest project of a page is malformed
        """
        self._skipped_by_page = {}
        fetched: List[int] = []

        def fetch(page: int) -> List[RawProject]:
            fetched.append(page)
            return self.fetch_page(page)

        projects = paginate(fetch, watermark)
        # The last page fetched ended the walk and contributed nothing.
        kept = set(fetched[:-1])
        self.skipped = sum(n for page, n in self._skipped_by_page.items() if page in kept)
        logger.info(f"{self.host}: discovered {len(projects)} projects")
        return projects


def create_discovery_client(
    settings: RemoteSettings,
    token: Optional[str] = None,
    session: Optional[requests.Session] = None
) -> DiscoveryClient:
    """Pick the listing client for the host's kind."""
    from .github_client import GitHubClient
    from .gitlab_client import GitLabClient

    if settings.kind == HostKind.GITHUB:
        return GitHubClient(settings, token=token, session=session)
    return GitLabClient(settings, token=token or "", session=session)
