from __future__ import annotations

import logging

import httpx

from pluckmd.exceptions import FetchError, UnrecognizedSourceError

logger = logging.getLogger(__name__)

GITHUB_HOST = "github.com"
GITHUB_RAW_HOST = "raw.githubusercontent.com"
_HTTPS_PREFIX = "https://"
_BLOB_PATH = "/blob/"
_TREE_PATH = "/tree/"


def to_raw_github_url(uri: str) -> str:
    """Rewrite a browsable GitHub URL into its raw-content equivalent.

    ``https://github.com/user/repo/blob/main/file.go`` becomes
    ``https://raw.githubusercontent.com/user/repo/main/file.go``. Any scheme
    (or none) is accepted in front of the host; URLs already on the raw host
    are normalized the same way.
    """
    raw_url = uri.strip().removesuffix("/")

    host_index = raw_url.find(GITHUB_HOST)
    raw_host_index = raw_url.find(GITHUB_RAW_HOST)
    if host_index != -1:
        path = raw_url[host_index + len(GITHUB_HOST) :]
    elif raw_host_index != -1:
        path = raw_url[raw_host_index + len(GITHUB_RAW_HOST) :]
    else:
        raise UnrecognizedSourceError(f"'{raw_url}' is not a GitHub URL", uri=uri, component="github fetcher")

    raw_url = _HTTPS_PREFIX + GITHUB_RAW_HOST + path
    raw_url = raw_url.replace(_BLOB_PATH, "/", 1)
    return raw_url.replace(_TREE_PATH, "/", 1)


class GitHubFetcher:
    """Fetch files from GitHub over HTTPS.

    The ``httpx.AsyncClient`` is owned by the caller so one connection pool is
    shared across the whole run.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._token = token

    async def fetch(self, uri: str) -> bytes:
        url = to_raw_github_url(uri)
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else {}

        logger.debug("GET %s", url)
        try:
            response = await self._client.get(url, headers=headers, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"fetching {url}: HTTP {exc.response.status_code}", uri=uri, component="github fetcher"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"fetching {url}: {exc}", uri=uri, component="github fetcher") from exc
        return response.content
