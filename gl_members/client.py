"""GitLab API client for group membership, with pagination and retry support."""

from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any

import requests

from gl_members.models import (
    API_V4,
    DEFAULT_MAX_RETRIES,
    PER_PAGE,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
)


class GitLabClient:
    """Thin wrapper around GitLab REST API v4 group member endpoints."""

    def __init__(self, base_url: str, token: str, dry_run: bool = False, max_retries: int = DEFAULT_MAX_RETRIES):
        if max_retries < 0:
            raise ValueError(f"max_retries must be 0 or greater, got {max_retries}")
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}{API_V4}"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "PRIVATE-TOKEN": token,
                "Content-Type": "application/json",
            }
        )
        self.dry_run = dry_run
        self.max_retries = max_retries
        self.logger = logging.getLogger("gl-members")

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make an HTTP request, retrying transient failures up to max_retries times."""
        url = f"{self.api_url}{endpoint}"
        last_exception: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(
                    f"{method.upper()} {url} {kwargs.get('params', '')} {kwargs.get('json', '')} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                resp = self.session.request(method, url, **kwargs)

                if resp.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    wait_time = self._calculate_backoff(resp, attempt)
                    self.logger.warning(f"Retryable error {resp.status_code}, waiting {wait_time:.1f}s before retry")
                    time.sleep(wait_time)
                    continue

                # 404 and 409 are expected outcomes for the caller to interpret
                if resp.status_code >= 400 and resp.status_code not in (404, 409):
                    self.logger.error(f"API error {resp.status_code}: {resp.text[:500]}")
                resp.raise_for_status()
                return resp

            except requests.exceptions.ConnectionError as e:
                last_exception = e
                if attempt < self.max_retries:
                    wait_time = RETRY_BACKOFF_FACTOR * (2**attempt)
                    self.logger.warning(f"Connection error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                    continue
                raise

        if last_exception:
            raise last_exception
        raise RuntimeError("Unexpected retry loop exit")

    def _calculate_backoff(self, resp: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header for 429s."""
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass  # Fall through to exponential backoff
        return RETRY_BACKOFF_FACTOR * (2**attempt)

    def get(self, endpoint: str, params: dict | None = None) -> Any:
        return self._request("GET", endpoint, params=params).json()

    def post(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("POST", endpoint, json=data).json()

    def put(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("PUT", endpoint, json=data).json()

    def delete(self, endpoint: str, params: dict | None = None) -> requests.Response:
        return self._request("DELETE", endpoint, params=params)

    def paginate(self, endpoint: str, params: dict | None = None) -> list[dict]:
        """Fetch all pages of a paginated endpoint.

        Continues while the current page is below the X-Total-Pages value of the
        last response; a response without that header ends the listing.
        """
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)
        page = 1
        results = []
        while True:
            params["page"] = page
            resp = self._request("GET", endpoint, params=params)
            results.extend(resp.json())
            total_pages = int(resp.headers.get("x-total-pages") or page)
            if page >= total_pages:
                break
            page += 1
        return results

    # -- Group membership --

    def list_group_members(self, group_id: int | str) -> list[dict]:
        """List the direct members of a group across all pages."""
        return self.paginate(f"{self._group_endpoint(group_id)}/members")

    def add_group_member(
        self, group_id: int | str, user_id: int, access_level: int, expires_at: str | None = None
    ) -> dict:
        data: dict[str, Any] = {"user_id": user_id, "access_level": access_level}
        if expires_at:
            data["expires_at"] = expires_at
        return self.post(f"{self._group_endpoint(group_id)}/members", data=data)

    def edit_group_member(
        self, group_id: int | str, user_id: int, access_level: int, expires_at: str | None = None
    ) -> dict:
        # An empty expires_at clears the expiry on the GitLab side
        data = {"access_level": access_level, "expires_at": expires_at or ""}
        return self.put(f"{self._group_endpoint(group_id)}/members/{user_id}", data=data)

    def remove_group_member(self, group_id: int | str, user_id: int) -> requests.Response:
        return self.delete(f"{self._group_endpoint(group_id)}/members/{user_id}")

    # -- Resolution helpers --

    def normalize_group_ref(self, ref: int | str) -> str:
        """Reduce a group ID, path or GitLab web URL to an API group identifier."""
        return self._extract_path_from_url(str(ref))

    def _group_endpoint(self, group_id: int | str) -> str:
        encoded = urllib.parse.quote(str(group_id), safe="")
        return f"/groups/{encoded}"

    def _extract_path_from_url(self, url: str) -> str:
        """Extract the namespace path from a GitLab URL."""
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme and parsed.netloc:
            # Full URL: https://gitlab.com/myorg/myteam
            path = parsed.path.strip("/")
            for suffix in ("/-/", "/-"):
                if suffix in path:
                    path = path[: path.index(suffix)]
            if path.startswith("groups/"):
                path = path[len("groups/") :]
            return path
        else:
            return url.strip("/")
