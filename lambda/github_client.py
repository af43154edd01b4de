import http.client
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from aws_lambda_powertools import Logger

from errors import GitHubConnectionError, GitHubDecodeError

logger = Logger(child=True)

GITHUB_MEDIA_TYPE = "application/vnd.github.v3+json"


@dataclass(frozen=True)
class GitHubResponse:
    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class GitHubClient:
    """Minimal GitHub REST client covering the two calls this service makes."""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: Optional[str] = None,
        user_agent: str = "LabFilesFunction",
        timeout: float = 20,
    ):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.user_agent = user_agent
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "GitHubClient":
        return cls(
            api_url=settings.github_api_url,
            token=settings.github_token,
            user_agent=settings.github_user_agent,
            timeout=settings.github_timeout,
        )

    def get_contents(self, owner: str, repo: str, path: str = "") -> GitHubResponse:
        url = f"{self.api_url}/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path.strip('/'))}"
        return self._get(url)

    def list_repositories(self, identifier: str, endpoint: str = "users") -> GitHubResponse:
        url = f"{self.api_url}/{endpoint}/{quote(identifier)}/repos"
        return self._get(url)

    def _headers(self) -> dict:
        headers = {
            "Accept": GITHUB_MEDIA_TYPE,
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, url: str) -> GitHubResponse:
        req = urllib.request.Request(url, headers=self._headers())
        logger.debug("Calling GitHub", extra={"url": url})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return GitHubResponse(resp.getcode(), resp.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            # error statuses are returned, only transport failures raise
            try:
                body = e.read().decode("utf-8", errors="replace")
            except (http.client.HTTPException, OSError):
                body = ""
            return GitHubResponse(e.code, body)
        except urllib.error.URLError as e:
            raise GitHubConnectionError(url, e.reason) from e
        except (http.client.HTTPException, OSError) as e:
            # timeouts, resets and truncated bodies
            raise GitHubConnectionError(url, e) from e
        except UnicodeDecodeError as e:
            raise GitHubDecodeError(f"Failed to process GitHub response: {e}") from e
