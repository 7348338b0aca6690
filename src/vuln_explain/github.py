"""GitHub repository sampler.

Resolves a repository URL to owner/name, lists the default branch tree and
assembles a bounded text bundle of source-file previews for the model.
"""

import asyncio
import logging
import re
from dataclasses import dataclass

import httpx

from .config import DEFAULT_GITHUB_API_URL, DEFAULT_GITHUB_RAW_URL
from .errors import InvalidUrlError, UpstreamError

logger = logging.getLogger(__name__)

GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/\s]+)/([^/\s?#]+)")
CODE_FILE_PATTERN = re.compile(r"\.(js|ts|py|java|cpp|c|go|rs|rb|php)$")
UNAVAILABLE_PLACEHOLDER = "[Unable to fetch content]"
UNEXPECTED_RESPONSE = "Failed to fetch GitHub repository: unexpected API response"


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def html_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}"


def parse_github_url(url: str) -> RepoRef:
    """Extract owner and repository name from a github.com URL.

    Raises:
        InvalidUrlError: The URL has no github.com/<owner>/<repo> segments.
    """
    match = GITHUB_URL_PATTERN.search(url or "")
    if not match:
        raise InvalidUrlError("Invalid GitHub repository URL")

    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise InvalidUrlError("Invalid GitHub repository URL")
    return RepoRef(owner=owner, repo=repo)


def select_code_files(tree: list[dict], limit: int) -> list[str]:
    """First `limit` blob paths with a source-code extension, in listing order."""
    paths = []
    for item in tree:
        if len(paths) >= limit:
            break
        path = item.get("path", "")
        if item.get("type", "blob") != "blob" or not isinstance(path, str):
            continue
        if CODE_FILE_PATTERN.search(path):
            paths.append(path)
    return paths


def _default_branch(body) -> str:
    branch = body.get("default_branch") if isinstance(body, dict) else None
    if not isinstance(branch, str) or not branch:
        raise UpstreamError(UNEXPECTED_RESPONSE)
    return branch


def _tree_entries(body) -> list[dict]:
    tree = body.get("tree", []) if isinstance(body, dict) else None
    if not isinstance(tree, list):
        raise UpstreamError(UNEXPECTED_RESPONSE)
    return [item for item in tree if isinstance(item, dict)]


class GitHubFetcher:
    """Fetches a sample of a repository's source files through the GitHub API."""

    def __init__(
        self,
        token: str | None = None,
        api_url: str = DEFAULT_GITHUB_API_URL,
        raw_url: str = DEFAULT_GITHUB_RAW_URL,
        max_files: int = 10,
        preview_chars: int = 500,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.raw_url = raw_url.rstrip("/")
        self.max_files = max_files
        self.preview_chars = preview_chars
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def fetch_repository_sample(self, url: str) -> str:
        """Build the text bundle for a repository URL.

        Raises:
            InvalidUrlError: Before any network call, if the URL is not a GitHub repo URL.
            UpstreamError: Repository metadata or the file tree could not be fetched.
        """
        ref = parse_github_url(url)

        async with httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                repo_res = await client.get(f"{self.api_url}/repos/{ref.full_name}")
                repo_res.raise_for_status()
                default_branch = _default_branch(repo_res.json())

                tree_res = await client.get(
                    f"{self.api_url}/repos/{ref.full_name}/git/trees/{default_branch}",
                    params={"recursive": "1"},
                )
                tree_res.raise_for_status()
                tree = _tree_entries(tree_res.json())
            except httpx.HTTPStatusError as e:
                logger.error(f"GitHub API returned {e.response.status_code} for {ref.full_name}")
                raise UpstreamError(
                    f"Failed to fetch GitHub repository: {e.response.status_code} "
                    f"{e.response.reason_phrase}"
                ) from e
            except httpx.HTTPError as e:
                logger.error(f"GitHub API request failed for {ref.full_name}: {e}")
                raise UpstreamError(f"Failed to fetch GitHub repository: {e}") from e
            except ValueError as e:
                raise UpstreamError(UNEXPECTED_RESPONSE) from e

            code_files = select_code_files(tree, self.max_files)
            sections = await asyncio.gather(
                *(self._file_section(client, ref, default_branch, path) for path in code_files)
            )

        content = f"# GitHub Repository Security Audit: {ref.full_name}\n\n"
        content += f"Default Branch: {default_branch}\n"
        content += f"Repository URL: {ref.html_url}\n\n"
        content += f"## Found {len(code_files)} Code Files:\n\n"
        content += "".join(sections)
        return content

    async def _file_section(
        self,
        client: httpx.AsyncClient,
        ref: RepoRef,
        branch: str,
        path: str,
    ) -> str:
        """Preview of one file; a failed fetch becomes a placeholder line."""
        try:
            res = await client.get(f"{self.raw_url}/{ref.full_name}/{branch}/{path}")
            res.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Could not fetch {path} from {ref.full_name}: {e}")
            return f"### {path}\n{UNAVAILABLE_PLACEHOLDER}\n\n"

        preview = res.text[: self.preview_chars]
        return f"### {path}\n```\n{preview}\n...\n```\n\n"
