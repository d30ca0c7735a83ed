"""Read issues and pull requests from GitHub into a DiscussionContext."""

from __future__ import annotations

import logging
from datetime import datetime

from github import Github

from spec_gardener_core.context import strip_footer
from spec_gardener_core.models import ChangedFile, Comment, DiscussionContext

logger = logging.getLogger(__name__)

# GraphQL field names for the two item kinds.
ISSUE = "issue"
PULL_REQUEST = "pullRequest"

_EDIT_HISTORY_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    %s(number: $number) {
      userContentEdits(last: 100) {
        nodes {
          body
        }
      }
    }
  }
}
"""


def get_client(token: str) -> Github:
    return Github(token)


def get_repo(repo_name: str, token: str):
    return get_client(token).get_repo(repo_name)


def get_issue(repo, number: int):
    """Return the Issue object for ``number``; pull requests are issues too."""
    return repo.get_issue(number)


def _login(user) -> str:
    return getattr(user, "login", None) or "unknown"


def _timestamp(value) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value or "")


def _to_comments(raw_comments) -> list[Comment]:
    return [
        Comment(author=_login(c.user), body=c.body or "", created_at=_timestamp(c.created_at)) for c in raw_comments
    ]


def fetch_issue_context(repo, number: int) -> DiscussionContext:
    issue = repo.get_issue(number)
    return DiscussionContext(
        title=issue.title or "",
        body=strip_footer(issue.body or ""),
        author=_login(issue.user),
        comments=_to_comments(issue.get_comments()),
    )


def fetch_pull_request_context(repo, number: int) -> DiscussionContext:
    pull = repo.get_pull(number)
    files = [
        ChangedFile(
            filename=f.filename,
            status=f.status,
            additions=f.additions,
            deletions=f.deletions,
            changes=f.changes,
        )
        for f in pull.get_files()
    ]
    return DiscussionContext(
        title=pull.title or "",
        body=strip_footer(pull.body or ""),
        author=_login(pull.user),
        comments=_to_comments(pull.get_issue_comments()),
        changed_files=files,
    )


def fetch_edit_history(client: Github, repo_name: str, number: int, item_type: str = ISSUE) -> list[str | None]:
    """Return the body snapshots recorded for an item, oldest first.

    Raises on any API failure; callers on the reset path treat that as
    recoverable.
    """
    if item_type not in (ISSUE, PULL_REQUEST):
        raise ValueError(f"Unknown item type: {item_type!r}")

    owner, _, name = repo_name.partition("/")
    _, data = client.requester.graphql_query(
        _EDIT_HISTORY_QUERY % item_type,
        {"owner": owner, "repo": name, "number": number},
    )
    item = ((data.get("data") or {}).get("repository") or {}).get(item_type) or {}
    nodes = (item.get("userContentEdits") or {}).get("nodes") or []
    snapshots = [node.get("body") if node else None for node in nodes]
    logger.debug("Fetched %d edit snapshot(s) for #%d.", len(snapshots), number)
    return snapshots


def build_run_url(config: dict) -> str:
    """Link to the current workflow run, or to the Actions tab when unknown."""
    server_url = (config.get("server_url") or "https://github.com").rstrip("/")
    repository = config.get("repository") or ""
    run_id = config.get("run_id")
    if run_id:
        return f"{server_url}/{repository}/actions/runs/{run_id}"
    return f"{server_url}/{repository}/actions"
