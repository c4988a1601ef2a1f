"""Linear GraphQL client used to read issues and write comments back."""

from __future__ import annotations

import dataclasses
import os
import typing as typ

import httpx

from .errors import LinearAPIError, LinearConfigError, LinearResponseShapeError
from .models import IssueComment, IssueRef, Viewer


class IssueTracker(typ.Protocol):
    """Interface for the issue-tracker calls made by the relay."""

    async def create_comment(self, issue_id: str, body: str) -> str:
        """Post ``body`` as a comment and return the new comment id."""
        ...

    async def assign_issue(self, issue_id: str, assignee_id: str) -> None:
        """Set the assignee of ``issue_id``."""
        ...

    async def get_viewer(self) -> Viewer:
        """Return the identity the API key authenticates as."""
        ...

    async def list_comments(self, issue_id: str) -> list[IssueComment]:
        """Return the comments currently on ``issue_id``."""
        ...

    async def list_assigned_issues(self, *, limit: int = 50) -> list[IssueRef]:
        """Return issues assigned to the viewer."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class LinearGraphQLConfig:
    """Configuration for the Linear GraphQL API client."""

    api_key: str
    endpoint: str = "https://api.linear.app/graphql"
    timeout_s: float = 20.0
    user_agent: str = "niabridge/0.1"

    @classmethod
    def from_env(cls) -> LinearGraphQLConfig:
        """Build configuration using the `LINEAR_API_KEY` env var."""
        api_key = os.environ.get("LINEAR_API_KEY", "").strip()
        if not api_key:
            raise LinearConfigError.missing_api_key()
        return cls(api_key=api_key)


_COMMENT_CREATE_MUTATION = """
mutation($input: CommentCreateInput!) {
  commentCreate(input: $input) {
    success
    comment { id }
  }
}
"""

_ISSUE_UPDATE_MUTATION = """
mutation($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) {
    success
  }
}
"""

_VIEWER_QUERY = """
query {
  viewer { id name }
}
"""

_ISSUE_COMMENTS_QUERY = """
query($id: String!, $first: Int!) {
  issue(id: $id) {
    comments(first: $first) {
      nodes { id body }
    }
  }
}
"""

_ASSIGNED_ISSUES_QUERY = """
query($first: Int!) {
  viewer {
    assignedIssues(first: $first) {
      nodes {
        id
        title
        description
        assignee { id }
        labels { nodes { name } }
      }
    }
  }
}
"""

_COMMENT_PAGE_SIZE = 100


def _traverse_path(data: dict[str, typ.Any], path: list[str]) -> object:
    """Traverse a nested dictionary path, validating each step."""
    node: object = data
    for key in path:
        if not isinstance(node, dict):
            raise LinearResponseShapeError.missing(".".join(path))
        node = node.get(key)
    return node


def _nodes_at(data: dict[str, typ.Any], path: list[str]) -> list[dict[str, typ.Any]]:
    nodes = _traverse_path(data, [*path, "nodes"])
    if not isinstance(nodes, list):
        raise LinearResponseShapeError.missing(".".join([*path, "nodes"]))
    return [node for node in nodes if isinstance(node, dict)]


def _require_success(data: dict[str, typ.Any], mutation: str) -> dict[str, typ.Any]:
    result = data.get(mutation)
    if not isinstance(result, dict):
        raise LinearResponseShapeError.missing(mutation)
    if result.get("success") is not True:
        raise LinearAPIError.mutation_failed(mutation)
    return result


def _label_names(labels: object) -> frozenset[str]:
    if not isinstance(labels, dict):
        return frozenset()
    nodes = labels.get("nodes")
    if not isinstance(nodes, list):
        return frozenset()
    return frozenset(
        node["name"]
        for node in nodes
        if isinstance(node, dict) and isinstance(node.get("name"), str)
    )


def _issue_from_node(node: dict[str, typ.Any]) -> IssueRef | None:
    issue_id = node.get("id")
    title = node.get("title")
    if not isinstance(issue_id, str) or not isinstance(title, str):
        return None
    description = node.get("description")
    assignee = node.get("assignee")
    assignee_id = assignee.get("id") if isinstance(assignee, dict) else None
    return IssueRef(
        id=issue_id,
        title=title,
        description=description if isinstance(description, str) else None,
        labels=_label_names(node.get("labels")),
        assignee_id=assignee_id if isinstance(assignee_id, str) else None,
    )


def _parse_graphql_payload(payload: object) -> dict[str, typ.Any]:
    if not isinstance(payload, dict):
        raise LinearResponseShapeError.missing("<root>")
    errors = payload.get("errors")
    if errors:
        raise LinearAPIError.graphql_errors(errors)
    data = payload.get("data")
    if not isinstance(data, dict):
        raise LinearResponseShapeError.missing("data")
    return data


class LinearGraphQLClient:
    """Linear GraphQL implementation of :class:`IssueTracker`."""

    def __init__(
        self,
        config: LinearGraphQLConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.api_key.strip():
            raise LinearConfigError.empty_api_key()

        self._config = config
        self._owns_client = http_client is None
        # Linear personal API keys are sent without a "Bearer" prefix.
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": config.api_key,
                "User-Agent": config.user_agent,
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def create_comment(self, issue_id: str, body: str) -> str:
        """Post a markdown comment on an issue and return its id."""
        data = await self._graphql(
            _COMMENT_CREATE_MUTATION,
            {"input": {"issueId": issue_id, "body": body}},
        )
        result = _require_success(data, "commentCreate")
        comment_id = _traverse_path(result, ["comment", "id"])
        if not isinstance(comment_id, str):
            raise LinearResponseShapeError.missing("commentCreate.comment.id")
        return comment_id

    async def assign_issue(self, issue_id: str, assignee_id: str) -> None:
        """Assign an issue to the given user."""
        data = await self._graphql(
            _ISSUE_UPDATE_MUTATION,
            {"id": issue_id, "input": {"assigneeId": assignee_id}},
        )
        _require_success(data, "issueUpdate")

    async def get_viewer(self) -> Viewer:
        """Return the user the API key belongs to."""
        data = await self._graphql(_VIEWER_QUERY, {})
        viewer_id = _traverse_path(data, ["viewer", "id"])
        if not isinstance(viewer_id, str):
            raise LinearResponseShapeError.missing("viewer.id")
        name = _traverse_path(data, ["viewer", "name"])
        return Viewer(id=viewer_id, name=name if isinstance(name, str) else None)

    async def list_comments(self, issue_id: str) -> list[IssueComment]:
        """Return up to one page of comments on an issue."""
        data = await self._graphql(
            _ISSUE_COMMENTS_QUERY,
            {"id": issue_id, "first": _COMMENT_PAGE_SIZE},
        )
        return [
            IssueComment(id=node["id"], body=node["body"])
            for node in _nodes_at(data, ["issue", "comments"])
            if isinstance(node.get("id"), str) and isinstance(node.get("body"), str)
        ]

    async def list_assigned_issues(self, *, limit: int = 50) -> list[IssueRef]:
        """Return issues assigned to the viewer, most recent first."""
        data = await self._graphql(_ASSIGNED_ISSUES_QUERY, {"first": limit})
        issues: list[IssueRef] = []
        for node in _nodes_at(data, ["viewer", "assignedIssues"]):
            issue = _issue_from_node(node)
            if issue is not None:
                issues.append(issue)
        return issues

    async def _graphql(
        self, query: str, variables: dict[str, typ.Any]
    ) -> dict[str, typ.Any]:
        """Execute a GraphQL document and return the validated data field."""
        try:
            response = await self._client.post(
                self._config.endpoint,
                json={"query": query, "variables": variables},
            )
        except httpx.TimeoutException as exc:
            raise LinearAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise LinearAPIError.network_error(str(exc)) from exc
        if not response.is_success:
            raise LinearAPIError.http_error(response.status_code)
        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise LinearResponseShapeError.missing("<json body>") from exc
        return _parse_graphql_payload(payload_raw)
