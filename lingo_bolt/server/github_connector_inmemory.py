"""In-memory repository host for deterministic tests and dry runs."""

from __future__ import annotations

from dataclasses import dataclass, field

from lingo_bolt.server.github_connector import LabelAlreadyExistsError


@dataclass(frozen=True)
class PostedComment:
    repo: str
    issue_number: int
    body: str


@dataclass
class InMemoryRepositoryHost:
    comments: list[PostedComment] = field(default_factory=list)
    labels: dict[str, set[str]] = field(default_factory=dict)
    attached: dict[tuple[str, int], list[str]] = field(default_factory=dict)

    async def post_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        self.comments.append(PostedComment(repo=f"{owner}/{repo}", issue_number=issue_number, body=body))

    async def ensure_label(self, owner: str, repo: str, name: str) -> None:
        repo_labels = self.labels.setdefault(f"{owner}/{repo}", set())
        if name in repo_labels:
            raise LabelAlreadyExistsError(name)
        repo_labels.add(name)

    async def attach_label(self, owner: str, repo: str, issue_number: int, name: str) -> None:
        issue_labels = self.attached.setdefault((f"{owner}/{repo}", issue_number), [])
        if name not in issue_labels:
            issue_labels.append(name)

    def comments_for(self, repo: str, issue_number: int) -> list[str]:
        return [
            comment.body
            for comment in self.comments
            if comment.repo == repo and comment.issue_number == issue_number
        ]


class InMemoryHostProvider:
    """Hands every installation the same shared in-memory host."""

    def __init__(self, host: InMemoryRepositoryHost | None = None) -> None:
        self.host = host or InMemoryRepositoryHost()
        self.requested_installations: list[int] = []

    def for_installation(self, installation_id: int) -> InMemoryRepositoryHost:
        self.requested_installations.append(installation_id)
        return self.host
