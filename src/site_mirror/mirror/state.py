from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from .urls import normalize_url


class CrawlState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXHAUSTED = "exhausted"
    BUDGET_REACHED = "budget_reached"
    DONE = "done"


@dataclass(slots=True)
class CrawlSession:
    """Mutable bookkeeping for one crawl, owned by the orchestrator."""

    max_pages: int
    frontier: deque[str] = field(default_factory=deque)
    visited_urls: set[str] = field(default_factory=set)
    pages_rendered: int = 0
    state: CrawlState = CrawlState.IDLE
    outcome: CrawlState = CrawlState.IDLE
    pages: dict[str, str] = field(default_factory=dict)
    resources: dict[str, str] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    @classmethod
    def seeded(cls, seed_url: str, max_pages: int) -> "CrawlSession":
        session = cls(max_pages=max_pages)
        session.enqueue(seed_url)
        return session

    def enqueue(self, url: str) -> bool:
        """Queue ``url`` unless already visited; duplicates in the queue are allowed."""

        if normalize_url(url) in self.visited_urls:
            return False
        self.frontier.append(url)
        return True

    def pop(self) -> str:
        return self.frontier.popleft()

    def is_visited(self, url: str) -> bool:
        return normalize_url(url) in self.visited_urls

    def mark_visited(self, *urls: str) -> None:
        for url in urls:
            self.visited_urls.add(normalize_url(url))

    @property
    def budget_left(self) -> bool:
        return self.pages_rendered < self.max_pages

    def remaining(self) -> int:
        """Distinct frontier entries that have not been visited yet."""

        pending = {normalize_url(url) for url in self.frontier}
        return len(pending - self.visited_urls)
