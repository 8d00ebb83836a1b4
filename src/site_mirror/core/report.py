"""Summary data produced by a mirror run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict


@dataclass
class CrawlReport:
    """Structured outcome of a crawl, persisted next to the mirror."""

    seed_url: str = ""
    state: str = "idle"
    pages_rendered: int = 0
    remaining: int = 0
    pages: Dict[str, str] = field(default_factory=dict)
    resources: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def budget_reached(self) -> bool:
        return self.state == "budget_reached"

    def to_json(self) -> str:
        data = {
            "seed_url": self.seed_url,
            "state": self.state,
            "pages_rendered": self.pages_rendered,
            "remaining": self.remaining,
            "pages": dict(sorted(self.pages.items())),
            "resources": dict(sorted(self.resources.items())),
            "failures": dict(sorted(self.failures.items())),
        }
        return json.dumps(data, indent=4)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "CrawlReport":
        raw = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            seed_url=raw.get("seed_url", ""),
            state=raw.get("state", "idle"),
            pages_rendered=int(raw.get("pages_rendered", 0)),
            remaining=int(raw.get("remaining", 0)),
            pages=dict(raw.get("pages", {})),
            resources=dict(raw.get("resources", {})),
            failures=dict(raw.get("failures", {})),
        )
