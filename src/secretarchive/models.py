from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

KEY_SEPARATOR = "/"


def derive_backup_key(name: str, version_id: str) -> str:
    """Object key a secret version is archived under: ``<name>/<version_id>``."""
    return f"{name}{KEY_SEPARATOR}{version_id}"


class Decision(StrEnum):
    """Outcome of reconciling one secret against the bucket."""

    skipped = "skipped"
    uploaded = "uploaded"
    planned = "planned"


class ReconcileStage(StrEnum):
    """Per-secret progress; never shared across secrets."""

    fetched = "fetched"
    listed = "listed"
    skip = "skip"
    upload = "upload"
    done = "done"


@dataclass(frozen=True, slots=True)
class SecretRecord:
    """Current version of a secret, held for one reconciliation iteration."""

    name: str
    version_id: str
    payload: bytes | str = field(repr=False)

    @property
    def backup_key(self) -> str:
        return derive_backup_key(self.name, self.version_id)

    def payload_bytes(self) -> bytes:
        if isinstance(self.payload, str):
            return self.payload.encode("utf-8")
        return bytes(self.payload)


@dataclass(frozen=True, slots=True)
class SecretOutcome:
    """What happened to one secret during a run."""

    name: str
    decision: Decision | None = None
    key: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.decision is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "decision": str(self.decision) if self.decision else None,
            "key": self.key,
            "error": self.error,
        }


@dataclass(slots=True)
class BackupReport:
    """Ordered outcomes of a full reconciliation pass."""

    bucket: str
    dry_run: bool = False
    outcomes: list[SecretOutcome] = field(default_factory=list)

    def record(self, outcome: SecretOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, decision: Decision) -> int:
        return sum(1 for o in self.outcomes if o.decision == decision)

    @property
    def uploaded(self) -> int:
        return self.count(Decision.uploaded)

    @property
    def skipped(self) -> int:
        return self.count(Decision.skipped)

    @property
    def planned(self) -> int:
        return self.count(Decision.planned)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.failed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "dry_run": self.dry_run,
            "total": len(self.outcomes),
            "uploaded": self.uploaded,
            "skipped": self.skipped,
            "planned": self.planned,
            "failed": self.failed,
            "secrets": [o.to_dict() for o in self.outcomes],
        }
