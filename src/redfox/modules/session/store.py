"""SessionStore: session history in SQLite."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from redfox.db.init import DB_FILENAME, init_db
from redfox.db.models import ScanSessionRecord
from redfox.modules.results import Session

logger = logging.getLogger(__name__)


class SessionStore:
    """Records scan sessions and their request parameters."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path).expanduser()
        init_db(self.db_path)
        self.engine = create_engine(f"sqlite:///{self.db_path}", echo=False)
        session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.session = session_factory()

    @classmethod
    def in_results_dir(cls, results_dir: Path) -> SessionStore:
        return cls(Path(results_dir).expanduser() / DB_FILENAME)

    def close(self) -> None:
        self.session.close()
        self.engine.dispose()

    def __enter__(self) -> SessionStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def save(
        self,
        session: Session,
        request: dict[str, Any] | None = None,
        report_path: Path | None = None,
    ) -> ScanSessionRecord:
        """Insert or update the row for ``session``."""
        record = self.session.get(ScanSessionRecord, session.id)
        if record is None:
            record = ScanSessionRecord(id=session.id, created_at=session.created_at)
            self.session.add(record)

        tallies = session.tallies
        record.target = session.target.url
        record.mode = session.mode.value
        record.policy = session.policy
        record.state = session.state.value
        record.stop_reason = session.stop_reason
        record.error = session.error
        record.attempted = tallies.attempted
        record.succeeded = tallies.succeeded
        record.failed = tallies.failed
        record.errored = tallies.errored
        record.total_candidates = session.total_candidates
        record.resume_offset = session.resume_offset
        record.started_at = session.started_at
        record.finished_at = session.finished_at
        if request is not None:
            record.request = json.dumps(request)
        if report_path is not None:
            record.report_path = str(report_path)

        self.session.commit()
        logger.debug("Stored session %s (%s)", session.id, session.state)
        return record

    def get(self, session_id: str) -> ScanSessionRecord | None:
        """Look up a session by id or unique id prefix."""
        record = self.session.get(ScanSessionRecord, session_id)
        if record is not None:
            return record
        matches = (
            self.session.query(ScanSessionRecord)
            .filter(ScanSessionRecord.id.startswith(session_id))
            .limit(2)
            .all()
        )
        return matches[0] if len(matches) == 1 else None

    def list_recent(self, limit: int = 20) -> list[ScanSessionRecord]:
        records = (
            self.session.query(ScanSessionRecord)
            .order_by(ScanSessionRecord.created_at.desc())
            .limit(limit)
            .all()
        )
        return records

    def request_params(self, record: ScanSessionRecord) -> dict[str, Any]:
        if not record.request:
            return {}
        return json.loads(record.request)
