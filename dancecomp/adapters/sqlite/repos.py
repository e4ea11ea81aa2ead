"""
SQLite engine store.

Implements the component ports on SQLite. Every write that must be atomic
runs in a BEGIN IMMEDIATE transaction on its own connection, so concurrent
writers (threads or processes) serialize on the database write lock and
the UNIQUE constraints catch anything that slips through.
"""

import json
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from dancecomp.components.event_safety import EventChangeSet, SafetyStats
from dancecomp.components.fee_schedule import load_schedule_from_record
from dancecomp.domain.entities import (
    FEE_FIELDS,
    DancerRegistrationState,
    Entry,
    EventRecord,
    FeeSchedule,
    Payment,
    Score,
)
from dancecomp.domain.errors import (
    ConcurrentTierConflictError,
    EntityNotFoundError,
    ItemNumberConflictError,
)

logger = logging.getLogger(__name__)

SCORE_FIELDS = ("technical", "musical", "performance", "styling", "overall_impression")


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _dec(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


def _is_lock_error(e: sqlite3.OperationalError) -> bool:
    return "locked" in str(e) or "busy" in str(e)


class _SQLiteUnitOfWork:
    def __init__(self, store: "SQLiteEngineStore", conn: sqlite3.Connection, event_id: str):
        self._store = store
        self._conn = conn
        self._event_id = event_id

    def load_stats(self) -> SafetyStats:
        return self._store._stats(self._conn, self._event_id)

    def apply(self, changes: EventChangeSet) -> None:
        columns: dict[str, Any] = {}
        if changes.judge_count is not None:
            columns["judge_count"] = changes.judge_count
        if changes.participation_mode is not None:
            columns["participation_mode"] = changes.participation_mode
        if changes.event_date is not None:
            columns["event_date"] = changes.event_date.isoformat()
        if changes.fee_changes:
            # Validate the merged schedule before writing any column
            row = self._conn.execute(
                "SELECT * FROM events WHERE id = ?", (self._event_id,)
            ).fetchone()
            merged = load_schedule_from_record({**row, **changes.fee_changes})
            for name in changes.fee_changes:
                value = getattr(merged, name)
                columns[name] = value if name == "currency" else _dec(value)
        if not columns:
            return

        assignments = ", ".join(f"{name} = ?" for name in columns)
        self._conn.execute(
            f"UPDATE events SET {assignments} WHERE id = ?",
            (*columns.values(), self._event_id),
        )


class SQLiteEngineStore:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _immediate(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    # --- Events / fee schedules ---

    def save_event(self, event: EventRecord) -> EventRecord:
        schedule = event.fee_schedule
        fee_values = [_dec(getattr(schedule, name)) for name in FEE_FIELDS]
        with self._immediate() as conn:
            conn.execute(
                f"""
                INSERT INTO events (
                    id, name, participation_mode, judge_count, status, event_date,
                    {", ".join(FEE_FIELDS)}, currency
                ) VALUES ({", ".join("?" for _ in range(7 + len(FEE_FIELDS)))})
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    participation_mode=excluded.participation_mode,
                    judge_count=excluded.judge_count,
                    status=excluded.status,
                    event_date=excluded.event_date,
                    {", ".join(f"{n}=excluded.{n}" for n in FEE_FIELDS)},
                    currency=excluded.currency
                """,
                (
                    event.id,
                    event.name,
                    event.participation_mode,
                    event.judge_count,
                    event.status,
                    event.event_date.isoformat() if event.event_date else None,
                    *fee_values,
                    schedule.currency,
                ),
            )
        return event

    def _map_event(self, row: dict[str, Any]) -> EventRecord:
        return EventRecord(
            id=row["id"],
            name=row["name"],
            fee_schedule=load_schedule_from_record(row),
            participation_mode=row["participation_mode"],
            judge_count=row["judge_count"],
            status=row["status"],
            event_date=date.fromisoformat(row["event_date"]) if row["event_date"] else None,
        )

    def get_event(self, event_id: str) -> EventRecord:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise EntityNotFoundError("Event", event_id)
        return self._map_event(row)

    def get_fee_schedule(self, event_id: str) -> FeeSchedule:
        return self.get_event(event_id).fee_schedule

    # --- Registration state ---

    def _map_registration(self, row: dict[str, Any]) -> DancerRegistrationState:
        return DancerRegistrationState(
            dancer_id=row["dancer_id"],
            event_id=row["event_id"],
            registration_fee_paid=bool(row["registration_fee_paid"]),
            registration_charged=bool(row["registration_charged"]),
            mastery_level=row["mastery_level"],
            charged_at=datetime.fromisoformat(row["charged_at"]) if row["charged_at"] else None,
            charged_entry_id=row["charged_entry_id"],
        )

    def get_registration_states(
        self,
        event_id: str,
        dancer_ids: Sequence[str],
    ) -> dict[str, DancerRegistrationState]:
        if not dancer_ids:
            return {}
        placeholders = ", ".join("?" for _ in dancer_ids)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"""
                SELECT * FROM dancer_registrations
                WHERE event_id = ? AND dancer_id IN ({placeholders})
                """,
                (event_id, *dancer_ids),
            ).fetchall()
        finally:
            conn.close()
        return {row["dancer_id"]: self._map_registration(row) for row in rows}

    def claim_registration(
        self,
        event_id: str,
        dancer_id: str,
        mastery_level: str,
        entry_id: str | None = None,
    ) -> bool:
        with self._immediate() as conn:
            row = conn.execute(
                """
                SELECT registration_fee_paid, registration_charged
                FROM dancer_registrations WHERE event_id = ? AND dancer_id = ?
                """,
                (event_id, dancer_id),
            ).fetchone()
            if row and (row["registration_fee_paid"] or row["registration_charged"]):
                return False
            conn.execute(
                """
                INSERT INTO dancer_registrations (
                    event_id, dancer_id, registration_fee_paid,
                    registration_charged, mastery_level, charged_at, charged_entry_id
                ) VALUES (?, ?, 0, 1, ?, ?, ?)
                ON CONFLICT(event_id, dancer_id) DO UPDATE SET
                    registration_charged=1,
                    mastery_level=excluded.mastery_level,
                    charged_at=excluded.charged_at,
                    charged_entry_id=excluded.charged_entry_id
                """,
                (event_id, dancer_id, mastery_level, datetime.now(UTC).isoformat(), entry_id),
            )
        logger.info("Registration charge claimed for dancer %s in event %s", dancer_id, event_id)
        return True

    def release_registration(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        with self._immediate() as conn:
            cursor = conn.execute(
                """
                UPDATE dancer_registrations
                SET registration_charged = 0, charged_at = NULL, charged_entry_id = NULL
                WHERE event_id = ? AND dancer_id = ? AND charged_entry_id = ?
                    AND registration_fee_paid = 0
                    AND NOT EXISTS (SELECT 1 FROM entries WHERE id = ?)
                """,
                (event_id, dancer_id, entry_id, entry_id),
            )
            released = cursor.rowcount > 0
        if released:
            logger.info(
                "Released registration charge for dancer %s (unsaved entry %s)",
                dancer_id,
                entry_id,
            )
        return released

    def mark_registration_paid(self, event_id: str, dancer_id: str) -> DancerRegistrationState:
        with self._immediate() as conn:
            conn.execute(
                """
                INSERT INTO dancer_registrations (event_id, dancer_id, registration_fee_paid)
                VALUES (?, ?, 1)
                ON CONFLICT(event_id, dancer_id) DO UPDATE SET registration_fee_paid=1
                """,
                (event_id, dancer_id),
            )
            row = conn.execute(
                "SELECT * FROM dancer_registrations WHERE event_id = ? AND dancer_id = ?",
                (event_id, dancer_id),
            ).fetchone()
        return self._map_registration(row)

    # --- Solo tier slots ---

    def count_solo_slots(self, event_id: str, dancer_id: str) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT COALESCE(MAX(tier), 0) AS tier FROM solo_slots
                WHERE event_id = ? AND dancer_id = ?
                """,
                (event_id, dancer_id),
            ).fetchone()
        finally:
            conn.close()
        return row["tier"]

    def claim_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> int:
        try:
            with self._immediate() as conn:
                row = conn.execute(
                    "SELECT tier FROM solo_slots WHERE entry_id = ?", (entry_id,)
                ).fetchone()
                if row:
                    return row["tier"]

                row = conn.execute(
                    """
                    SELECT COALESCE(MAX(tier), 0) AS tier FROM solo_slots
                    WHERE event_id = ? AND dancer_id = ?
                    """,
                    (event_id, dancer_id),
                ).fetchone()
                tier = row["tier"] + 1
                conn.execute(
                    """
                    INSERT INTO solo_slots (event_id, dancer_id, tier, entry_id, claimed_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (event_id, dancer_id, tier, entry_id, datetime.now(UTC).isoformat()),
                )
                return tier
        except sqlite3.IntegrityError as e:
            raise ConcurrentTierConflictError(event_id, dancer_id) from e
        except sqlite3.OperationalError as e:
            if _is_lock_error(e):
                raise ConcurrentTierConflictError(event_id, dancer_id) from e
            raise

    def release_solo_slot(self, event_id: str, dancer_id: str, entry_id: str) -> bool:
        with self._immediate() as conn:
            cursor = conn.execute(
                """
                DELETE FROM solo_slots
                WHERE event_id = ? AND dancer_id = ? AND entry_id = ?
                    AND NOT EXISTS (SELECT 1 FROM entries WHERE id = ?)
                """,
                (event_id, dancer_id, entry_id, entry_id),
            )
            released = cursor.rowcount > 0
        if released:
            logger.info("Released solo slot of unsaved entry %s", entry_id)
        return released

    # --- Entries ---

    def _map_entry(self, row: dict[str, Any]) -> Entry:
        return Entry(
            id=row["id"],
            event_id=row["event_id"],
            owner_id=row["owner_id"],
            participant_ids=json.loads(row["participant_ids"]),
            performance_type=row["performance_type"],
            mastery_level=row["mastery_level"],
            entry_type=row["entry_type"],
            calculated_fee=Decimal(row["calculated_fee"]),
            registration_fee=Decimal(row["registration_fee"]),
            registration_dancer_ids=json.loads(row["registration_dancer_ids"]),
            payment_status=row["payment_status"],
            approved=bool(row["approved"]),
            item_number=row["item_number"],
            submitted_at=datetime.fromisoformat(row["submitted_at"]),
        )

    def save_entry(self, entry: Entry) -> Entry:
        try:
            with self._immediate() as conn:
                conn.execute(
                    """
                    INSERT INTO entries (
                        id, event_id, owner_id, participant_ids, performance_type,
                        mastery_level, entry_type, calculated_fee, registration_fee,
                        registration_dancer_ids, payment_status, approved, item_number,
                        submitted_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        owner_id=excluded.owner_id,
                        participant_ids=excluded.participant_ids,
                        performance_type=excluded.performance_type,
                        mastery_level=excluded.mastery_level,
                        entry_type=excluded.entry_type,
                        calculated_fee=excluded.calculated_fee,
                        registration_fee=excluded.registration_fee,
                        registration_dancer_ids=excluded.registration_dancer_ids,
                        payment_status=excluded.payment_status,
                        approved=excluded.approved,
                        item_number=excluded.item_number
                    """,
                    (
                        entry.id,
                        entry.event_id,
                        entry.owner_id,
                        json.dumps(entry.participant_ids),
                        entry.performance_type,
                        entry.mastery_level,
                        entry.entry_type,
                        str(entry.calculated_fee),
                        str(entry.registration_fee),
                        json.dumps(entry.registration_dancer_ids),
                        entry.payment_status,
                        int(entry.approved),
                        entry.item_number,
                        entry.submitted_at.isoformat(),
                    ),
                )
                if entry.payment_status == "paid" and entry.registration_dancer_ids:
                    placeholders = ", ".join("?" for _ in entry.registration_dancer_ids)
                    conn.execute(
                        f"""
                        UPDATE dancer_registrations SET registration_fee_paid = 1
                        WHERE event_id = ? AND charged_entry_id = ?
                            AND dancer_id IN ({placeholders})
                        """,
                        (entry.event_id, entry.id, *entry.registration_dancer_ids),
                    )
        except sqlite3.IntegrityError as e:
            if "item_number" in str(e) and entry.item_number is not None:
                raise ItemNumberConflictError(entry.event_id, entry.item_number) from e
            raise
        return entry

    def load_entry(self, entry_id: str) -> Entry:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM entries WHERE id = ?", (entry_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise EntityNotFoundError("Entry", entry_id)
        return self._map_entry(row)

    def list_entries(self, event_id: str, dancer_id: str | None = None) -> list[Entry]:
        """Entries in the event, optionally those the dancer owns or dances in."""
        conn = self._get_conn()
        try:
            if dancer_id is None:
                rows = conn.execute(
                    "SELECT * FROM entries WHERE event_id = ? ORDER BY submitted_at",
                    (event_id,),
                ).fetchall()
            else:
                rows = conn.execute(
                    """
                    SELECT * FROM entries
                    WHERE event_id = ? AND (
                        owner_id = ?
                        OR EXISTS (
                            SELECT 1 FROM json_each(entries.participant_ids)
                            WHERE json_each.value = ?
                        )
                    )
                    ORDER BY submitted_at
                    """,
                    (event_id, dancer_id, dancer_id),
                ).fetchall()
        finally:
            conn.close()
        return [self._map_entry(row) for row in rows]

    # --- Payments ---

    def save_payment(self, payment: Payment) -> Payment:
        with self._immediate() as conn:
            conn.execute(
                """
                INSERT INTO payments (id, entry_id, event_id, status, reference, method, amount, date)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    status=excluded.status,
                    reference=excluded.reference,
                    method=excluded.method,
                    amount=excluded.amount,
                    date=excluded.date
                """,
                (
                    payment.id,
                    payment.entry_id,
                    payment.event_id,
                    payment.status,
                    payment.reference,
                    payment.method,
                    str(payment.amount),
                    payment.date.isoformat(),
                ),
            )
        return payment

    # --- Performances / scores ---

    def add_performance(self, performance_id: str, event_id: str, published: bool = False) -> None:
        with self._immediate() as conn:
            conn.execute(
                """
                INSERT INTO performances (id, event_id, scores_published) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET scores_published=excluded.scores_published
                """,
                (performance_id, event_id, int(published)),
            )

    def save_score(self, score: Score) -> Score:
        try:
            with self._immediate() as conn:
                conn.execute(
                    f"""
                    INSERT INTO scores (
                        performance_id, judge_id, {", ".join(SCORE_FIELDS)},
                        comments, submitted_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(performance_id, judge_id) DO UPDATE SET
                        {", ".join(f"{n}=excluded.{n}" for n in SCORE_FIELDS)},
                        comments=excluded.comments,
                        submitted_at=excluded.submitted_at
                    """,
                    (
                        score.performance_id,
                        score.judge_id,
                        *(str(getattr(score, n)) for n in SCORE_FIELDS),
                        score.comments,
                        score.submitted_at.isoformat(),
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise EntityNotFoundError("Performance", score.performance_id) from e
        return score

    def list_scores(self, performance_id: str) -> list[Score]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM scores WHERE performance_id = ? ORDER BY judge_id",
                (performance_id,),
            ).fetchall()
        finally:
            conn.close()
        return [
            Score(
                performance_id=row["performance_id"],
                judge_id=row["judge_id"],
                **{n: Decimal(row[n]) for n in SCORE_FIELDS},
                comments=row["comments"],
                submitted_at=datetime.fromisoformat(row["submitted_at"]),
            )
            for row in rows
        ]

    # --- Safety stats / guarded updates ---

    def _stats(self, conn: sqlite3.Connection, event_id: str) -> SafetyStats:
        event = conn.execute(
            "SELECT judge_count, status, participation_mode FROM events WHERE id = ?",
            (event_id,),
        ).fetchone()
        if not event:
            raise EntityNotFoundError("Event", event_id)

        entries = conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(entry_type = 'live'), 0) AS live,
                COALESCE(SUM(entry_type = 'virtual'), 0) AS virtual
            FROM entries WHERE event_id = ?
            """,
            (event_id,),
        ).fetchone()
        payments = conn.execute(
            """
            SELECT COUNT(*) AS c FROM entries e
            WHERE e.event_id = ? AND (
                e.payment_status = 'paid'
                OR EXISTS (
                    SELECT 1 FROM payments p
                    WHERE p.entry_id = e.id AND p.status NOT IN ('failed', 'cancelled')
                )
            )
            """,
            (event_id,),
        ).fetchone()
        scores = conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(p.scores_published), 0) AS published
            FROM scores s JOIN performances p ON p.id = s.performance_id
            WHERE p.event_id = ?
            """,
            (event_id,),
        ).fetchone()
        performances = conn.execute(
            "SELECT COUNT(*) AS c FROM performances WHERE event_id = ?", (event_id,)
        ).fetchone()

        return SafetyStats(
            entry_count=entries["total"],
            live_entry_count=entries["live"],
            virtual_entry_count=entries["virtual"],
            payment_count=payments["c"],
            score_count=scores["total"],
            published_score_count=scores["published"],
            performance_count=performances["c"],
            current_judge_count=event["judge_count"],
            event_status=event["status"],
            participation_mode=event["participation_mode"],
        )

    def safety_stats(self, event_id: str) -> SafetyStats:
        conn = self._get_conn()
        try:
            return self._stats(conn, event_id)
        finally:
            conn.close()

    @contextmanager
    def transaction(self, event_id: str) -> Iterator[_SQLiteUnitOfWork]:
        with self._immediate() as conn:
            exists = conn.execute("SELECT 1 FROM events WHERE id = ?", (event_id,)).fetchone()
            if not exists:
                raise EntityNotFoundError("Event", event_id)
            yield _SQLiteUnitOfWork(self, conn, event_id)

    # --- Item numbers ---

    def assigned_item_numbers(self, event_id: str) -> dict[int, str]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT item_number, id FROM entries
                WHERE event_id = ? AND item_number IS NOT NULL
                """,
                (event_id,),
            ).fetchall()
        finally:
            conn.close()
        return {row["item_number"]: row["id"] for row in rows}

    def set_item_number(self, entry_id: str, item_number: int) -> None:
        event_id = self.load_entry(entry_id).event_id
        try:
            with self._immediate() as conn:
                conn.execute(
                    "UPDATE entries SET item_number = ? WHERE id = ?",
                    (item_number, entry_id),
                )
        except sqlite3.IntegrityError as e:
            raise ItemNumberConflictError(event_id, item_number) from e
