"""
Backing store for the task collection (SQLite).

Implements the contract the board relies on: live snapshot subscription,
insert, partial field update and delete. Every committed write pushes the
complete, ordered collection to each live subscriber. Writes made through
another store on the same database file are picked up by poll(), which
compares the shared revision counter with the last one this store published.
"""
import logging
import sqlite3
import threading
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence

from .errors import NotFoundError, TransportError, ValidationError
from .schema import Task, TaskStatus, utc_now

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Sequence[Task]], None]

# Fields a partial update may touch
UPDATABLE_FIELDS = ("title", "status")


def make_task_id() -> str:
    """Generate a sortable unique task ID (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"task-{ts}-{rand}"


class Subscription:
    """Handle for one live snapshot subscription."""

    def __init__(self, store: "SQLiteTaskStore", listener: SnapshotListener):
        self._store = store
        self._listener = listener
        self.active = True

    def deliver(self, snapshot: Sequence[Task]) -> None:
        if self.active:
            self._listener(snapshot)

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self._store._remove_subscription(self)


class BackingStore(Protocol):
    """Interface the task board needs from its persistent store.

    Implementations assign identifiers and creation timestamps, and report
    missing identifiers with NotFoundError and storage failures with
    TransportError.
    """

    def subscribe(
        self,
        listener: SnapshotListener,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> Subscription:
        """Deliver the current snapshot now and after every change."""
        ...

    def insert(self, fields: Mapping[str, Any]) -> str:
        """Create a task. Returns the new identifier."""
        ...

    def update_fields(self, task_id: str, fields: Mapping[str, Any]) -> None:
        """Write only the given fields of an existing task."""
        ...

    def delete(self, task_id: str) -> None:
        """Remove a task."""
        ...


@contextmanager
def _connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Open a connection in WAL mode; storage errors become TransportError."""
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise TransportError(f"Cannot open {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise TransportError(f"Store error: {e}") from e
    finally:
        conn.close()


class SQLiteTaskStore:
    """SQLite-backed task collection with in-process change notification."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize store and create tables if needed."""
        if db_path is None:
            db_path = str(Path.home() / ".local" / "share" / "taskboard" / "tasks.db")
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # Serializes writes and the notifications that follow them
        self._lock = threading.RLock()
        self._subscriptions: List[Subscription] = []
        self._descending: Dict[int, bool] = {}
        self._watcher: Optional[threading.Thread] = None
        self._stop_watching = threading.Event()
        self._init_schema()
        self._seen_revision = self._read_revision()

    def _init_schema(self):
        """Create tables if they don't exist."""
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tasks (
                    task_id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'todo',
                    created_at TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")
            # Bumped by every committed write, from any process
            conn.execute("""
                CREATE TABLE IF NOT EXISTS store_meta (
                    key TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
            """)
            conn.execute("INSERT OR IGNORE INTO store_meta (key, value) VALUES ('revision', 0)")

    def _read_revision(self) -> int:
        with _connect(self.db_path) as conn:
            row = conn.execute("SELECT value FROM store_meta WHERE key = 'revision'").fetchone()
        return row[0] if row else 0

    def _bump_revision(self, conn: sqlite3.Connection) -> int:
        conn.execute("UPDATE store_meta SET value = value + 1 WHERE key = 'revision'")
        return conn.execute(
            "SELECT value FROM store_meta WHERE key = 'revision'"
        ).fetchone()[0]

    # ── Reads ────────────────────────────────────────────────────────────────

    def get(self, task_id: str) -> Optional[Task]:
        """Retrieve a task by ID."""
        with _connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM tasks WHERE task_id = ?", (task_id,)
            ).fetchone()
        return self._row_to_task(row) if row else None

    def list_all(self, descending: bool = True) -> List[Task]:
        """All tasks ordered by creation time (newest first by default)."""
        direction = "DESC" if descending else "ASC"
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT * FROM tasks ORDER BY created_at {direction}, rowid {direction}"
            ).fetchall()
        return [self._row_to_task(row) for row in rows]

    # ── Subscription ─────────────────────────────────────────────────────────

    def subscribe(
        self,
        listener: SnapshotListener,
        order_by: str = "created_at",
        descending: bool = True,
    ) -> Subscription:
        """Register a listener and deliver the current snapshot to it."""
        if order_by != "created_at":
            raise ValueError(f"Unsupported order key: {order_by}")
        with self._lock:
            sub = Subscription(self, listener)
            self._subscriptions.append(sub)
            self._descending[id(sub)] = descending
            try:
                sub.deliver(self.list_all(descending))
            except Exception:
                sub.unsubscribe()
                raise
            logger.info(f"Subscriber added ({len(self._subscriptions)} active)")
            return sub

    def _remove_subscription(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)
                self._descending.pop(id(sub), None)
                logger.info(f"Subscriber removed ({len(self._subscriptions)} active)")

    def _publish(self) -> None:
        """
        Push the full collection to every live subscriber.

        Runs after a write has committed, so failures here are logged rather
        than raised: the caller's command did succeed.
        """
        snapshots: Dict[bool, List[Task]] = {}
        for sub in list(self._subscriptions):
            descending = self._descending.get(id(sub), True)
            if descending not in snapshots:
                try:
                    snapshots[descending] = self.list_all(descending)
                except TransportError as e:
                    logger.error(f"Snapshot read failed after commit: {e}")
                    return
            try:
                sub.deliver(snapshots[descending])
            except Exception as e:
                logger.error(f"Snapshot listener failed: {e}")

    # ── External changes ─────────────────────────────────────────────────────

    def poll(self) -> bool:
        """
        Publish if another store wrote to the database since our last publish.

        Returns True when a snapshot was pushed.
        """
        with self._lock:
            revision = self._read_revision()
            if revision == self._seen_revision:
                return False
            self._seen_revision = revision
            logger.debug(f"External change detected (revision {revision})")
            self._publish()
            return True

    def start_watching(self, interval: float = 0.5) -> None:
        """Poll for external changes on a background thread."""
        if self._watcher is not None and self._watcher.is_alive():
            return
        self._stop_watching.clear()

        def _watch():
            while not self._stop_watching.wait(interval):
                try:
                    self.poll()
                except TransportError as e:
                    logger.error(f"Polling {self.db_path} failed: {e}")

        self._watcher = threading.Thread(target=_watch, name="taskboard-watcher", daemon=True)
        self._watcher.start()
        logger.info(f"Watching (polling, {interval}s): {self.db_path}")

    def stop_watching(self) -> None:
        """Stop the watcher thread. Safe to call more than once."""
        self._stop_watching.set()
        if self._watcher is not None:
            self._watcher.join(timeout=5)
            self._watcher = None

    # ── Commands ─────────────────────────────────────────────────────────────

    def insert(self, fields: Mapping[str, Any]) -> str:
        """Create a task. The store assigns the identifier and created_at."""
        title = _check_title(fields.get("title"))
        status = TaskStatus.parse(fields.get("status", TaskStatus.TODO))
        task_id = make_task_id()
        with self._lock:
            with _connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO tasks (task_id, title, status, created_at) VALUES (?, ?, ?, ?)",
                    (task_id, title, status.value, utc_now()),
                )
                revision = self._bump_revision(conn)
            self._seen_revision = revision
            self._publish()
        return task_id

    def update_fields(self, task_id: str, fields: Mapping[str, Any]) -> None:
        """Partial update: only the given fields are written."""
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {sorted(unknown)}")
        if not fields:
            return
        values = []
        assignments = []
        for name in UPDATABLE_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "status":
                value = TaskStatus.parse(value).value
            else:
                value = _check_title(value)
            assignments.append(f"{name} = ?")
            values.append(value)
        with self._lock:
            with _connect(self.db_path) as conn:
                cursor = conn.execute(
                    f"UPDATE tasks SET {', '.join(assignments)} WHERE task_id = ?",
                    (*values, task_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(task_id)
                revision = self._bump_revision(conn)
            self._seen_revision = revision
            self._publish()

    def delete(self, task_id: str) -> None:
        """Delete a task."""
        with self._lock:
            with _connect(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM tasks WHERE task_id = ?", (task_id,))
                if cursor.rowcount == 0:
                    raise NotFoundError(task_id)
                revision = self._bump_revision(conn)
            self._seen_revision = revision
            self._publish()

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        """Convert a database row to a Task."""
        return Task.from_dict(dict(row))


def _check_title(title: Any) -> str:
    """Titles are never persisted empty."""
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title must not be empty")
    return title
