"""Shared test fixtures and factories."""

import asyncio
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from truename.config.paths import ENV_VAR, get_truename_home
from truename.db.engine import Database
from truename.db.models import (
    Consent,
    ContextNameAssignment,
    Name,
    Profile,
    UserContext,
)
from truename.errors import StoreError
from truename.resolution import ResolutionEngine
from truename.store import SqlNameStore
from truename.store.types import (
    AuditEvent,
    ConsentRecord,
    ContextAssignmentRecord,
    PreferredNameRecord,
)

# =============================================================================
# Scenario identifiers
# =============================================================================

ALEX = "user-alex"
BOSS = "user-boss"  # holds an active consent for "Work Colleagues"
LAPSED = "user-lapsed"  # consent expired an hour ago
PENDING = "user-pending"  # consent never granted
STRANGER = "user-stranger"  # no consent at all
NOBODY = "user-nobody"  # profile without any names

WORK = "Work Colleagues"
GAMING = "Gaming Friends"
BOOK_CLUB = "Book Club"  # context without an assignment


# =============================================================================
# Environment
# =============================================================================


@pytest.fixture(autouse=True)
def truename_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point TRUENAME_HOME at a temporary directory for every test."""
    home = tmp_path / "truename-home"
    monkeypatch.setenv(ENV_VAR, str(home))
    monkeypatch.delenv("TRUENAME_DATABASE_URL", raising=False)
    monkeypatch.delenv("TRUENAME_LOG_LEVEL", raising=False)
    get_truename_home.cache_clear()
    yield home
    get_truename_home.cache_clear()


# =============================================================================
# Database Fixtures
# =============================================================================


async def seed_scenario(db: Database) -> None:
    """Insert the Alex / Alexander Smith / Al scenario."""
    now = datetime.now(UTC)
    async with db.session() as session:
        session.add_all(
            [
                Profile(id=ALEX, email="alex@example.com"),
                Profile(id=BOSS),
                Profile(id=LAPSED),
                Profile(id=PENDING),
                Profile(id=STRANGER),
                Profile(id=NOBODY),
            ]
        )
        session.add_all(
            [
                Name(
                    id="name-legal",
                    user_id=ALEX,
                    name_text="Alexander Smith",
                    name_type="LEGAL",
                ),
                Name(
                    id="name-preferred",
                    user_id=ALEX,
                    name_text="Alex",
                    name_type="PREFERRED",
                    is_preferred=True,
                ),
                Name(
                    id="name-nick",
                    user_id=ALEX,
                    name_text="Al",
                    name_type="NICKNAME",
                ),
            ]
        )
        session.add_all(
            [
                UserContext(id="ctx-work", user_id=ALEX, context_name=WORK),
                UserContext(id="ctx-gaming", user_id=ALEX, context_name=GAMING),
                UserContext(id="ctx-books", user_id=ALEX, context_name=BOOK_CLUB),
            ]
        )
        await session.flush()
        session.add_all(
            [
                ContextNameAssignment(
                    id="assign-work",
                    user_id=ALEX,
                    context_id="ctx-work",
                    name_id="name-legal",
                ),
                ContextNameAssignment(
                    id="assign-gaming",
                    user_id=ALEX,
                    context_id="ctx-gaming",
                    name_id="name-nick",
                ),
            ]
        )
        session.add_all(
            [
                Consent(
                    id="consent-boss",
                    granter_user_id=ALEX,
                    requester_user_id=BOSS,
                    context_id="ctx-work",
                    status="GRANTED",
                    granted_at=now - timedelta(days=1),
                ),
                Consent(
                    id="consent-lapsed",
                    granter_user_id=ALEX,
                    requester_user_id=LAPSED,
                    context_id="ctx-gaming",
                    status="GRANTED",
                    granted_at=now - timedelta(days=30),
                    expires_at=now - timedelta(hours=1),
                ),
                Consent(
                    id="consent-pending",
                    granter_user_id=ALEX,
                    requester_user_id=PENDING,
                    context_id="ctx-gaming",
                    status="PENDING",
                ),
            ]
        )


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Create a temporary test database."""
    db = Database(database_path=tmp_path / "test.db")
    await db.connect()
    await db.create_tables()

    yield db

    await db.disconnect()


@pytest.fixture
async def seeded_database(database: Database) -> Database:
    """Temporary database holding the example scenario."""
    await seed_scenario(database)
    return database


@pytest.fixture
def sql_store(seeded_database: Database) -> SqlNameStore:
    return SqlNameStore(seeded_database)


@pytest.fixture
def sql_engine(sql_store: SqlNameStore) -> ResolutionEngine:
    return ResolutionEngine(sql_store)


@pytest.fixture
def seeded_db_path(tmp_path: Path) -> Path:
    """SQLite file with the scenario, for sync callers (CLI tests)."""
    db_path = tmp_path / "cli.db"

    async def setup() -> None:
        db = Database(database_path=db_path)
        await db.connect()
        try:
            await db.create_tables()
            await seed_scenario(db)
        finally:
            await db.disconnect()

    asyncio.run(setup())
    return db_path


def audit_count(db_path: Path, target_id: str) -> int:
    """Count audit entries for a target in a SQLite file, from sync code."""

    async def count() -> int:
        db = Database(database_path=db_path)
        await db.connect()
        try:
            entries = await SqlNameStore(db).list_audit_entries(target_id, 1000)
            return len(entries)
        finally:
            await db.disconnect()

    return asyncio.run(count())


@pytest.fixture
def config_file(tmp_path: Path, seeded_db_path: Path) -> Path:
    """Config file pointing at the seeded database."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        f"""
[database]
path = "{seeded_db_path.as_posix()}"

[resolution]
anonymous_name = "Someone"
"""
    )
    return config_path


# =============================================================================
# In-memory stores
# =============================================================================


class FakeNameStore:
    """In-memory NameStore with per-operation failure injection.

    ``fail`` maps an operation name to the exception it raises.
    """

    def __init__(self) -> None:
        self.consents: dict[tuple[str, str], ConsentRecord] = {}
        self.assignments: dict[tuple[str, str], ContextAssignmentRecord] = {}
        self.preferred: dict[str, PreferredNameRecord] = {}
        self.audit: list[AuditEvent] = []
        self.calls: list[str] = []
        self.fail: dict[str, BaseException] = {}

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise self.fail[operation]

    def add_name(self, target_id: str, name_id: str, text: str) -> None:
        self.preferred[target_id] = PreferredNameRecord(
            name_id=name_id, name_text=text, name_type="PREFERRED"
        )

    def add_context(
        self,
        target_id: str,
        context_id: str,
        context_name: str,
        name_id: str,
        text: str,
    ) -> None:
        self.assignments[(target_id, context_name)] = ContextAssignmentRecord(
            name_id=name_id,
            name_text=text,
            context_id=context_id,
            context_name=context_name,
        )

    def add_consent(
        self,
        target_id: str,
        requester_id: str,
        consent_id: str,
        context_id: str,
        context_name: str,
    ) -> None:
        self.consents[(target_id, requester_id)] = ConsentRecord(
            consent_id=consent_id,
            context_id=context_id,
            context_name=context_name,
            granted_at=datetime.now(UTC),
        )

    async def get_active_consent(
        self, target_id: str, requester_id: str
    ) -> list[ConsentRecord]:
        self._check("get_active_consent")
        consent = self.consents.get((target_id, requester_id))
        return [consent] if consent else []

    async def get_context_assignment(
        self, target_id: str, context_name: str
    ) -> list[ContextAssignmentRecord]:
        self._check("get_context_assignment")
        assignment = self.assignments.get((target_id, context_name))
        return [assignment] if assignment else []

    async def get_preferred_name(self, target_id: str) -> list[PreferredNameRecord]:
        self._check("get_preferred_name")
        name = self.preferred.get(target_id)
        return [name] if name else []

    async def insert_audit_entry(self, entry: AuditEvent) -> None:
        self._check("insert_audit_entry")
        self.audit.append(entry)


@pytest.fixture
def fake_store() -> FakeNameStore:
    """In-memory store holding the example scenario."""
    store = FakeNameStore()
    store.add_name(ALEX, "name-preferred", "Alex")
    store.add_context(ALEX, "ctx-work", WORK, "name-legal", "Alexander Smith")
    store.add_context(ALEX, "ctx-gaming", GAMING, "name-nick", "Al")
    store.add_consent(ALEX, BOSS, "consent-boss", "ctx-work", WORK)
    return store


@pytest.fixture
def store_error() -> StoreError:
    return StoreError("connection refused", operation="test")


# =============================================================================
# CLI Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
