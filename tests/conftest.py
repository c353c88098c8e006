"""
Pytest configuration and shared fixtures.

Contains common test fixtures and setup for all test modules.
"""

import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from billguard.bootstrap import create_security_context
from billguard.config import SecuritySettings, Settings, StorageSettings
from billguard.core.audit import SecurityEventLogger
from billguard.core.codec import ObfuscationCodec
from billguard.core.context import SecurityContext
from billguard.core.metrics import MetricsCollector
from billguard.core.orchestrator import CollectingNotifier, ValidationOrchestrator
from billguard.core.storage import InMemoryBackend
from billguard.models.audit import AuditRecord

TEST_CODEC_KEY = "test-codec-key-2024"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def settings() -> Settings:
    """Test settings, independent of the environment and config files."""
    return Settings(
        environment="development",
        log_level="DEBUG",
        security=SecuritySettings(
            codec_key=TEST_CODEC_KEY,
            form_max_submissions=5,
            form_window_ms=60000,
            form_max_field_length=1000,
        ),
        storage=StorageSettings(backend="memory"),
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Metrics on a private registry."""
    return MetricsCollector()


@pytest.fixture
def audit_records() -> List[AuditRecord]:
    return []


@pytest.fixture
def audit(metrics: MetricsCollector, audit_records: List[AuditRecord]) -> SecurityEventLogger:
    """Audit logger that also collects every record."""
    return SecurityEventLogger(metrics=metrics, sinks=[audit_records.append])


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def orchestrator(audit: SecurityEventLogger, notifier: CollectingNotifier) -> ValidationOrchestrator:
    return ValidationOrchestrator(audit, notifier)


@pytest.fixture
def codec(audit: SecurityEventLogger) -> ObfuscationCodec:
    return ObfuscationCodec(TEST_CODEC_KEY, audit)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def context(
    settings: Settings,
    backend: InMemoryBackend,
    notifier: CollectingNotifier,
    audit_records: List[AuditRecord],
    fake_clock: FakeClock,
) -> SecurityContext:
    """Fully wired security context over an in-memory backend."""
    return create_security_context(
        settings,
        backend=backend,
        notifier=notifier,
        sinks=[audit_records.append],
        clock=fake_clock,
    )
