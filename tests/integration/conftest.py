"""Shared fixtures for workflow tests against SQLite."""

import pytest

from partnerconnector.services.commission import (
    CommissionDistributionService,
    CommissionQueryManager,
    DatabaseNotificationDispatcher,
)


@pytest.fixture
def notifier(session_maker):
    """Notification dispatcher writing to the test database."""
    return DatabaseNotificationDispatcher(session_maker)


@pytest.fixture
def service(session, notifier):
    """Commission distribution service."""
    return CommissionDistributionService(session, notifier=notifier)


@pytest.fixture
def queries(session):
    """Commission query manager."""
    return CommissionQueryManager(session)
