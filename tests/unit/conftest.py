from unittest.mock import AsyncMock, MagicMock

import pytest

from replica_dashboard.infrastructure.admin.client import AdminApiClient


@pytest.fixture
def mock_admin_api():
    """Admin API client whose fetch() is an AsyncMock; set side_effect per test"""
    api = MagicMock(spec=AdminApiClient)
    api.fetch = AsyncMock()
    return api
