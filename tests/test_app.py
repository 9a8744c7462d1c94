"""
Tests for the AdmissionAgentApp facade over the sample catalog.
"""
from pathlib import Path

import pytest

from admission_agent.app import AdmissionAgentApp
from admission_agent.config import AdmissionAgentConfig
from admission_agent.exceptions import ConfigurationError

CATALOG_DIR = Path(__file__).parent.parent / "data" / "catalog"


@pytest.fixture
def app():
    app = AdmissionAgentApp(AdmissionAgentConfig(catalog_dir=str(CATALOG_DIR)))
    app.initialize()
    return app


class TestAdmissionAgentApp:
    """Tests for AdmissionAgentApp."""

    def test_requires_initialize(self):
        """Test that using the app before initialize() raises."""
        app = AdmissionAgentApp(AdmissionAgentConfig(catalog_dir=str(CATALOG_DIR)))

        with pytest.raises(RuntimeError):
            app.chat("merhaba")

    def test_requires_catalog_dir(self):
        """Test that a missing catalog directory setting is a configuration error."""
        with pytest.raises(ConfigurationError):
            AdmissionAgentApp(AdmissionAgentConfig()).initialize()

    def test_chat_returns_plain_value(self, app):
        """Test that chat() returns a plain dict answer."""
        result = app.chat("ODTÜ bilgisayar mühendisliği için kaç net gerekir?", session_id="u1")

        assert result["intent"] == "net_calculation"
        assert result["entities"]["institution"] == "Orta Doğu Teknik Üniversitesi"
        assert result["calculation"]["basedOnYear"] == 2024
        assert result["calculation"]["requiredNets"]

    def test_follow_up_in_session(self, app):
        """Test that a follow-up reuses the session's slots."""
        app.chat("ODTÜ bilgisayar mühendisliği için kaç net gerekir?", session_id="u1")

        result = app.chat("peki Boğaziçi?", session_id="u1")

        assert result["entities"]["institution"] == "Boğaziçi Üniversitesi"
        assert result["entities"]["program"] == "Bilgisayar Mühendisliği"

    def test_reload_bumps_index_version(self, app):
        """Test that reload() swaps in a new index."""
        version = app.service.resolver.index.version

        app.reload()

        assert app.service.resolver.index.version == version + 1
