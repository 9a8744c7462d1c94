"""
Public application facade for Admission Agent Service.

This is the single stable entry point for the library.
All internal structure can change freely, but this API remains stable.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import AdmissionAgentConfig
from .context import ConversationStore
from .data_loader import CatalogDataLoader
from .exceptions import ConfigurationError
from .schemas import QueryResponse
from .service import AdmissionAgentService


class AdmissionAgentApp:
    """
    Public application facade for Admission Agent Service.

    This is the single stable entry point for clients.
    All dependency wiring and catalog loading is encapsulated here.

    Usage:
        config = AdmissionAgentConfig(catalog_dir="data/catalog")
        app = AdmissionAgentApp(config)
        app.initialize()
        result = app.chat("ODTÜ bilgisayar mühendisliği için kaç net gerekir?")
    """

    def __init__(self, config: AdmissionAgentConfig, store: Optional[ConversationStore] = None):
        """
        Initialize the application facade.

        :param config: AdmissionAgentConfig instance
        :param store: Optional session store (in-memory if None)
        """
        self._config = config
        self._store = store
        self._service: Optional[AdmissionAgentService] = None

    @property
    def service(self) -> AdmissionAgentService:
        if not self._service:
            raise RuntimeError("App not initialized. Call initialize() first.")
        return self._service

    def initialize(self) -> None:
        """
        Load the catalog and wire the service.

        Relative catalog paths are resolved against the project directory,
        not the caller's working directory. Call once before chat().
        """
        if self._service:
            return

        catalog_dir = self._resolve_catalog_dir()
        catalog = CatalogDataLoader(catalog_dir).load_catalog()
        self._service = AdmissionAgentService(self._config, catalog, store=self._store)

    def reload(self) -> None:
        """Re-read the catalog directory and swap the index."""
        catalog = CatalogDataLoader(self._resolve_catalog_dir()).load_catalog()
        self.service.reload_catalog(catalog)

    def ask(self, message: str, session_id: str = "default") -> QueryResponse:
        """
        Send a message and get the structured response object.

        :raises RuntimeError: if initialize() has not been called
        """
        return self.service.handle_message(message, session_id)

    def chat(self, message: str, session_id: str = "default") -> Dict[str, Any]:
        """
        Send a message and get the plain structured value.

        :param message: User message
        :param session_id: Session identifier
        :return: Dict with intent, entities, calculation/clarification/error and suggestions
        :raises RuntimeError: if initialize() has not been called
        """
        return self.ask(message, session_id).to_dict()

    def end_session(self, session_id: str) -> None:
        self.service.end_session(session_id)

    def _resolve_catalog_dir(self) -> str:
        catalog_dir = self._config.catalog_dir
        if not catalog_dir:
            raise ConfigurationError("catalog_dir is not configured")
        if not os.path.isabs(catalog_dir):
            service_dir = Path(__file__).parent.parent.parent  # admission-agent-service/
            candidate = service_dir / catalog_dir
            if candidate.exists():
                catalog_dir = str(candidate)
        return catalog_dir
