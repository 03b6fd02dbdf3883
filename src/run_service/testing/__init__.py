from .mock_run_service import MockRunService, ServerHandle, start_server

__all__ = ["MockRunService", "ServerHandle", "start_server"]
