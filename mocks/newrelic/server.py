"""
Mock New Relic REST API (v2) serving application, host and metric data.
"""

from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass, field
from fastapi import FastAPI, Header, HTTPException, Query

from shared.logging import get_logger


@dataclass
class MockHost:
    """Mock application host."""
    id: int
    calls_per_minute: Union[int, float]


@dataclass
class MockApplication:
    """Mock New Relic application."""
    id: int
    name: str
    requests_per_minute: Union[int, float]
    hosts: List[MockHost] = field(default_factory=list)


class MockNewRelicServer:
    """Mock New Relic server implementation."""

    def __init__(self, api_key: str = "mock-api-key", port: int = 8090):
        self.api_key = api_key
        self.port = port
        self.logger = get_logger("mock.newrelic")
        self.app = FastAPI(title="Mock New Relic", version="1.0.0")

        self.applications: Dict[int, MockApplication] = {}
        self._create_default_applications()

        self._setup_routes()

    def _create_default_applications(self):
        """Create default applications with sample data."""
        self.add_application(MockApplication(
            id=1234,
            name="marketplace",
            requests_per_minute=240.5,
            hosts=[MockHost(id=245, calls_per_minute=120), MockHost(id=246, calls_per_minute=0)]
        ))
        self.add_application(MockApplication(
            id=5678,
            name="checkout",
            requests_per_minute=98,
            hosts=[MockHost(id=301, calls_per_minute=50.75), MockHost(id=302, calls_per_minute=47)]
        ))

    def add_application(self, application: MockApplication):
        self.applications[application.id] = application

    def _setup_routes(self):
        """Set up mock API routes."""

        @self.app.get("/v2/applications.json")
        async def list_applications(x_api_key: Optional[str] = Header(None)):
            self._authorize(x_api_key)
            return {
                "applications": [
                    {"id": app.id, "name": app.name}
                    for app in self.applications.values()
                ]
            }

        @self.app.get("/v2/applications/{app_id}/hosts.json")
        async def list_hosts(app_id: int, x_api_key: Optional[str] = Header(None)):
            self._authorize(x_api_key)
            app = self._application(app_id)
            return {"application_hosts": [{"id": host.id} for host in app.hosts]}

        @self.app.get("/v2/applications/{app_id}/metrics/data.json")
        async def application_metrics(
            app_id: int,
            names: List[str] = Query([], alias="names[]"),
            values: List[str] = Query([], alias="values[]"),
            x_api_key: Optional[str] = Header(None)
        ):
            self._authorize(x_api_key)
            app = self._application(app_id)
            return self._metric_data(names, values, {"requests_per_minute": app.requests_per_minute})

        @self.app.get("/v2/applications/{app_id}/hosts/{host_id}/metrics/data.json")
        async def host_metrics(
            app_id: int,
            host_id: int,
            names: List[str] = Query([], alias="names[]"),
            values: List[str] = Query([], alias="values[]"),
            x_api_key: Optional[str] = Header(None)
        ):
            self._authorize(x_api_key)
            app = self._application(app_id)
            host = next((h for h in app.hosts if h.id == host_id), None)
            if host is None:
                raise HTTPException(status_code=404, detail="Host not found")
            return self._metric_data(names, values, {"calls_per_minute": host.calls_per_minute})

    def _authorize(self, api_key: Optional[str]):
        if api_key != self.api_key:
            self.logger.warning("Rejected request with invalid API key")
            raise HTTPException(status_code=403, detail="Invalid API key")

    def _application(self, app_id: int) -> MockApplication:
        app = self.applications.get(app_id)
        if app is None:
            raise HTTPException(status_code=404, detail="Application not found")
        return app

    def _metric_data(self, names: List[str], values: List[str], available: Dict[str, Any]) -> Dict[str, Any]:
        """Build a summarized metric_data payload with a single timeslice."""
        names = names or ["HttpDispatcher"]
        selected = {v: available[v] for v in values if v in available} if values else dict(available)
        return {
            "metric_data": {
                "from": "2024-01-01T00:00:00+00:00",
                "to": "2024-01-01T00:30:00+00:00",
                "metrics_not_found": [],
                "metrics_found": names,
                "metrics": [
                    {
                        "name": name,
                        "timeslices": [
                            {
                                "from": "2024-01-01T00:00:00+00:00",
                                "to": "2024-01-01T00:30:00+00:00",
                                "values": selected
                            }
                        ]
                    }
                    for name in names
                ]
            }
        }


def create_app(api_key: str = "mock-api-key"):
    """Create mock New Relic application."""
    server = MockNewRelicServer(api_key=api_key)
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
