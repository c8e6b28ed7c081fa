"""HTTP route modules, one APIRouter each."""

from sitepulse.api.routes import analytics, events, health, heatmap, session

__all__ = ["analytics", "events", "health", "heatmap", "session"]
