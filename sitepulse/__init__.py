"""SitePulse: web interaction analytics (page views, click heatmaps, scroll depth)."""

__version__ = "0.1.0"
