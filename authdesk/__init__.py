"""AuthDesk: identity, roles and permissions on SQLAlchemy with a NiceGUI front."""

__version__ = "0.1.0"
