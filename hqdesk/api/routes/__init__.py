from . import catalog, connection, finder, records

__all__ = ["catalog", "connection", "finder", "records"]
