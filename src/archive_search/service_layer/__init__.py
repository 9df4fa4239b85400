"""Service layer: index lifecycle and query orchestration."""

from archive_search.service_layer.index_service import IndexService


__all__ = ["IndexService"]
