"""Connector settings."""

from pydantic import BaseModel, Field


class ConnectorSettings(BaseModel):
    """Settings for one GraphQL endpoint.

    The pagination-related names describe how the target schema exposes
    paged results: object types implementing ``pagination_interface``
    carry their rows in ``pages_field`` and the row count in
    ``total_field``, and accept a ``limit_argument`` input of
    ``{take, skip}``.
    """

    url: str
    timeout: float = Field(default=30.0, gt=0)
    max_page_size: int = Field(default=1000, gt=0)
    pagination_interface: str = "Paginated"
    pages_field: str = "pages"
    total_field: str = "total"
    page_metadata_fields: list[str] = Field(default_factory=lambda: ["total"])
    limit_argument: str = "limit"
    filter_argument: str = "modifiedSince"
    record_alias: str = "recordFetch"

    def page_size_for(self, requested: int | None) -> int:
        """Clamp a caller-requested page size to the provider maximum."""
        if requested is None:
            return self.max_page_size
        if requested <= 0:
            raise ValueError(f"Page size must be positive, got {requested}")
        return min(requested, self.max_page_size)
