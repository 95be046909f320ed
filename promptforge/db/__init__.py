"""Database models and session management."""

from promptforge.db.models import (
    Template,
    TemplateCreate,
    TemplateListResponse,
    TemplateRead,
    TemplateUpdate,
)
from promptforge.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    drop_all_tables,
    get_async_session,
    init_db,
)

__all__ = [
    # Models
    "Template",
    "TemplateCreate",
    "TemplateUpdate",
    "TemplateRead",
    "TemplateListResponse",
    # Session
    "AsyncSession",
    "get_async_session",
    "create_all_tables",
    "drop_all_tables",
    "init_db",
    "close_db",
]
