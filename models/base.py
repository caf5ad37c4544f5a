from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class PostStatus(int, enum.Enum):
    """Blog post publication status"""
    DRAFT = 0
    PUBLISHED = 1


class SyncStatus(str, enum.Enum):
    """Per-post RequestDesk synchronization status"""
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


class SourceType(str, enum.Enum):
    """Document source types understood by the RequestDesk knowledge base"""
    ECOMMERCE_PRODUCT = "ecommerce_product"
    CATEGORY = "category"
    CMS_PAGE = "cms_page"


class ProductStatus(int, enum.Enum):
    """Catalog product status"""
    ENABLED = 1
    DISABLED = 2


class ProductVisibility(int, enum.Enum):
    """Catalog product visibility"""
    NOT_VISIBLE = 1
    IN_CATALOG = 2
    IN_SEARCH = 3
    BOTH = 4


class SyncDirection(str, enum.Enum):
    """Direction of a sync run"""
    IMPORT = "import"
    EXPORT = "export"


class RunStatus(str, enum.Enum):
    """Sync run outcome"""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
