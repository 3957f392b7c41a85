from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

def get_utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)

def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime to ISO format, treating naive values as UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()

def paginate_results(items: List[Any], page: int = 1, page_size: int = 10) -> Dict[str, Any]:
    """
    Paginate a list of items

    Args:
        items: List of items to paginate
        page: Page number (1-based)
        page_size: Number of items per page

    Returns:
        Dict containing paginated results and metadata
    """
    start = (page - 1) * page_size
    end = start + page_size

    total_items = len(items)
    total_pages = (total_items + page_size - 1) // page_size

    return {
        "items": items[start:end],
        "pagination": {
            "current_page": page,
            "total_pages": total_pages,
            "page_size": page_size,
            "total_items": total_items
        }
    }
