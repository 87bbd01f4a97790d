from .pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, get_page_info

__all__ = ["DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "get_page_info"]
