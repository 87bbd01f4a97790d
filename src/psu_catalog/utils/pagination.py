DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def get_page_info(page: int, page_size: int) -> tuple[int, int]:
    """
    Clamp client-supplied paging values.

    page < 1 -> 1; page_size < 1 -> DEFAULT_PAGE_SIZE; page_size > MAX_PAGE_SIZE -> MAX_PAGE_SIZE
    """
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page, page_size
