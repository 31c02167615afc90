"""
Pagination Utilities.

Offset-based page windows for the note list. A window is derived from
the total row count and the current page; nothing here touches the store.
"""

from dataclasses import dataclass

PAGE_SIZE = 10


@dataclass(frozen=True)
class PageWindow:
    """
    Bounded view of one page of notes.

    Pages are 1-based. total_pages is never below 1, so an empty store
    still has a single (empty) page.
    """

    page: int
    page_size: int
    total_rows: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @property
    def offset(self) -> int:
        """Number of rows to skip to reach this page."""
        return (self.page - 1) * self.page_size


def total_pages_for(total_rows: int, page_size: int = PAGE_SIZE) -> int:
    """Number of pages needed for total_rows, minimum 1."""
    return max(1, (total_rows + page_size - 1) // page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Keep a page number inside [1, total_pages]."""
    return min(max(page, 1), max(total_pages, 1))


def paginate(
    total_rows: int,
    current_page: int,
    page_size: int = PAGE_SIZE,
) -> PageWindow:
    """
    Compute the page window for the current page.

    Args:
        total_rows: Total number of notes in the store
        current_page: 1-based page the session is on
        page_size: Rows per page

    Returns:
        PageWindow with total_pages and next/prev availability
    """
    total_pages = total_pages_for(total_rows, page_size)
    return PageWindow(
        page=current_page,
        page_size=page_size,
        total_rows=total_rows,
        total_pages=total_pages,
        has_next=current_page < total_pages,
        has_prev=current_page > 1,
    )
