from pydantic import BaseModel
from typing import Optional


UNREADABLE_ROW = "could not read row"


class MappingRow(BaseModel):
    """One line of the admin listing.

    error is set when the stored row could not be decoded; the row is then
    rendered as a placeholder instead of failing the whole page.
    """
    shortcode: str
    url: str
    error: Optional[str] = None

    @classmethod
    def unreadable(cls, error: str) -> "MappingRow":
        return cls(shortcode=UNREADABLE_ROW, url=error, error=error)
