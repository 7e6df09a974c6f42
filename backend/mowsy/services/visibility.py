"""Geo-visibility filter for job and equipment listings.

A listing is scoped either to viewers sharing its zip code or to viewers in
the same elementary-school district. Matching is exact string equality on the
viewer's current profile values; there is no distance or radius math.
"""

from typing import Optional, Protocol, Sequence, TypeVar

from mowsy.models.enums import Visibility


class Listing(Protocol):
    user_id: int
    visibility: Visibility
    zip_code: Optional[str]
    elementary_school_district_name: Optional[str]


class Viewer(Protocol):
    id: int
    zip_code: Optional[str]
    elementary_school_district_name: Optional[str]


L = TypeVar("L", bound=Listing)


def is_visible_to(listing: Listing, viewer: Viewer) -> bool:
    """Location match for a single listing. Ownership is not considered here."""
    if listing.visibility == Visibility.ZIP_CODE:
        return bool(viewer.zip_code) and listing.zip_code == viewer.zip_code
    if listing.visibility == Visibility.SCHOOL_DISTRICT:
        return (
            bool(viewer.elementary_school_district_name)
            and listing.elementary_school_district_name == viewer.elementary_school_district_name
        )
    return False


def filter_visible(listings: Sequence[L], viewer: Optional[Viewer], enabled: bool) -> list[L]:
    """Return the listings ``viewer`` may see.

    With the filter disabled or no viewer, the input comes back unchanged,
    including the viewer's own listings. Otherwise the viewer's own listings
    are dropped and the rest must match on zip code or district according to
    their visibility mode.
    """
    if not enabled or viewer is None:
        return list(listings)

    return [
        listing
        for listing in listings
        if listing.user_id != viewer.id and is_visible_to(listing, viewer)
    ]
