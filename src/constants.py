"""Shared constants for planner-press."""

# Fragment type tags
COVER_TYPE = "cover"
PLANNER_TYPE = "planner"
DEFAULT_TYPE = "default"

# Type tags used by older module catalogues
TYPE_ALIASES = {
    "umschlag": COVER_TYPE,
    "wochenplaner": PLANNER_TYPE,
}

# Page counts a fragment must have
COVER_PAGE_COUNT = 4
COVER_FRONT_PAGES = (0, 1)
COVER_BACK_PAGES = (2, 3)
PLANNER_TEMPLATE_PAGES = 2

# Final booklets are saddle-stitched: page count must be a multiple of this
BOOKLET_MULTIPLE = 4

# Planner window and preview caps
LEAD_IN_DAYS = 7
PREVIEW_WEEK_CAP = 4
PREVIEW_PAGE_CAP = 5

# Weekday tag names (Mon-Fri) on the planner template
DAY_TAGS = ("xA", "xB", "xC", "xD", "xE")
HOLIDAY_TAG_SUFFIX = "_Date"

# Cover tag names
TITLE_TAG = "BOOK_TITLE"
PERIOD_TAG = "FROM_TO"

# Fallback labels for holiday entries without a German name
PUBLIC_HOLIDAY_LABEL = "Feiertag"
SCHOOL_HOLIDAY_LABEL = "Schulferien"

# Source names that mean "no file uploaded yet"
PLACEHOLDER_SOURCES = {"", "notizen.pdf"}
