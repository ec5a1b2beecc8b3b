"""Internal constants shared across the library."""

BASE_URL = "https://us.forums.blizzard.com/en/d3"
CATEGORY_PATH = "c/d2r/d2r-general-discussion/49"
USER_AGENT = "bluetracker (+https://github.com/bluetracker)"
DEFAULT_STATE_PATH = "./tracking-data.json"
DEFAULT_POLL_INTERVAL = 15 * 60.0

# Discourse serves the first 20 posts inline; the rest are fetched by id.
POST_CHUNK_SIZE = 20

# ------------------------------------------------------------------
# Webhook embed layout
# ------------------------------------------------------------------

EXCERPT_LIMIT = 1000
EMBED_COLOR = 1016495
EMBED_FIELD_NAME = "Blue post"
FOOTER_TEXT = "Blue tracker"
FOOTER_ICON_URL = "https://i.imgur.com/2rB8UeO.png"
