"""Home page data, re-evaluated by the bridge on every request."""

from datetime import date

default = {
    "title": "Home",
    "updated": date.today(),
    "sections": [
        {"id": "intro", "heading": "Welcome"},
        {"id": "news", "heading": "What's new"},
    ],
}
