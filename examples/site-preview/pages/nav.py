"""Navigation entries, exported as public names."""

links = [
    {"href": "/", "label": "Home"},
    {"href": "/docs/", "label": "Docs"},
]
show_search = True
