"""Food memory records and their on-device cache.

Layout:
    ~/.nomadish/
    ├── nomadish.toml              # Optional config (see nomadish.config)
    └── foodmemories.json          # Local cache: JSON array of memory records

models.py holds the record types, codec.py the JSON mapping shared by the
server and the cache, store.py the whole-file cache itself.
"""
