"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every resource uses: the DB handle, the
query feature builder, generic CRUD, the flag toggles, uploads and settings.
Keep resource-specific columns and business rules in the corresponding
feature package (e.g. `auctions/`).
"""
