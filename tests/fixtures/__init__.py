##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
This directory holds fixture definitions loaded as pytest plugins by
`tests/conftest.py`, grouped by the part of dbtable they support:

- `db.py`: database handles (`FakeDatabase`, a temporary SQLite database).
- `debug.py`: debug sinks.
- `tables.py`: sample table classes and their descriptions.
"""
