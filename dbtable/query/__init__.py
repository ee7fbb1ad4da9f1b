##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
SQL generation for table descriptions.

Modules:
    builder.py: Pure functions assembling SELECT, INSERT, UPDATE, DELETE and COUNT text.
    unique_key.py: Selection of the unique key combination that identifies a row.
"""
