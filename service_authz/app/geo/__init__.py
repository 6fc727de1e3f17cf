"""
Geography package.

Holds the process-wide region registry used to expand region names in
permissions into ISO-2 country codes. ``GLOBAL`` and ``*`` are universal
regions: membership is answered by a predicate rather than a country list.
"""
