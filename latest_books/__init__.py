"""
Latest Books - List this year's publications for your favorite authors.

This package provides functionality to:
- Build author searches for iPAC / Horizon Information Portal catalogs
- Fetch the catalog result pages
- Locate publication records on the ID-less result pages
- Keep the titles published this year, minus ignored ones
- Print a plain-text report per author
"""

__version__ = "0.1.0"
__author__ = "Latest Books Team"
