"""
Persistence adapters.

These modules encapsulate how data is stored and retrieved (JSON documents
under the Claude directory). Services depend on them rather than on files.
"""
