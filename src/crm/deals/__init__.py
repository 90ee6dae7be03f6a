"""Deal pipeline module -- schemas, in-memory store, list filters and list controller.

Provides Pydantic schemas (Deal, DealCreate, DealPatch, DealStats), the
DealStore that owns the process-local collection, tagged-union list filters,
and DealListController which derives the visible list for a pipeline view.
"""
