"""
FastAPI routers grouped by domain (records, settings, projects).

Each module exposes APIRouter objects that the app factory includes. Routers
decode the request, call one service operation and wrap the result in the
{"success": ..., "data"/"error": ...} envelope.
"""
