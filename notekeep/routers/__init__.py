"""
FastAPI routers grouped by area.

Each module exposes an APIRouter which is included by notekeep.app.create_app.
Routers read their services from ``app.state`` and stay free of storage code.
"""
