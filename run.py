"""
Dashboard Widget Engine — Application Runner.

Usage:
    python run.py            → Start the FastAPI server
    python run.py --init-db  → Create tables and seed the widget catalog, then exit
"""

import asyncio
import sys

import uvicorn

from dashboard_engine.core.config import settings


def run_fastapi() -> None:
    """Start the FastAPI server."""
    print(f"🚀 FastAPI → http://localhost:{settings.API_PORT}")
    if settings.DEBUG:
        print(f"📄 Docs    → http://localhost:{settings.API_PORT}/api/docs")
    uvicorn.run(
        "dashboard_engine.main:app",
        host="0.0.0.0",
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


async def init_db() -> None:
    """Create missing tables and seed ``dashboard_widgets`` when empty."""
    from dashboard_engine.core.database import db_manager
    from dashboard_engine.services.persistence.sql_store import SqlDashboardStore

    await db_manager.create_all()
    seeded = await SqlDashboardStore(db_manager).seed_widget_types()
    print(f"✅ Tables ready, {seeded} widget type(s) seeded")
    await db_manager.close()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "--init-db":
        asyncio.run(init_db())
    elif len(sys.argv) > 1:
        print("Usage: python run.py [--init-db]")
    else:
        run_fastapi()
