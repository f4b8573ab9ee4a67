#!/usr/bin/env python3
"""
Startup Tracker - Startup Script
"""

import uvicorn

from startup_tracker.web.main import server_settings

if __name__ == "__main__":
    settings = server_settings()
    base_url = f"http://localhost:{settings['port']}"

    print("🚀 Starting Startup Tracker...")
    print(f"🔄 Trigger a refresh at: {base_url}/api/scrape")
    print(f"📚 API documentation at: {base_url}/docs")
    print(f"💚 Health check at: {base_url}/health")
    print("\nPress Ctrl+C to stop the server\n")

    uvicorn.run(
        "startup_tracker.web.main:create_app",
        factory=True,
        **settings,
    )
