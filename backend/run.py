#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

    python run.py            # http://localhost:8000, docs at /docs
"""
import os
from pathlib import Path

import uvicorn

if __name__ == "__main__":
    # .env is resolved relative to backend/
    os.chdir(Path(__file__).parent)
    uvicorn.run(
        "eventbook.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
        log_level="info",
    )
