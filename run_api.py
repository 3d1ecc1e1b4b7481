#!/usr/bin/env python3
"""
Run script for Podcastr API.

This script sets up the Python path and runs the FastAPI application.
"""
import os
import sys
from pathlib import Path

# Add src directory to Python path BEFORE any imports
project_root = Path(__file__).parent.resolve()
src_path = project_root / "src"

# Verify src directory exists
if not src_path.exists():
    print(f"Error: Source directory not found: {src_path}")
    print(f"Current directory: {Path.cwd()}")
    sys.exit(1)

# Add to Python path
src_path_str = str(src_path)
if src_path_str not in sys.path:
    sys.path.insert(0, src_path_str)

# Also set PYTHONPATH environment variable for uvicorn reload
os.environ["PYTHONPATH"] = src_path_str + os.pathsep + os.environ.get("PYTHONPATH", "")

if __name__ == "__main__":
    import uvicorn

    from podcastr.config import Config
    from podcastr.errors import ConfigError

    config = Config()
    try:
        config.validate()
    except ConfigError as e:
        print(f"Error: {e}")
        print("Set it in the environment or in a .env file (see .env.example).")
        sys.exit(1)

    uvicorn.run(
        "podcastr.main:create_app",
        factory=True,
        host=config.HOST,
        port=config.PORT,
        reload=True,
        reload_dirs=[str(project_root / "src")],
    )
