#!/usr/bin/env python3
"""
Script to run the Books API server.
"""

import sys
from pathlib import Path

import uvicorn

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from api.config import config
from utilities.config import config as catalog_config
from utilities.logger import setup_logging


def main():
    """Run the API server."""
    setup_logging(
        log_level=catalog_config.log_level,
        log_format=catalog_config.log_format,
        log_file=catalog_config.get_log_file_path(),
        debug=catalog_config.debug
    )

    print("🚀 Starting Books API Server")
    print(f"📡 Host: {config.host}")
    print(f"🔌 Port: {config.port}")
    print(f"🌐 Debug: {config.debug}")
    print(f"📚 Data file: {catalog_config.get_data_file_path()}")
    print("=" * 50)

    # The store's lock is per process, so the file must have a single writer
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        workers=1,
        log_level=config.log_level.lower(),
        access_log=True
    )


if __name__ == "__main__":
    main()
