#!/usr/bin/env python3
"""
Loan Accounts Entry Point

Starts the FastAPI server with the loan accounts API.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from loan_accounts.api import run_server
from loan_accounts.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Loan Accounts API...")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Loan Accounts API...")
