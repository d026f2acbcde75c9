#!/usr/bin/env python3
"""
Personal Banking Service Entry Point

Starts the FastAPI server that serves the remote banking contract.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from personal_banking.api import run_server
from personal_banking.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("🏦 Starting Personal Banking Service...")
    print(f"💾 Ledger stored in {config.database_path}")
    print("💰 All balances use Decimal precision")
    print(f"🌐 API available at: http://{config.api_host}:{config.api_port}")
    print(f"📚 Documentation at: http://{config.api_host}:{config.api_port}/docs")
    print()
    
    try:
        run_server(config)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Personal Banking Service...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
