#!/usr/bin/env python3
"""
TripScout Backend - Run Script
This script starts the FastAPI backend server
"""

import os
import sys
import subprocess
from pathlib import Path

def print_colored(message, color="blue"):
    """Print colored output"""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "reset": "\033[0m"
    }
    print(f"{colors.get(color, '')}{message}{colors['reset']}")

def check_file_exists(filepath, error_message):
    """Check if a file exists"""
    if not Path(filepath).exists():
        print_colored(f"❌ Error: {error_message}", "red")
        sys.exit(1)

def main():
    print_colored("🚀 Starting TripScout Backend...", "blue")

    # Check if we're in the backend directory
    check_file_exists("app/main.py", "app/main.py not found. Please run this script from the backend directory.")

    # The Geoapify key may come from .env (here or in the project root) or the environment
    if not (Path(".env").exists() or Path("../.env").exists() or os.environ.get("GEOAPIFY_API_KEY")):
        print_colored("⚠️  Warning: no .env file found and GEOAPIFY_API_KEY is not set.", "yellow")
        print("Please create a .env file with at least:")
        print("  GEOAPIFY_API_KEY=your_api_key_here")
        print("Optional settings:")
        print("  ENV=development")
        print("  PORT=5000")
        print("  RATE_LIMIT_WINDOW_MS=900000")
        print("  RATE_LIMIT_MAX_REQUESTS=100")
        print("  ALLOWED_ORIGINS=http://localhost:5173,http://localhost:4173")
        print("  LOGGER=20")
        sys.exit(1)

    # Check if dependencies are installed
    print_colored("🔍 Checking dependencies...", "blue")
    try:
        import fastapi
        import uvicorn
    except ImportError:
        print_colored("❌ Dependencies not installed.", "red")
        print("Installing dependencies...")
        subprocess.run([sys.executable, "-m", "pip", "install", "-e", ".."], check=True)

    port = os.environ.get("PORT", "5000")

    # Start the server
    print_colored("✅ All checks passed!", "green")
    print_colored("🌐 Starting Uvicorn server...", "blue")
    print(f"📍 Backend will be available at: http://localhost:{port}")
    print(f"📍 API Health check: http://localhost:{port}/health")
    print(f"📍 API Documentation: http://localhost:{port}/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print()

    # Run uvicorn with auto-reload for development
    command = [
        sys.executable, "-m", "uvicorn",
        "app.main:app",
        "--host", "0.0.0.0",
        "--port", port
    ]
    if os.environ.get("ENV", "development").lower() != "production":
        command.append("--reload")

    try:
        subprocess.run(command, check=True)
    except KeyboardInterrupt:
        print_colored("\n👋 Backend server stopped.", "yellow")
    except subprocess.CalledProcessError as e:
        print_colored(f"\n❌ Error starting server: {e}", "red")
        sys.exit(1)

if __name__ == "__main__":
    main()
