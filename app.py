#!/usr/bin/env python3
"""
Local entry point for the Postman to Insomnia conversion service
"""
import os

from service.main import app

PORT = int(os.environ.get('PORT', 5000))

if __name__ == "__main__":
    print("🚀 Starting Postman to Insomnia Converter...")
    print(f"📊 Running on port {PORT}")
    print("✅ Thread pool conversion enabled")

    app.run(
        host='0.0.0.0',
        port=PORT,
        debug=False,
        threaded=True
    )
