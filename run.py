"""
Doccure Booking Service — Entry Point
"""
import os
import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 4000))
    uvicorn.run("doccure.app:app", host="0.0.0.0", port=port, log_level="info")
