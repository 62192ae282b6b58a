#!/usr/bin/env python3
"""
Catalog Backend Startup Script
This script starts the FastAPI server.
"""

import logging
import os

import uvicorn

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))

    logger.info("Starting Catalog Backend...")
    logger.info("Available endpoints:")
    logger.info("  - Health Check: GET /health")
    logger.info("  - Products: GET/POST /products, GET/PATCH/DELETE /products/{id}")
    logger.info("  - Variants: GET /variants/detail, PATCH /variants/{id}/set-default")
    logger.info("  - Sections: GET /sections/{key}")
    logger.info("  - Reviews: GET/POST /products/{id}/reviews")
    logger.info(f"  - API Docs: http://localhost:{port}/docs")

    uvicorn.run(
        "catalog.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level="info"
    )
